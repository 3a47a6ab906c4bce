"""Card summaries for listing pages, cached per collection and category"""

import re
from typing import Mapping

from pydantic import BaseModel, ConfigDict

from mdsite.core.models import CardSummary, Collection, DocRef, ParsedDocument
from mdsite.core.ordering import ResolvedOrdering


ELLIPSIS = "…"
SENTENCE_END_RE = re.compile(r'[.!?](?=\s|$)')


def truncate_description(text: str, budget: int) -> str:
    """Shorten text to at most budget characters without splitting a word.

    Prefers the last complete sentence when it keeps at least half the budget,
    otherwise cuts at the last word boundary and appends an ellipsis. A single
    word longer than the budget is kept whole.
    """
    text = " ".join(text.split())
    if len(text) <= budget:
        return text

    window = text[:budget]
    sentence_ends = [m.end() for m in SENTENCE_END_RE.finditer(window)]
    if sentence_ends and sentence_ends[-1] >= budget // 2:
        return window[:sentence_ends[-1]]

    cut = window.rfind(" ")
    if cut <= 0:
        first_word = text.split(" ", 1)[0]
        return first_word + ELLIPSIS
    return window[:cut].rstrip(" ,;:-") + ELLIPSIS


def normalize_base_path(base_path: str) -> str:
    """'' for the site root, otherwise '/path' with no trailing slash."""
    stripped = (base_path or "").strip("/")
    return f"/{stripped}" if stripped else ""


def card_link(base_path: str, collection: Collection, category: str, slug: str) -> str:
    return f"{normalize_base_path(base_path)}/{collection.value}/{category}/{slug}"


def to_card(doc: ParsedDocument, budget: int, base_path: str = "") -> CardSummary:
    return CardSummary(
        id=doc.id,
        title=doc.title,
        description=truncate_description(doc.description, budget),
        collection=doc.collection,
        category=doc.category,
        subcategory=doc.subcategory,
        tags=doc.tags,
        published_on=doc.published_on,
        minutes_read=doc.minutes_read,
        link=card_link(base_path, doc.collection, doc.category, doc.id),
        is_draft=doc.is_draft,
        featured_rank=doc.featured_rank,
    )


class CollectionCards(BaseModel):
    model_config = ConfigDict(frozen=True)

    collection: Collection
    cards: tuple[CardSummary, ...] = ()                      # whole-collection order, pinned first
    by_category: dict[str, tuple[CardSummary, ...]] = {}

    @property
    def featured(self) -> tuple[CardSummary, ...]:
        """Cards with a featuredRank, lowest rank first."""
        ranked = [c for c in self.cards if c.featured_rank is not None and not c.is_draft]
        return tuple(sorted(ranked, key=lambda c: (c.featured_rank, c.id)))


class CardCache(BaseModel):
    """Every card of one build. Rebuilt wholesale; never patched."""
    model_config = ConfigDict(frozen=True)

    collections: dict[Collection, CollectionCards] = {}

    def card(self, ref: DocRef) -> CardSummary | None:
        group = self.collections.get(ref.collection)
        if group is None:
            return None
        return next((c for c in group.cards if c.id == ref.id), None)

    def listing(self, collection: Collection, category: str | None = None) -> tuple[CardSummary, ...]:
        group = self.collections.get(collection)
        if group is None:
            return ()
        return group.cards if category is None else group.by_category.get(category, ())

    def to_dict(self, collection: Collection) -> dict:
        group = self.collections[collection]
        return {
            "collection": collection.value,
            "cards": [c.model_dump(mode="json") for c in group.cards],
            "categories": {cat: [c.id for c in cards] for cat, cards in group.by_category.items()},
            "featured": [c.id for c in group.featured],
        }


def build_card_cache(
    ordering: ResolvedOrdering,
    docs: Mapping[DocRef, ParsedDocument],
    budget: int = 160,
    base_path: str = "",
    ) -> CardCache:
    """Cards for every document of an already visibility-masked ordering, in resolved order."""
    collections = {}
    for collection, seq in ordering.collections.items():
        by_category = {
            cat: tuple(to_card(docs[ref], budget, base_path) for ref in seq.refs(cat))
            for cat in seq.categories
        }
        by_id = {card.id: card for cards in by_category.values() for card in cards}
        collections[collection] = CollectionCards(
            collection=collection,
            cards=tuple(by_id[doc_id] for doc_id in seq.ids),
            by_category=by_category,
        )
    return CardCache(collections=collections)

"""Draft visibility mask for derived views"""

from dataclasses import dataclass
from typing import Iterable, Mapping

from mdsite.config import Settings
from mdsite.core.models import DocRef, ParsedDocument
from mdsite.core.ordering import CollectionSequence, ResolvedOrdering


@dataclass(frozen=True)
class DraftPolicy:
    """Drafts are visible in development builds, or in production when explicitly requested."""
    include_drafts: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "DraftPolicy":
        return cls(include_drafts=settings.build_mode == "development" or settings.show_drafts)

    def is_visible(self, doc: ParsedDocument) -> bool:
        return self.include_drafts or not doc.is_draft

    def mask(self, refs: Iterable[DocRef], docs: Mapping[DocRef, ParsedDocument]) -> tuple[DocRef, ...]:
        return tuple(r for r in refs if self.is_visible(docs[r]))

    def mask_ordering(self, ordering: ResolvedOrdering, docs: Mapping[DocRef, ParsedDocument]) -> ResolvedOrdering:
        """Drop hidden documents from every sequence; categories left empty are dropped too."""
        if self.include_drafts:
            return ordering
        collections = {}
        for collection, seq in ordering.collections.items():
            by_category = {
                cat: tuple(r.id for r in self.mask(seq.refs(cat), docs))
                for cat in seq.categories
            }
            by_category = {cat: ids for cat, ids in by_category.items() if ids}
            collections[collection] = CollectionSequence(
                collection=collection,
                categories=tuple(c for c in seq.categories if c in by_category),
                by_category=by_category,
                pinned=tuple(r.id for r in self.mask(
                    (DocRef(collection=collection, id=i) for i in seq.pinned), docs,
                )),
            )
        return ResolvedOrdering(collections=collections)

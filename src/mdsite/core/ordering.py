"""Ordering engine: explicit per-category order first, fallback policy for the rest"""

import logging
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

from mdsite.core.errors import IssueKind, ValidationIssue, issue
from mdsite.core.models import (
    Collection, CollectionOrdering, DocRef, FallbackPolicy, OrderingConfig, ParsedDocument,
)


logger = logging.getLogger(__name__)


class CollectionSequence(BaseModel):
    """Resolved order for one collection."""
    model_config = ConfigDict(frozen=True)

    collection: Collection
    categories: tuple[str, ...] = ()
    by_category: dict[str, tuple[str, ...]] = {}
    pinned: tuple[str, ...] = ()

    @property
    def ids(self) -> tuple[str, ...]:
        """Whole-collection order: pinned ids first, then categories in resolved order."""
        rest = tuple(
            doc_id for cat in self.categories for doc_id in self.by_category.get(cat, ())
            if doc_id not in self.pinned
        )
        return self.pinned + rest

    def refs(self, category: Optional[str] = None) -> tuple[DocRef, ...]:
        ids = self.by_category.get(category, ()) if category is not None else self.ids
        return tuple(DocRef(collection=self.collection, id=i) for i in ids)


class ResolvedOrdering(BaseModel):
    model_config = ConfigDict(frozen=True)

    collections: dict[Collection, CollectionSequence] = {}

    def sequence(self, collection: Collection) -> CollectionSequence:
        return self.collections.get(collection) or CollectionSequence(collection=collection)

    def rank(self) -> dict[DocRef, int]:
        """Site-wide position of every document: collection declaration order, then resolved order."""
        ranks: dict[DocRef, int] = {}
        for collection in Collection:
            for ref in self.sequence(collection).refs():
                ranks[ref] = len(ranks)
        return ranks

    def to_dict(self) -> dict:
        return {
            c.value: {
                "categories": list(seq.categories),
                "pinned": list(seq.pinned),
                "order": {cat: list(ids) for cat, ids in seq.by_category.items()},
            }
            for c, seq in self.collections.items()
        }


def sort_by_policy(docs: Iterable[ParsedDocument], policy: FallbackPolicy) -> list[ParsedDocument]:
    """Total order for documents under a fallback policy; ties always break on id."""
    if policy is FallbackPolicy.natural:
        return sorted(docs, key=lambda d: (d.source_path, d.id))
    if policy is FallbackPolicy.alphabetical:
        return sorted(docs, key=lambda d: (d.title.casefold(), d.id))
    return sorted(docs, key=lambda d: (-d.published_on.toordinal(), d.title.casefold(), d.id))


def _missing(source: str, field: str, message: str, collection: Collection) -> ValidationIssue:
    logger.warning("%s:%s: %s", source, field, message)
    return issue(IssueKind.ordering_reference_not_found, source, message, field=field, collection=collection)


def resolve_category_order(
    docs: list[ParsedDocument],
    declared: list[str],
    policy: FallbackPolicy,
    *,
    collection: Collection,
    category: str,
    source: str = "ordering.yaml",
    ) -> tuple[tuple[str, ...], list[ValidationIssue]]:
    """Place declared ids in declared order, then append the rest by policy.

    Declared ids with no matching document are dropped with a warning.
    """
    by_id = {d.id: d for d in docs}
    ordered: list[str] = []
    warnings: list[ValidationIssue] = []
    for doc_id in declared:
        if doc_id in ordered:
            continue
        if doc_id not in by_id:
            warnings.append(_missing(
                source, f"{collection.value}.order.{category}",
                f"'{doc_id}' does not match any document in {collection.value}/{category}", collection,
            ))
            continue
        ordered.append(doc_id)
    placed = set(ordered)
    ordered.extend(d.id for d in sort_by_policy((d for d in docs if d.id not in placed), policy))
    return tuple(ordered), warnings


def resolve_collection(
    collection: Collection,
    docs: list[ParsedDocument],
    config: CollectionOrdering,
    source: str = "ordering.yaml",
    ) -> tuple[CollectionSequence, list[ValidationIssue]]:
    by_category: dict[str, list[ParsedDocument]] = {}
    for doc in docs:
        by_category.setdefault(doc.category, []).append(doc)

    warnings: list[ValidationIssue] = []
    categories: list[str] = []
    for cat in config.categories:
        if cat in categories:
            continue
        if cat not in by_category:
            warnings.append(_missing(
                source, f"{collection.value}.categories",
                f"category '{cat}' has no documents in {collection.value}", collection,
            ))
            continue
        categories.append(cat)
    categories.extend(sorted(c for c in by_category if c not in categories))

    for cat in sorted(config.order):
        if cat not in by_category:
            warnings.append(_missing(
                source, f"{collection.value}.order",
                f"category '{cat}' has no documents in {collection.value}", collection,
            ))

    resolved: dict[str, tuple[str, ...]] = {}
    for cat in categories:
        entry = config.order.get(cat)
        ids, cat_warnings = resolve_category_order(
            by_category[cat], entry.items if entry else [], config.policy_for(cat),
            collection=collection, category=cat, source=source,
        )
        resolved[cat] = ids
        warnings.extend(cat_warnings)

    known = {d.id for d in docs}
    pinned: list[str] = []
    for doc_id in config.pinned:
        if doc_id in pinned:
            continue
        if doc_id not in known:
            warnings.append(_missing(
                source, f"{collection.value}.pinned",
                f"pinned '{doc_id}' does not match any document in {collection.value}", collection,
            ))
            continue
        pinned.append(doc_id)

    seq = CollectionSequence(
        collection=collection, categories=tuple(categories), by_category=resolved, pinned=tuple(pinned),
    )
    return seq, warnings


def resolve_ordering(
    docs: list[ParsedDocument],
    config: OrderingConfig,
    source: str = "ordering.yaml",
    ) -> tuple[ResolvedOrdering, list[ValidationIssue]]:
    """Resolve every collection present in docs. A pure function of docs and config."""
    grouped: dict[Collection, list[ParsedDocument]] = {}
    for doc in docs:
        grouped.setdefault(doc.collection, []).append(doc)

    collections: dict[Collection, CollectionSequence] = {}
    warnings: list[ValidationIssue] = []
    for collection in Collection:
        if collection not in grouped:
            continue
        seq, seq_warnings = resolve_collection(collection, grouped[collection], config.for_collection(collection), source)
        collections[collection] = seq
        warnings.extend(seq_warnings)
    return ResolvedOrdering(collections=collections), warnings

"""Prev/next chains per category, collection, and tag scope"""

from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict

from mdsite.core.models import DocRef, NavigationEntry, NavScope, NavScopeKind
from mdsite.core.ordering import ResolvedOrdering
from mdsite.core.tags import TagIndex


def build_chain(scope: NavScope, refs: Sequence[DocRef]) -> list[NavigationEntry]:
    """Link a sequence pairwise; the first has no prev and the last has no next."""
    last = len(refs) - 1
    return [
        NavigationEntry(
            document=ref,
            scope=scope,
            prev=refs[i - 1] if i > 0 else None,
            next=refs[i + 1] if i < last else None,
        )
        for i, ref in enumerate(refs)
    ]


class NavigationIndex(BaseModel):
    """All chains of one build, keyed by scope, with a per-document lookup."""
    model_config = ConfigDict(frozen=True)

    chains: dict[NavScope, tuple[NavigationEntry, ...]] = {}

    def for_document(self, ref: DocRef) -> list[NavigationEntry]:
        return [e for chain in self.chains.values() for e in chain if e.document == ref]

    def entry(self, ref: DocRef, kind: NavScopeKind, key: Optional[str] = None) -> Optional[NavigationEntry]:
        """The document's entry in the first matching scope of the given kind (and key)."""
        for e in self.for_document(ref):
            if e.scope.kind is kind and (key is None or e.scope.key == key):
                return e
        return None

    def lookup(self) -> dict[str, list[NavigationEntry]]:
        """Document key -> entries, the shape page renderers consume."""
        table: dict[str, list[NavigationEntry]] = {}
        for chain in self.chains.values():
            for e in chain:
                table.setdefault(e.document.key, []).append(e)
        return table

    def to_dict(self) -> dict:
        return {
            str(scope): [
                {
                    "id": e.document.key,
                    "prev": e.prev.key if e.prev else None,
                    "next": e.next.key if e.next else None,
                }
                for e in chain
            ]
            for scope, chain in self.chains.items()
        }


def build_navigation(ordering: ResolvedOrdering, tags: TagIndex) -> NavigationIndex:
    """Chains for every category, collection, and tag of an already visibility-masked ordering."""
    chains: dict[NavScope, tuple[NavigationEntry, ...]] = {}
    for collection, seq in ordering.collections.items():
        for category in seq.categories:
            scope = NavScope(kind=NavScopeKind.category, key=f"{collection.value}/{category}")
            chains[scope] = tuple(build_chain(scope, seq.refs(category)))
        scope = NavScope(kind=NavScopeKind.collection, key=collection.value)
        chains[scope] = tuple(build_chain(scope, seq.refs()))
    for tag_id, refs in tags.entries.items():
        scope = NavScope(kind=NavScopeKind.tag, key=tag_id)
        chains[scope] = tuple(build_chain(scope, refs))
    return NavigationIndex(chains={s: c for s, c in chains.items() if c})

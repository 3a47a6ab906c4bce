"""Tag vocabulary checks and the tag -> ordered documents index"""

from typing import Mapping

from pydantic import BaseModel, ConfigDict

from mdsite.core.drafts import DraftPolicy
from mdsite.core.errors import IssueKind, ValidationIssue, issue
from mdsite.core.models import DocRef, ParsedDocument, TagRegistry
from mdsite.core.ordering import ResolvedOrdering


class TagIndex(BaseModel):
    """Tag id -> documents, in site order. Only tags with at least one document appear."""
    model_config = ConfigDict(frozen=True)

    entries: dict[str, tuple[DocRef, ...]] = {}

    def refs(self, tag_id: str) -> tuple[DocRef, ...]:
        return self.entries.get(tag_id, ())

    def counts(self) -> dict[str, int]:
        return {tag: len(refs) for tag, refs in self.entries.items()}

    def to_dict(self) -> dict:
        return {tag: [r.key for r in refs] for tag, refs in self.entries.items()}


def check_tags(docs: list[ParsedDocument], registry: TagRegistry) -> list[ValidationIssue]:
    """Report tags missing from the registry and tags not allowed in the document's category."""
    issues: list[ValidationIssue] = []
    for doc in docs:
        for tag_id in doc.tags:
            tag = registry.get(tag_id)
            if tag is None:
                issues.append(issue(
                    IssueKind.unknown_tag, doc.source_path,
                    f"tag '{tag_id}' is not in the tag registry",
                    field="tags", collection=doc.collection,
                ))
            elif not tag.allows(doc.category):
                issues.append(issue(
                    IssueKind.disallowed_tag, doc.source_path,
                    f"tag '{tag_id}' is not allowed in category '{doc.category}' "
                    f"(allowed: {', '.join(tag.categories)})",
                    field="tags", collection=doc.collection,
                ))
    return issues


def build_tag_index(ordering: ResolvedOrdering, docs: Mapping[DocRef, ParsedDocument]) -> TagIndex:
    """Group ordered documents by tag; each tag list follows the site-wide resolved order."""
    grouped: dict[str, list[DocRef]] = {}
    for ref in ordering.rank():          # insertion order is rank order
        for tag_id in docs[ref].tags:
            refs = grouped.setdefault(tag_id, [])
            if ref not in refs:
                refs.append(ref)
    return TagIndex(entries={tag: tuple(grouped[tag]) for tag in sorted(grouped)})


def mask_tag_index(index: TagIndex, policy: DraftPolicy, docs: Mapping[DocRef, ParsedDocument]) -> TagIndex:
    entries = {tag: policy.mask(refs, docs) for tag, refs in index.entries.items()}
    return TagIndex(entries={tag: refs for tag, refs in entries.items() if refs})

"""Validation: per-collection schemas, cross-document rules, and the aggregated report"""

import logging
from typing import Iterable

from pydantic import BaseModel, ConfigDict

from mdsite.core.errors import IssueKind, Severity, ValidationIssue, issue
from mdsite.core.extract.metadata import coerce_date
from mdsite.core.models import CategoryRegistry, Collection, ParsedDocument, Registries
from mdsite.core.schema import schema_issues
from mdsite.core.tags import check_tags


logger = logging.getLogger(__name__)


class ValidationReport(BaseModel):
    """Every issue found in one build, sorted by file, field, and kind."""
    model_config = ConfigDict(frozen=True)

    issues: tuple[ValidationIssue, ...] = ()

    @classmethod
    def of(cls, issues: Iterable[ValidationIssue]) -> "ValidationReport":
        return cls(issues=tuple(sorted(issues, key=lambda i: (i.path, i.field or "", i.kind.value, i.message))))

    def merged(self, more: Iterable[ValidationIssue]) -> "ValidationReport":
        return ValidationReport.of([*self.issues, *more])

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity is Severity.error]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity is Severity.warning]

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def failed_collections(self) -> set[Collection]:
        """Collections with at least one error; these produce no derived views."""
        return {Collection(i.collection) for i in self.errors if i.collection}

    def to_dict(self) -> dict:
        return {
            "errors": len(self.errors),
            "warnings": len(self.warnings),
            "issues": [
                {"severity": i.severity.value, **i.model_dump(mode="json")}
                for i in self.issues
            ],
        }


def _required_text(doc: ParsedDocument) -> list[ValidationIssue]:
    issues = []
    if not doc.title:
        issues.append(issue(
            IssueKind.missing_required_field, doc.source_path,
            "no level-1 heading and no title in the metadata block",
            field="title", collection=doc.collection,
        ))
    if not doc.description:
        issues.append(issue(
            IssueKind.missing_required_field, doc.source_path,
            "no paragraph between the title and the first section, and no description in the metadata block",
            field="description", collection=doc.collection,
        ))
    return issues


def _subcategory(doc: ParsedDocument, categories: CategoryRegistry) -> list[ValidationIssue]:
    """Subcategories are checked only for collections that declare their categories."""
    if doc.subcategory is None or not categories.collections.get(doc.collection):
        return []
    entry = categories.get(doc.collection, doc.category)
    if entry is None:
        message = f"category '{doc.category}' is not declared for {doc.collection.value}"
    elif doc.subcategory not in entry.subcategories:
        message = (
            f"'{doc.subcategory}' is not a subcategory of '{doc.category}' "
            f"(allowed: {', '.join(entry.subcategories) or 'none'})"
        )
    else:
        return []
    return [issue(IssueKind.invalid_enum_value, doc.source_path, message, field="subcategory", collection=doc.collection)]


def _dates(doc: ParsedDocument) -> list[ValidationIssue]:
    value = doc.metadata.get("lastUpdatedOn")
    if value is None:
        return []
    if coerce_date(value) is None:
        return [issue(
            IssueKind.invalid_field_type, doc.source_path,
            f"'{value}' is not a calendar date (expected YYYY-MM-DD)",
            field="lastUpdatedOn", collection=doc.collection,
        )]
    if doc.last_updated_on < doc.published_on:
        return [issue(
            IssueKind.stale_last_updated, doc.source_path,
            f"lastUpdatedOn {doc.last_updated_on} is earlier than publishedOn {doc.published_on}",
            field="lastUpdatedOn", collection=doc.collection,
        )]
    return []


def duplicate_slugs(docs: list[ParsedDocument]) -> list[ValidationIssue]:
    """One DuplicateSlug error per document whose id is shared within its collection."""
    seen: dict[tuple[Collection, str], list[ParsedDocument]] = {}
    for doc in docs:
        seen.setdefault((doc.collection, doc.id), []).append(doc)

    issues = []
    for (collection, doc_id), group in seen.items():
        if len(group) < 2:
            continue
        for doc in group:
            others = ", ".join(d.source_path for d in group if d is not doc)
            issues.append(issue(
                IssueKind.duplicate_slug, doc.source_path,
                f"id '{doc_id}' is also used by {others}",
                field="id", collection=collection,
            ))
    return issues


def validate_documents(docs: list[ParsedDocument], registries: Registries) -> ValidationReport:
    """Collect every schema and cross-document violation. Documents are never modified."""
    issues: list[ValidationIssue] = []
    for doc in docs:
        issues.extend(schema_issues(doc))
        issues.extend(_required_text(doc))
        issues.extend(_subcategory(doc, registries.categories))
        issues.extend(_dates(doc))
    issues.extend(duplicate_slugs(docs))
    issues.extend(check_tags(docs, registries.tags))

    report = ValidationReport.of(issues)
    for w in report.warnings:
        logger.warning("%s", w)
    return report

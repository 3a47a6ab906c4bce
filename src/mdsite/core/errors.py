"""Exception hierarchy and the build issue taxonomy"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class MdsiteError(Exception):
    """Base exception for mdsite."""


class UnreadableSource(MdsiteError):
    """A source file could not be read or decoded. Fatal for the whole build."""

    def __init__(self, path, cause: Exception = None):
        self.path = str(path)
        super().__init__(f"Cannot read {path}: {cause}" if cause else f"Cannot read {path}")


class InvalidDatePrefix(MdsiteError):
    """A document name does not start with a valid YYYY-MM-DD- prefix."""


class InvalidMetadataBlock(MdsiteError):
    """The leading metadata block is not a YAML mapping."""


class RegistryError(MdsiteError):
    """A tag, category, or ordering registry file is malformed."""


class BuildFailed(MdsiteError):
    """Raised by callers that need a hard stop when a report contains errors."""

    def __init__(self, report):
        self.report = report
        super().__init__(f"Build failed with {len(report.errors)} error(s)")


class Severity(str, Enum):
    error = "error"
    warning = "warning"


class IssueKind(str, Enum):
    """Every problem a build can report; severity is fixed per kind."""
    missing_required_field = "MissingRequiredField"
    invalid_field_type = "InvalidFieldType"
    invalid_enum_value = "InvalidEnumValue"
    duplicate_slug = "DuplicateSlug"
    unknown_tag = "UnknownTag"
    disallowed_tag = "DisallowedTag"
    invalid_date_prefix = "InvalidDatePrefix"
    invalid_metadata_block = "InvalidMetadataBlock"
    ordering_reference_not_found = "OrderingReferenceNotFound"
    stale_last_updated = "StaleLastUpdated"

    @property
    def severity(self) -> Severity:
        if self in (IssueKind.ordering_reference_not_found, IssueKind.stale_last_updated):
            return Severity.warning
        return Severity.error


class ValidationIssue(BaseModel, frozen=True):
    """One reported problem with file and field context."""
    path: str
    field: Optional[str] = None
    message: str
    kind: IssueKind
    collection: Optional[str] = None

    @property
    def severity(self) -> Severity:
        return self.kind.severity

    def __str__(self) -> str:
        where = f"{self.path}:{self.field}" if self.field else self.path
        return f"[{self.severity.value}] {self.kind.value} {where}: {self.message}"


def issue(kind: IssueKind, path, message: str, field: str = None, collection=None) -> ValidationIssue:
    """Shorthand constructor used by every stage."""
    return ValidationIssue(
        path=str(path),
        field=field,
        message=message,
        kind=kind,
        collection=getattr(collection, "value", collection),
    )

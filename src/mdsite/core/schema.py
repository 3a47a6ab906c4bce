"""Per-collection metadata schemas as a tagged union over the collection kind"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError

from mdsite.core.errors import IssueKind, ValidationIssue, issue
from mdsite.core.models import Collection, ParsedDocument, WorkType


class _BaseMeta(BaseModel):
    # derived fields (title, description, lastUpdatedOn) may also appear in the block
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    tags: list[StrictStr]


class WritingMeta(_BaseMeta):
    collection: Literal[Collection.writing]
    featured_rank: Optional[StrictInt] = Field(default=None, ge=0, alias="featuredRank")
    series: Optional[StrictStr] = None


class GuideMeta(_BaseMeta):
    collection: Literal[Collection.guides]
    subcategory: StrictStr


class WorkMeta(_BaseMeta):
    collection: Literal[Collection.work]
    type: Optional[WorkType] = None


class ReferenceMeta(_BaseMeta):
    collection: Literal[Collection.reference]


SCHEMAS: dict[Collection, type[_BaseMeta]] = {
    Collection.writing: WritingMeta,
    Collection.guides: GuideMeta,
    Collection.work: WorkMeta,
    Collection.reference: ReferenceMeta,
}

_ENUM_ERRORS = {"enum", "literal_error"}


def _kind(error_type: str) -> IssueKind:
    if error_type == "missing":
        return IssueKind.missing_required_field
    if error_type in _ENUM_ERRORS:
        return IssueKind.invalid_enum_value
    return IssueKind.invalid_field_type


def schema_issues(doc: ParsedDocument) -> list[ValidationIssue]:
    """Check the raw metadata block of doc against its collection schema."""
    data = {**doc.metadata, "collection": doc.collection}
    try:
        SCHEMAS[doc.collection].model_validate(data)
    except ValidationError as e:
        return [
            issue(
                _kind(err["type"]),
                doc.source_path,
                err["msg"],
                field=".".join(str(part) for part in err["loc"]) or None,
                collection=doc.collection,
            )
            for err in e.errors()
        ]
    return []

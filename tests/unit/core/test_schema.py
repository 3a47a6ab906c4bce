"""Unit tests for core/schema.py"""

from mdsite.core.errors import IssueKind
from mdsite.core.models import Collection
from mdsite.core.schema import schema_issues


def _kinds(issues) -> set:
    return {(i.kind, i.field) for i in issues}


def test_schema_accepts_minimal_writing(make_doc):
    """A writing document needs only tags."""
    assert schema_issues(make_doc("a")) == []


def test_schema_missing_tags(make_doc):
    """Documents without tags report MissingRequiredField."""
    doc = make_doc("a", metadata={})
    assert _kinds(schema_issues(doc)) == {(IssueKind.missing_required_field, "tags")}


def test_schema_tags_wrong_type(make_doc):
    """tags must be a list of strings."""
    doc = make_doc("a", metadata={"tags": "python"})
    assert _kinds(schema_issues(doc)) == {(IssueKind.invalid_field_type, "tags")}


def test_schema_guides_require_subcategory(make_doc):
    """Guides must declare a subcategory."""
    doc = make_doc("a", collection=Collection.guides)
    assert _kinds(schema_issues(doc)) == {(IssueKind.missing_required_field, "subcategory")}


def test_schema_work_type_enum(make_doc):
    """work.type must be one of the declared work types."""
    ok = make_doc("a", collection=Collection.work, metadata={"tags": [], "type": "case-study"})
    bad = make_doc("b", collection=Collection.work, metadata={"tags": [], "type": "essay"})
    assert schema_issues(ok) == []
    assert _kinds(schema_issues(bad)) == {(IssueKind.invalid_enum_value, "type")}


def test_schema_featured_rank_type(make_doc):
    """featuredRank must be a non-negative integer."""
    doc = make_doc("a", metadata={"tags": [], "featuredRank": "first"})
    issues = schema_issues(doc)
    assert _kinds(issues) == {(IssueKind.invalid_field_type, "featuredRank")}
    assert issues[0].collection == "writing"


def test_schema_allows_derived_and_unknown_fields(make_doc):
    """Title, description, and other extra keys are accepted."""
    doc = make_doc("a", metadata={"tags": [], "title": "T", "description": "D", "hero": "x.png"})
    assert schema_issues(doc) == []

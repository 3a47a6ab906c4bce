"""Unit tests for core/tags.py"""

from mdsite.core.drafts import DraftPolicy
from mdsite.core.errors import IssueKind
from mdsite.core.models import Collection, DocRef, OrderingConfig, TagDefinition, TagRegistry
from mdsite.core.ordering import resolve_ordering
from mdsite.core.tags import build_tag_index, check_tags, mask_tag_index


REGISTRY = TagRegistry(tags={
    "python": TagDefinition(id="python", name="Python"),
    "sql": TagDefinition(id="sql", name="SQL", categories=["backend"]),
})


def test_check_tags_unknown_and_disallowed(make_doc):
    """Unregistered tags and category-restricted tags are reported per document."""
    docs = [
        make_doc("a", tags=("python", "go")),
        make_doc("b", category="frontend", tags=("sql",)),
        make_doc("c", category="backend", tags=("sql",)),
    ]
    issues = check_tags(docs, REGISTRY)
    assert [(i.kind, i.path) for i in issues] == [
        (IssueKind.unknown_tag, docs[0].source_path),
        (IssueKind.disallowed_tag, docs[1].source_path),
    ]


def test_tag_index_follows_site_order(make_doc):
    """Each tag lists its documents in resolved order, across collections."""
    docs = [
        make_doc("old", "2024-01-01"),
        make_doc("new", "2024-03-01"),
        make_doc("guide", collection=Collection.guides),
        make_doc("other", tags=("sql",)),
    ]
    ordering, _ = resolve_ordering(docs, OrderingConfig())
    index = build_tag_index(ordering, {d.ref: d for d in docs})
    assert [r.key for r in index.refs("python")] == ["writing/new", "writing/old", "guides/guide"]
    assert index.counts() == {"python": 3, "sql": 1}
    assert list(index.entries) == ["python", "sql"]


def test_tag_index_unknown_tag_is_empty(make_doc):
    """A tag nobody uses has no entries."""
    doc = make_doc("a")
    ordering, _ = resolve_ordering([doc], OrderingConfig())
    index = build_tag_index(ordering, {doc.ref: doc})
    assert index.refs("sql") == ()


def test_mask_tag_index_drops_drafts_and_empty_tags(make_doc):
    """Draft documents leave tag listings; tags left empty disappear."""
    docs = [
        make_doc("live", tags=("python",)),
        make_doc("draft", title="Draft: Soon", tags=("python", "sql")),
    ]
    by_ref = {d.ref: d for d in docs}
    ordering, _ = resolve_ordering(docs, OrderingConfig())
    index = build_tag_index(ordering, by_ref)
    masked = mask_tag_index(index, DraftPolicy(include_drafts=False), by_ref)
    assert masked.to_dict() == {"python": ["writing/live"]}
    assert mask_tag_index(index, DraftPolicy(include_drafts=True), by_ref) == index
    assert DocRef(collection=Collection.writing, id="draft") in index.refs("sql")

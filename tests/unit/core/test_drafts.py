"""Unit tests for core/drafts.py"""

from mdsite.config import Settings
from mdsite.core.drafts import DraftPolicy
from mdsite.core.models import Collection, CollectionOrdering, OrderingConfig
from mdsite.core.ordering import resolve_ordering


def test_policy_from_settings():
    """Drafts show in development, or in production only when forced."""
    assert DraftPolicy.from_settings(Settings()).include_drafts is False
    assert DraftPolicy.from_settings(Settings(build_mode="development")).include_drafts is True
    assert DraftPolicy.from_settings(Settings(show_drafts=True)).include_drafts is True


def test_is_visible(make_doc):
    """Only drafts are hidden, and only by the production policy."""
    draft = make_doc("es", title="Draft: Event Sourcing")
    live = make_doc("cqrs")
    assert not DraftPolicy().is_visible(draft)
    assert DraftPolicy().is_visible(live)
    assert DraftPolicy(include_drafts=True).is_visible(draft)


def test_mask_ordering_keeps_chains_contiguous(make_doc):
    """Hidden documents are removed before linking; empty categories vanish."""
    docs = [
        make_doc("a", "2024-01-03"),
        make_doc("b", "2024-01-02", title="Draft: B"),
        make_doc("c", "2024-01-01"),
        make_doc("lonely", category="wip", title="Draft: Lonely"),
    ]
    ordering, _ = resolve_ordering(docs, OrderingConfig())
    visible = DraftPolicy().mask_ordering(ordering, {d.ref: d for d in docs})
    seq = visible.sequence(Collection.writing)
    assert seq.categories == ("general",)
    assert seq.ids == ("a", "c")
    assert ordering.sequence(Collection.writing).ids == ("a", "b", "c", "lonely")


def test_development_policy_returns_ordering_unchanged(make_doc):
    """Including drafts leaves the ordering as resolved."""
    docs = [make_doc("a", title="Draft: A")]
    ordering, _ = resolve_ordering(docs, OrderingConfig())
    assert DraftPolicy(include_drafts=True).mask_ordering(ordering, {d.ref: d for d in docs}) is ordering


def test_mask_ordering_drops_pinned_drafts(make_doc):
    """A pinned draft is hidden from the pinned list as well as its category."""
    docs = [make_doc("a", "2024-01-02"), make_doc("b", "2024-01-01", title="Draft: B")]
    config = OrderingConfig(collections={Collection.writing: CollectionOrdering(pinned=["b", "a"])})
    ordering, _ = resolve_ordering(docs, config)
    seq = DraftPolicy().mask_ordering(ordering, {d.ref: d for d in docs}).sequence(Collection.writing)
    assert seq.pinned == ("a",)
    assert seq.ids == ("a",)

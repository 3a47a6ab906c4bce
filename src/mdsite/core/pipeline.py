"""Pipeline orchestration: load -> extract -> validate -> order -> tag/navigate/card -> mask"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from mdsite.config import Settings
from mdsite.core.cards import CardCache, build_card_cache
from mdsite.core.drafts import DraftPolicy
from mdsite.core.errors import InvalidDatePrefix, IssueKind, ValidationIssue, issue
from mdsite.core.extract.metadata import extract_document
from mdsite.core.load import load_sources
from mdsite.core.models import CardSummary, DocRef, ParsedDocument, RawDocument, Registries
from mdsite.core.navigation import NavigationIndex, build_navigation
from mdsite.core.ordering import ResolvedOrdering, resolve_ordering
from mdsite.core.registry import load_registries
from mdsite.core.tags import TagIndex, build_tag_index, mask_tag_index
from mdsite.core.utils.hashing import digest
from mdsite.core.validate import ValidationReport, validate_documents


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildResult:
    """Immutable output of one full build."""
    documents:  tuple[ParsedDocument, ...]      # every extracted document, drafts and failures included
    report:     ValidationReport
    ordering:   ResolvedOrdering                # healthy collections, drafts included
    visible:    ResolvedOrdering                # ordering after the draft mask
    tags:       TagIndex
    navigation: NavigationIndex
    cards:      CardCache
    policy:     DraftPolicy
    build_mode: str
    registries: Registries
    digest:     str

    @property
    def ok(self) -> bool:
        return self.report.ok

    def document(self, ref: DocRef) -> Optional[ParsedDocument]:
        return next((d for d in self.documents if d.ref == ref), None)

    def tag_cards(self, tag_id: str) -> list[CardSummary]:
        """Cards for a tag in site order."""
        return [card for ref in self.tags.refs(tag_id) if (card := self.cards.card(ref))]

    def views_dict(self) -> dict:
        return views_dict(self.visible, self.navigation, self.tags)


def views_dict(visible: ResolvedOrdering, navigation: NavigationIndex, tags: TagIndex) -> dict:
    """The ordering-derived views in the form that is exported and digested."""
    return {
        "ordering": visible.to_dict(),
        "navigation": navigation.to_dict(),
        "tags": tags.to_dict(),
    }


def extract_all(
    raws: list[RawDocument],
    words_per_minute: int = 200,
    parser_config: str = 'gfm-like',
    ) -> tuple[list[ParsedDocument], list[ValidationIssue]]:
    """Extract every document, turning per-file naming and metadata problems into issues."""
    docs: list[ParsedDocument] = []
    issues: list[ValidationIssue] = []
    for raw in raws:
        if raw.metadata_error:
            issues.append(issue(
                IssueKind.invalid_metadata_block, raw.relative_path, raw.metadata_error,
                collection=raw.collection,
            ))
            continue
        try:
            docs.append(extract_document(raw, words_per_minute, parser_config))
        except InvalidDatePrefix as e:
            issues.append(issue(
                IssueKind.invalid_date_prefix, raw.relative_path, str(e),
                field="publishedOn", collection=raw.collection,
            ))
    return docs, issues


def build_views(
    docs: list[ParsedDocument],
    registries: Registries,
    settings: Settings,
    prior_issues: list[ValidationIssue] = (),
    ) -> BuildResult:
    """Validate docs and derive every view. Collections with errors get no views at all."""
    report = validate_documents(docs, registries).merged(prior_issues)
    failed = report.failed_collections
    for collection in sorted(failed, key=lambda c: c.value):
        logger.error("Collection '%s' has errors; no views generated for it", collection.value)

    healthy = [d for d in docs if d.collection not in failed]
    by_ref = {d.ref: d for d in healthy}
    ordering, ordering_warnings = resolve_ordering(healthy, registries.ordering, settings.ordering_file)
    report = report.merged(ordering_warnings)

    policy = DraftPolicy.from_settings(settings)
    visible = policy.mask_ordering(ordering, by_ref)
    tags = mask_tag_index(build_tag_index(ordering, by_ref), policy, by_ref)
    navigation = build_navigation(visible, tags)
    cards = build_card_cache(visible, by_ref, settings.description_max_chars, settings.base_path)

    return BuildResult(
        documents=tuple(docs),
        report=report,
        ordering=ordering,
        visible=visible,
        tags=tags,
        navigation=navigation,
        cards=cards,
        policy=policy,
        build_mode=settings.build_mode,
        registries=registries,
        digest=digest(views_dict(visible, navigation, tags)),
    )


def build_site(settings: Settings) -> BuildResult:
    """Run a full build from the content directory. Raises UnreadableSource or RegistryError."""
    content_dir = Path(settings.content_dir)
    registries = load_registries(settings)
    raws = load_sources(content_dir, settings.max_workers)
    docs, issues = extract_all(raws, settings.words_per_minute, settings.parser_config)
    result = build_views(docs, registries, settings, issues)
    logger.info(
        "Built %d document(s): %d error(s), %d warning(s), digest %s",
        len(docs), len(result.report.errors), len(result.report.warnings), result.digest[:12],
    )
    return result

"""Derive canonical document fields from the file name, metadata block, and body"""

import logging
import math
from datetime import date, datetime
from typing import Any

from mdsite.core.extract.filename import parse_date_prefix
from mdsite.core.models import ParsedDocument, RawDocument
from mdsite.core.utils.tokens import heading_level, inline_text, make_parser


logger = logging.getLogger(__name__)

DRAFT_MARKER = "Draft:"
WORDS_PER_MINUTE = 200


def coerce_date(value: Any) -> date | None:
    """Accept YAML dates, datetimes, and ISO strings; None for anything else."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def find_title(tokens: list) -> tuple[str, int]:
    """Return (title text, index after the h1 close) for the first top-level h1, or ('', 0)."""
    for i, tok in enumerate(tokens):
        if tok.level == 0 and heading_level(tok) == 1:
            title = inline_text(tokens[i + 1]).strip()
            return title, i + 3     # heading_open, inline, heading_close
    return "", 0


def find_description(tokens: list, start: int) -> str:
    """Join the top-level paragraphs that follow the title, up to the first structural block."""
    paragraphs = []
    i = start
    while i < len(tokens):
        tok = tokens[i]
        if tok.level != 0 or tok.type == 'paragraph_close':
            i += 1
            continue
        if tok.type != 'paragraph_open':
            break                   # contents or subsection heading, list, code, hr
        paragraphs.append(inline_text(tokens[i + 1]))
        i += 1
    return " ".join(" ".join(paragraphs).split())


def count_words(tokens: list) -> int:
    words = 0
    for tok in tokens:
        if tok.type == 'inline':
            words += len(inline_text(tok).split())
        elif tok.type in ('fence', 'code_block'):
            words += len(tok.content.split())
    return words


def reading_minutes(words: int, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    """ceil(words / wpm), never below one minute."""
    return max(1, math.ceil(words / words_per_minute))


def _tags(value: Any) -> tuple[str, ...]:
    if isinstance(value, (list, tuple)):
        return tuple(str(t) for t in value)
    return ()


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value.strip() else None


def extract_document(
    raw: RawDocument,
    words_per_minute: int = WORDS_PER_MINUTE,
    parser_config: str = 'gfm-like',
    ) -> ParsedDocument:
    """Build a ParsedDocument from one RawDocument.

    The top-level h1 is the title; a metadata `title` is used only when the body
    has none. Draft status follows the title. An explicit metadata description
    wins over the lead paragraphs; publishedOn always comes from the name prefix.
    Raises InvalidDatePrefix for a badly named source.
    Cross-document rules (uniqueness, tag vocabulary) are left to the validator.
    """
    published_on, slug = parse_date_prefix(raw.name)
    meta = raw.metadata
    tokens = make_parser(parser_config).parse(raw.body)

    heading, after_title = find_title(tokens)
    title = heading or (_optional_str(meta.get("title")) or "").strip()
    description = _optional_str(meta.get("description"))
    if description is None:
        description = find_description(tokens, after_title) if heading else ""
    else:
        description = " ".join(description.split())

    last_updated_on = coerce_date(meta.get("lastUpdatedOn")) or published_on
    featured_rank = meta.get("featuredRank")
    if isinstance(featured_rank, bool) or not isinstance(featured_rank, int):
        featured_rank = None

    doc = ParsedDocument(
        id=slug,
        collection=raw.collection,
        category=raw.category,
        subcategory=_optional_str(meta.get("subcategory")),
        title=title,
        description=description,
        published_on=published_on,
        last_updated_on=last_updated_on,
        tags=_tags(meta.get("tags")),
        is_draft=title.startswith(DRAFT_MARKER),
        minutes_read=reading_minutes(count_words(tokens), words_per_minute),
        type=_optional_str(meta.get("type")),
        featured_rank=featured_rank,
        series=_optional_str(meta.get("series")),
        source_path=raw.relative_path,
        metadata=dict(meta),
    )
    logger.debug("Extracted %s (%s, %d min)", doc.ref, raw.relative_path, doc.minutes_read)
    return doc

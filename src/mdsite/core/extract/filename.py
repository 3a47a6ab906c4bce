"""Strict parsing of the YYYY-MM-DD-slug naming convention"""

import re
from datetime import date

from mdsite.core.errors import InvalidDatePrefix
from mdsite.core.utils.slug import slugify


DATE_PREFIX_RE = re.compile(r'^(?P<date>\d{4}-\d{2}-\d{2})-(?P<slug>.+)$')


def parse_date_prefix(name: str) -> tuple[date, str]:
    """Split a dated file stem or folder name into (published_on, slug).

    Raises InvalidDatePrefix when the prefix is missing, is not a real
    calendar date, or leaves an empty slug.
    """
    m = DATE_PREFIX_RE.match(name)
    if not m:
        raise InvalidDatePrefix(f"Expected a YYYY-MM-DD-slug name, got '{name}'")
    try:
        published = date.fromisoformat(m.group('date'))
    except ValueError as e:
        raise InvalidDatePrefix(f"Invalid date '{m.group('date')}' in '{name}'") from e
    slug = slugify(m.group('slug'))
    if not slug:
        raise InvalidDatePrefix(f"Empty slug in '{name}'")
    return published, slug

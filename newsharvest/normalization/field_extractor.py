"""
Field Extractor
===============

Best-effort lookup of canonical values in loosely shaped feed items.

Each canonical attribute has an ordered tuple of ``(field_name, reader)``
rules. Rules are tried in order and the first one whose reader returns a
value wins; missing or oddly typed fields simply yield None. Nothing in
this module raises on bad input.
"""

import re
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple

from dateutil import parser as date_parser

Reader = Callable[[Any], Optional[Any]]
FieldRule = Tuple[str, Reader]

# Known heuristic: first <img> with a double-quoted src wins, even a
# tracking pixel; single-quoted or unquoted src attributes are missed.
IMG_SRC_PATTERN = re.compile(r'<img[^>]+src="([^"]+)"', re.IGNORECASE)


def read_text(value: Any) -> Optional[str]:
    """Non-empty string value, or None."""
    if isinstance(value, str) and value:
        return value
    return None


def read_trimmed(value: Any) -> Optional[str]:
    """String value with surrounding whitespace removed; blank becomes None."""
    if isinstance(value, str):
        return value.strip() or None
    return None


def read_url_reference(value: Any) -> Optional[str]:
    """Media reference given either as a bare URL or as ``{"url": ...}``."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, Mapping):
        url = value.get("url")
        if isinstance(url, str) and url:
            return url
    return None


def read_html_image(value: Any) -> Optional[str]:
    """``src`` of the first ``<img>`` tag in an HTML fragment."""
    if not isinstance(value, str) or not value:
        return None
    match = IMG_SRC_PATTERN.search(value)
    return match.group(1) if match else None


# Two fixed defaults that differ in every date part; dateutil fills missing
# parts from the default, so a partial date parses differently under each.
_FILL_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def read_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 or RFC 822 style date; naive values are taken as UTC.

    Strings without a full calendar date ("10:30", "Monday", "March 5")
    count as unparsable rather than being completed from the current day.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            first, second = (
                date_parser.parse(text, default=default) for default in _FILL_DEFAULTS
            )
        except (ValueError, OverflowError, TypeError):
            return None
        if first != second:
            return None
        parsed = first
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


CANONICAL_URL_RULES: Sequence[FieldRule] = (
    ("link", read_text),
    ("guid", read_text),
)

IMAGE_RULES: Sequence[FieldRule] = (
    ("enclosure", read_url_reference),
    ("media:content", read_url_reference),
    ("media:thumbnail", read_url_reference),
)

EXCERPT_SOURCE_RULES: Sequence[FieldRule] = (
    ("content_snippet", read_text),
    ("summary", read_text),
    ("description", read_text),
    ("content", read_text),
)

BODY_HTML_RULES: Sequence[FieldRule] = (
    ("content:encoded", read_text),
    ("content", read_text),
)

# Fields that may carry a publication date, most normalized first.
DATE_FIELDS: Sequence[str] = ("iso_date", "pub_date")


def first_match(item: Any, rules: Sequence[FieldRule]) -> Optional[Any]:
    """Apply ``rules`` in order and return the first non-None result."""
    if not isinstance(item, Mapping):
        return None
    for field_name, reader in rules:
        value = reader(item.get(field_name))
        if value is not None:
            return value
    return None


def extract_title(item: Any) -> str:
    """Trimmed title, or an empty string."""
    if not isinstance(item, Mapping):
        return ""
    title = item.get("title")
    if title is None:
        return ""
    return str(title).strip()


def extract_canonical_url(item: Any) -> Optional[str]:
    """First non-empty of ``link`` and ``guid``, then trimmed.

    A whitespace-only ``link`` still wins over ``guid`` and trims to None.
    """
    return read_trimmed(first_match(item, CANONICAL_URL_RULES))


def extract_published_at(item: Any) -> Optional[datetime]:
    """Parse the first date field that is present.

    The second field is only consulted when the first is absent; a present
    but unparsable first value yields None.
    """
    if not isinstance(item, Mapping):
        return None
    for field_name in DATE_FIELDS:
        raw = item.get(field_name)
        if raw:
            return read_datetime(raw)
    return None


def extract_body_html(item: Any) -> Optional[str]:
    """Rich-text body preferred over plain content."""
    return first_match(item, BODY_HTML_RULES)


def extract_image_url(item: Any) -> Optional[str]:
    """Enclosure, then media content, then media thumbnail, then the body HTML."""
    image = first_match(item, IMAGE_RULES)
    if image is not None:
        return image
    return read_html_image(extract_body_html(item))


def extract_excerpt_source(item: Any) -> Optional[str]:
    """Snippet, summary, description or raw content, in that order."""
    return first_match(item, EXCERPT_SOURCE_RULES)

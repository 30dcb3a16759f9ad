"""
Article Normalizer
==================

Turns one raw feed item into a canonical :class:`Article`.

Normalization is a pure function of the item: no I/O, no mutation of the
input, and no exceptions. Every field is derived independently, so a
broken field degrades to None without affecting the others.
"""

from typing import Any, Callable, Optional, TypeVar

from ..database.models import Article
from ..utils.logging import get_logger_for_component
from .content_sanitizer import ContentSanitizer
from .excerpt import DEFAULT_EXCERPT_LENGTH, build_excerpt
from .field_extractor import (
    extract_body_html,
    extract_canonical_url,
    extract_excerpt_source,
    extract_image_url,
    extract_published_at,
    extract_title,
)
from .fingerprint import url_fingerprint

T = TypeVar("T")


class Normalizer:
    """Builds canonical articles from raw feed items."""

    def __init__(
        self,
        excerpt_max_length: int = DEFAULT_EXCERPT_LENGTH,
        sanitizer: Optional[ContentSanitizer] = None,
    ):
        self.excerpt_max_length = excerpt_max_length
        self.sanitizer = sanitizer or ContentSanitizer()
        self.logger = get_logger_for_component("normalizer")

    def normalize(self, item: Any) -> Article:
        """Normalize ``item``; never raises."""
        canonical_url = self._safe("canonical_url", extract_canonical_url, item)

        return Article(
            title=self._safe("title", extract_title, item) or "",
            canonical_url=canonical_url,
            url_hash=url_fingerprint(canonical_url),
            published_at=self._safe("published_at", extract_published_at, item),
            image_url=self._safe("image_url", extract_image_url, item),
            excerpt=self._safe("excerpt", self._excerpt, item),
            content_html=self._safe("content_html", self._content_html, item),
        )

    def _excerpt(self, item: Any) -> Optional[str]:
        return build_excerpt(extract_excerpt_source(item), self.excerpt_max_length)

    def _content_html(self, item: Any) -> Optional[str]:
        return self.sanitizer.sanitize(extract_body_html(item))

    def _safe(self, field_name: str, extractor: Callable[[Any], T], item: Any) -> Optional[T]:
        """Run one field extractor, degrading any failure to None."""
        try:
            return extractor(item)
        except Exception as e:
            self.logger.debug(f"Field '{field_name}' degraded to None: {e}")
            return None


_default_normalizer: Optional[Normalizer] = None


def normalize_item(item: Any) -> Article:
    """Quick function to normalize one item with default settings."""
    global _default_normalizer
    if _default_normalizer is None:
        _default_normalizer = Normalizer()
    return _default_normalizer.normalize(item)

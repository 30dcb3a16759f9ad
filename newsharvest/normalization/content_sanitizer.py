"""
Content Sanitizer
=================

Reduces untrusted feed HTML to a small allow-listed subset that is safe to
store and render.

Only structural filtering happens here; markup is parsed by BeautifulSoup
and never executed or fetched.
"""

import re
from typing import Any, Optional

from bs4 import BeautifulSoup, Comment
from bs4.element import CData, Doctype, ProcessingInstruction

from ..utils.logging import get_logger_for_component


class ContentSanitizer:
    """
    Allow-list HTML sanitizer.

    - Elements in ``DISCARDED_ELEMENTS`` are removed together with their content
    - Any other element outside ``ALLOWED_TAGS`` is unwrapped (text kept)
    - Attributes outside ``ALLOWED_ATTRIBUTES`` are dropped
    - ``href``/``src`` values with a scheme outside ``ALLOWED_SCHEMES`` are dropped
    """

    ALLOWED_TAGS = frozenset(
        {"p", "a", "strong", "em", "ul", "ol", "li", "br", "img", "blockquote"}
    )

    ALLOWED_ATTRIBUTES = {
        "a": frozenset({"href", "title", "rel", "target"}),
        "img": frozenset({"src", "alt"}),
    }

    URL_ATTRIBUTES = frozenset({"href", "src"})

    ALLOWED_SCHEMES = frozenset({"http", "https", "mailto"})

    # Whose text must not leak into the output once the tag is gone
    DISCARDED_ELEMENTS = frozenset(
        {
            "script",
            "style",
            "noscript",
            "template",
            "textarea",
            "option",
            "iframe",
            "object",
            "embed",
            "applet",
            "svg",
            "math",
            "head",
            "title",
        }
    )

    # Browsers ignore control characters and whitespace inside a scheme
    # ("java\tscript:"), so they are removed before the scheme check.
    URL_NOISE_PATTERN = re.compile(r"[\x00-\x20\x7f]+")
    SCHEME_PATTERN = re.compile(r"^([^/:?#]*):")

    def __init__(self, parser: str = "html.parser"):
        self.parser = parser
        self.logger = get_logger_for_component("content_sanitizer")

    def sanitize(self, html_content: Any) -> Optional[str]:
        """Return the allow-listed subset of ``html_content``.

        None or blank input, and input that sanitizes to nothing, yield None.
        """
        if html_content is None:
            return None
        html_content = str(html_content)
        if not html_content.strip():
            return None

        soup = BeautifulSoup(html_content, self.parser)

        self._remove_non_content_nodes(soup)
        self._remove_discarded_elements(soup)

        for element in soup.find_all(True):
            if element.name not in self.ALLOWED_TAGS:
                element.unwrap()
            else:
                self._filter_attributes(element)

        cleaned = str(soup).strip()
        self.logger.debug(f"Sanitized HTML: {len(html_content)} -> {len(cleaned)} chars")
        return cleaned or None

    def is_allowed_url(self, value: Any) -> bool:
        """Whether a link/image URL may be kept.

        Scheme-less (relative) URLs are kept; anything with a scheme must
        use one of ``ALLOWED_SCHEMES``.
        """
        if not isinstance(value, str):
            return False
        compact = self.URL_NOISE_PATTERN.sub("", value)
        match = self.SCHEME_PATTERN.match(compact)
        if not match:
            return True
        return match.group(1).lower() in self.ALLOWED_SCHEMES

    def _remove_non_content_nodes(self, soup: BeautifulSoup) -> None:
        """Remove comments, CDATA, processing instructions and doctypes."""
        for node in soup.find_all(
            string=lambda text: isinstance(
                text, (Comment, CData, ProcessingInstruction, Doctype)
            )
        ):
            node.extract()

    def _remove_discarded_elements(self, soup: BeautifulSoup) -> None:
        for element in soup.find_all(self.DISCARDED_ELEMENTS):
            if not element.decomposed:
                element.decompose()

    def _filter_attributes(self, element) -> None:
        allowed = self.ALLOWED_ATTRIBUTES.get(element.name, frozenset())

        for attr_name in list(element.attrs):
            if attr_name.lower() not in allowed:
                del element[attr_name]
            elif attr_name.lower() in self.URL_ATTRIBUTES and not self.is_allowed_url(
                element.get(attr_name)
            ):
                del element[attr_name]


_default_sanitizer: Optional[ContentSanitizer] = None


def sanitize_content(html_content: Any) -> Optional[str]:
    """Quick function to sanitize HTML with a shared sanitizer."""
    global _default_sanitizer
    if _default_sanitizer is None:
        _default_sanitizer = ContentSanitizer()
    return _default_sanitizer.sanitize(html_content)

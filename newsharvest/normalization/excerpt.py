"""Bounded, whitespace-normalized preview text."""

import re
from typing import Any, Optional

DEFAULT_EXCERPT_LENGTH = 220
ELLIPSIS = "…"

_WHITESPACE = re.compile(r"\s+")


def build_excerpt(text: Any, max_length: int = DEFAULT_EXCERPT_LENGTH) -> Optional[str]:
    """Collapse whitespace and cut ``text`` to at most ``max_length`` characters.

    Truncated output keeps ``max_length - 1`` characters, drops trailing
    whitespace and ends with a single ellipsis. Feeding the result back in
    with the same ``max_length`` returns it unchanged.

    Returns None for missing or blank input.
    """
    if text is None or text == "":
        return None

    collapsed = _WHITESPACE.sub(" ", str(text)).strip()
    if not collapsed:
        return None
    if len(collapsed) <= max_length:
        return collapsed

    return collapsed[: max_length - 1].rstrip() + ELLIPSIS

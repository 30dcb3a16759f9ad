"""Dedup key derived from an article's canonical URL."""

import hashlib
from typing import Optional

URL_HASH_LENGTH = 40


def url_fingerprint(canonical_url: Optional[str]) -> Optional[str]:
    """SHA-1 hex digest of ``canonical_url``, or None when there is no URL.

    Used only as a compact uniqueness key for the store, never as a
    security control. A missing URL never hashes to a placeholder, so
    URL-less items cannot collide with each other.
    """
    if canonical_url is None or canonical_url == "":
        return None
    return hashlib.sha1(str(canonical_url).encode("utf-8")).hexdigest()


def is_url_hash(value: Optional[str]) -> bool:
    """Whether ``value`` looks like a digest produced by :func:`url_fingerprint`."""
    if not value or len(value) != URL_HASH_LENGTH:
        return False
    return all(ch in "0123456789abcdef" for ch in value)

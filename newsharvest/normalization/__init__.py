"""
NewsHarvest Normalization Module
================================

Pure transformations from raw feed items to canonical articles.
"""

from .content_sanitizer import ContentSanitizer
from .excerpt import build_excerpt
from .fingerprint import url_fingerprint
from .normalizer import Normalizer

__all__ = ["ContentSanitizer", "build_excerpt", "url_fingerprint", "Normalizer"]

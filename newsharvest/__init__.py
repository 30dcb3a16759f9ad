"""
NewsHarvest - RSS Ingestion Pipeline
====================================

Fetches RSS/Atom feeds, normalizes each item into a canonical article and
stores it once per canonical URL.

Main Components:
- Normalization: field extraction, excerpts, HTML sanitizing, URL fingerprints
- Processing: feed fetching with bounded retries and the ingestion runner
- Storage: SQLite article store with constraint-based deduplication
- Configuration: environment variables with Pydantic validation
"""

__version__ = "1.0.0"
__author__ = "NewsHarvest Development Team"
__description__ = "RSS ingestion and normalization pipeline"

from .config.settings import get_settings
from .database.models import Article, StoreResult
from .normalization.normalizer import Normalizer, normalize_item
from .utils.logging import configure_application_logging, get_logger_for_component
from .utils.exceptions import NewsHarvestError

__all__ = [
    "get_settings",
    "Article",
    "StoreResult",
    "Normalizer",
    "normalize_item",
    "configure_application_logging",
    "get_logger_for_component",
    "NewsHarvestError",
]

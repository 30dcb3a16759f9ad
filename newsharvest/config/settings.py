"""
NewsHarvest Configuration System
===============================

Configuration management with environment variables and Pydantic models.
Environment variables override Field defaults with clear precedence.

Feed sources come from ``NEWSHARVEST_FEEDS__URLS`` (a JSON list) and, for
older deployments, from numbered ``FEED_1``, ``FEED_2``, ... variables.
"""

import os
import re
from pathlib import Path
from typing import List, Optional
from enum import Enum

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from ..utils.exceptions import ConfigurationError, ErrorCode

LEGACY_FEED_VAR = re.compile(r"^FEED_(\d+)$")


class LogLevel(str, Enum):
    """Available log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class FeedSettings(BaseModel):
    """Configured feed sources, in processing order."""
    urls: List[str] = Field(default_factory=list, description="RSS/Atom feed URLs")

    @field_validator("urls")
    @classmethod
    def strip_blank_urls(cls, v):
        """Drop blank entries and surrounding whitespace."""
        return [url.strip() for url in v if isinstance(url, str) and url.strip()]


class FetchSettings(BaseModel):
    """Feed retrieval and retry configuration."""
    max_attempts: int = Field(default=3, ge=1, le=10, description="Attempts per feed before giving up")
    backoff_base_seconds: float = Field(default=1.0, ge=0.0, le=60.0, description="Linear backoff unit between attempts")
    request_timeout: int = Field(default=25, ge=1, le=300, description="Per-attempt request timeout in seconds")
    user_agent: str = Field(default="NewsHarvest/1.0", description="User-Agent header sent to feed servers")


class NormalizationSettings(BaseModel):
    """Canonical article shaping."""
    excerpt_max_length: int = Field(default=220, ge=2, le=5000, description="Maximum excerpt length in characters")


class ProcessingSettings(BaseModel):
    """Ingestion run configuration."""
    parallel_feeds: int = Field(default=1, ge=1, le=20, description="Feed sources processed concurrently (1 = sequential)")
    preview_items: int = Field(default=2, ge=1, le=50, description="Items shown per feed by the preview commands")


class DatabaseSettings(BaseModel):
    """Article store configuration."""
    path: str = Field(default="data/newsharvest.db", description="SQLite database file path")
    pool_size: int = Field(default=5, ge=1, le=20, description="Connection pool size")


class LoggingSettings(BaseModel):
    """Logging configuration."""
    level: LogLevel = Field(default=LogLevel.INFO, description="Global log level")
    file_path: Optional[str] = Field(default="logs/newsharvest.log", description="Log file path")
    max_file_size_mb: int = Field(default=10, ge=1, le=100, description="Max log file size in MB")
    backup_count: int = Field(default=5, ge=1, le=20, description="Number of log backup files")
    structured_logging: bool = Field(default=False, description="Use structured JSON logging")
    console_logging: bool = Field(default=True, description="Enable console logging")


class NewsHarvestSettings(BaseSettings):
    """Main application settings."""

    feeds: FeedSettings = Field(default_factory=FeedSettings)
    fetch: FetchSettings = Field(default_factory=FetchSettings)
    normalization: NormalizationSettings = Field(default_factory=NormalizationSettings)
    processing: ProcessingSettings = Field(default_factory=ProcessingSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_nested_delimiter": "__",
        "env_prefix": "NEWSHARVEST_",
        "extra": "ignore",
    }

    def validate_configuration(self) -> None:
        """Validate paths that must be writable.

        An empty feed list is not an error here; the ingestion runner
        refuses to start without sources.
        """
        errors = []

        try:
            Path(self.database.path).parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            errors.append(f"Invalid database path: {e}")

        if self.logging.file_path:
            try:
                Path(self.logging.file_path).parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                errors.append(f"Invalid log file path: {e}")

        if errors:
            raise ConfigurationError(
                f"Configuration validation failed: {'; '.join(errors)}",
                error_code=ErrorCode.CONFIG_INVALID,
            )

    def get_feed_urls(self) -> List[str]:
        """Configured feed URLs followed by any legacy ``FEED_n`` variables."""
        urls = list(self.feeds.urls)
        for url in collect_legacy_feed_urls():
            if url not in urls:
                urls.append(url)
        return urls

    def get_effective_log_level(self) -> str:
        """Get effective log level considering debug mode."""
        if self.debug:
            return "DEBUG"
        return self.logging.level.value


def collect_legacy_feed_urls(environ: Optional[dict] = None) -> List[str]:
    """Read ``FEED_1``, ``FEED_2``, ... in numeric order, skipping blanks."""
    environ = os.environ if environ is None else environ
    numbered = []
    for key, value in environ.items():
        match = LEGACY_FEED_VAR.match(key)
        if match and value and value.strip():
            numbered.append((int(match.group(1)), value.strip()))
    return [url for _, url in sorted(numbered)]


def load_settings() -> NewsHarvestSettings:
    """Load settings from environment variables, ``.env`` and defaults.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    from dotenv import load_dotenv
    load_dotenv()

    try:
        settings = NewsHarvestSettings()
        settings.validate_configuration()
        return settings

    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(
            f"Failed to initialize settings: {e}",
            error_code=ErrorCode.CONFIG_INVALID
        ) from e


_settings: Optional[NewsHarvestSettings] = None


def get_settings(reload: bool = False) -> NewsHarvestSettings:
    """Get global settings instance (singleton pattern).

    Args:
        reload: Force reload of settings

    Returns:
        Global settings instance
    """
    global _settings

    if _settings is None or reload:
        _settings = load_settings()

    return _settings

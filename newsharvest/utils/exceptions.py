"""
NewsHarvest Custom Exceptions
============================

Exception hierarchy for the ingestion pipeline with error codes, context
information, and operator-facing messages.
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for categorizing exceptions."""

    # Configuration errors (C001-C099)
    CONFIG_INVALID = "C001"
    CONFIG_MISSING = "C002"

    # Database / store errors (D001-D099)
    DATABASE_CONNECTION = "D001"
    DATABASE_CONSTRAINT = "D003"
    DATABASE_ERROR = "D006"

    # Feed ingestion errors (F001-F099)
    FEED_FETCH_TIMEOUT = "F002"
    FEED_PARSE_ERROR = "F003"
    FEED_NETWORK_ERROR = "F004"
    FEED_RETRIES_EXHAUSTED = "F007"


class NewsHarvestError(Exception):
    """Base exception for all NewsHarvest errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        context: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        recoverable: bool = False,
    ):
        """Initialize NewsHarvest error.

        Args:
            message: Technical error message for logging
            error_code: Categorized error code
            context: Additional context information
            user_message: Operator-friendly error message
            recoverable: Whether the error is recoverable
        """
        super().__init__(message)
        self.error_code = error_code
        self.context = context or {}
        self.user_message = user_message or message
        self.recoverable = recoverable

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code.value if self.error_code else None,
            "error_message": str(self),
            "user_message": self.user_message,
            "context": self.context,
            "recoverable": self.recoverable,
        }

    def __str__(self) -> str:
        """String representation with error code."""
        if self.error_code:
            return f"[{self.error_code.value}] {super().__str__()}"
        return super().__str__()


class ConfigurationError(NewsHarvestError):
    """Configuration-related errors. Always fatal for the run."""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", {})
        if config_key:
            context["config_key"] = config_key

        super().__init__(
            message=message,
            error_code=kwargs.pop("error_code", ErrorCode.CONFIG_INVALID),
            context=context,
            user_message=kwargs.pop("user_message", f"Configuration error: {message}"),
            **kwargs,
        )


class DatabaseError(NewsHarvestError):
    """Database connection and schema errors."""

    def __init__(self, message: str, query: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", {})
        if query:
            context["query"] = query

        super().__init__(
            message=message,
            error_code=kwargs.pop("error_code", ErrorCode.DATABASE_CONNECTION),
            context=context,
            user_message=kwargs.pop("user_message", "Database operation failed"),
            recoverable=kwargs.pop("recoverable", True),
            **kwargs,
        )


class StoreRejectedError(DatabaseError):
    """The article store refused a single submission.

    Raised per item; the ingestion runner counts the item as skipped and
    keeps going.
    """

    def __init__(self, message: str, url_hash: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", {})
        if url_hash:
            context["url_hash"] = url_hash

        super().__init__(
            message,
            context=context,
            error_code=kwargs.pop("error_code", ErrorCode.DATABASE_ERROR),
            user_message=kwargs.pop("user_message", "Article could not be stored"),
            **kwargs,
        )


class FeedError(NewsHarvestError):
    """Feed ingestion and parsing errors."""

    def __init__(self, message: str, feed_url: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", {})
        if feed_url:
            context["feed_url"] = feed_url
        self.feed_url = feed_url

        super().__init__(
            message=message,
            error_code=kwargs.pop("error_code", ErrorCode.FEED_NETWORK_ERROR),
            context=context,
            user_message=kwargs.pop(
                "user_message", f"Feed processing failed: {message}"
            ),
            recoverable=kwargs.pop("recoverable", True),
            **kwargs,
        )


class FeedParseError(FeedError):
    """Feed document could not be parsed into a title and item list."""

    def __init__(self, message: str, feed_url: Optional[str] = None, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.FEED_PARSE_ERROR)
        super().__init__(message, feed_url=feed_url, **kwargs)


class FeedFetchError(FeedError):
    """Feed could not be retrieved.

    When raised by the fetcher after exhausting its retry budget,
    ``last_error`` holds the exception of the final attempt.
    """

    def __init__(
        self,
        message: str,
        feed_url: Optional[str] = None,
        last_error: Optional[BaseException] = None,
        attempts: Optional[int] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        if attempts is not None:
            context["attempts"] = attempts
        if last_error is not None:
            context["last_error"] = repr(last_error)
        self.last_error = last_error
        self.attempts = attempts

        super().__init__(message, feed_url=feed_url, context=context, **kwargs)

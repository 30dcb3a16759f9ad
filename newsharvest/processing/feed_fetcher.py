"""
RSS Feed Fetcher
===============

Retrieves a feed document over HTTP, parses it with feedparser, and exposes
its entries as loosely shaped raw items for the normalizer.

Each fetch makes at most ``max_attempts`` sequential requests with linear
backoff between them; every failure (network, HTTP status, parse) is
retried the same way.
"""

import asyncio
import ssl
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

import aiohttp
import certifi
import feedparser
from bs4 import BeautifulSoup

from ..config.settings import get_settings
from ..recovery.retry_logic import RetryConfig, RetryExhaustedError, RetryManager, SleepFunc
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import ErrorCode, FeedFetchError, FeedParseError

logger = get_logger_for_component("feed_fetcher")


@dataclass
class FeedDocument:
    """A parsed feed: its title and raw items in document order."""

    feed_url: str
    title: Optional[str] = None
    items: List[Dict[str, Any]] = field(default_factory=list)
    parse_warning: Optional[str] = None

    @property
    def item_count(self) -> int:
        return len(self.items)


def _first(values: Any) -> Optional[Mapping]:
    """First mapping of a feedparser list field, if any."""
    if isinstance(values, list) and values and isinstance(values[0], Mapping):
        return values[0]
    return None


def _struct_time_to_iso(value: Any) -> Optional[str]:
    """feedparser ``*_parsed`` tuple (always UTC) to an ISO-8601 string."""
    if not value:
        return None
    try:
        return datetime(*value[:6], tzinfo=timezone.utc).isoformat()
    except (TypeError, ValueError):
        return None


def _html_to_text(html_content: Optional[str]) -> Optional[str]:
    if not html_content:
        return None
    text = BeautifulSoup(html_content, "html.parser").get_text(separator=" ", strip=True)
    return text or None


def entry_to_raw_item(entry: Mapping) -> Dict[str, Any]:
    """Flatten a feedparser entry into the raw item shape the normalizer reads.

    Keys left as None are dropped so that "absent" and "missing" look the same.
    """
    body = _first(entry.get("content"))
    encoded = body.get("value") if body else None
    description = entry.get("summary")

    enclosure = _first(entry.get("enclosures"))
    if enclosure is not None:
        enclosure = {
            "url": enclosure.get("href") or enclosure.get("url"),
            "type": enclosure.get("type"),
            "length": enclosure.get("length"),
        }

    item = {
        "title": entry.get("title"),
        "link": entry.get("link"),
        "guid": entry.get("id"),
        "iso_date": _struct_time_to_iso(
            entry.get("published_parsed") or entry.get("updated_parsed")
        ),
        "pub_date": entry.get("published") or entry.get("updated"),
        "content:encoded": encoded,
        "content": description,
        "content_snippet": _html_to_text(encoded or description),
        "summary": description,
        "description": entry.get("description"),
        "enclosure": enclosure,
        "media:content": _first(entry.get("media_content")),
        "media:thumbnail": _first(entry.get("media_thumbnail")),
        "author": entry.get("author"),
    }
    return {key: value for key, value in item.items() if value is not None}


def parse_feed_document(
    content: Any, feed_url: str, response_headers: Optional[Dict[str, str]] = None
) -> FeedDocument:
    """Parse raw feed bytes/text into a :class:`FeedDocument`.

    Raises:
        FeedParseError: If the payload is not a usable feed
    """
    parsed = feedparser.parse(content, response_headers=response_headers or {})

    feed_info = parsed.get("feed", {}) or {}
    entries = parsed.get("entries", []) or []
    title = feed_info.get("title")

    warning = None
    if parsed.get("bozo"):
        warning = str(parsed.get("bozo_exception") or "Invalid XML structure")
        if not entries and not title:
            raise FeedParseError(f"Feed parse error: {warning}", feed_url=feed_url)
        logger.info(f"Feed has parse warnings but is usable: {feed_url} ({warning})")

    items = []
    for entry in entries:
        try:
            items.append(entry_to_raw_item(entry))
        except Exception as e:
            logger.warning(f"Failed to read entry in {feed_url}: {e}")

    return FeedDocument(feed_url=feed_url, title=title, items=items, parse_warning=warning)


class FeedFetcher:
    """Feed retrieval with a bounded, sequential retry budget."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        retry_config: Optional[RetryConfig] = None,
        sleep: Optional[SleepFunc] = None,
        user_agent: Optional[str] = None,
    ):
        """Initialize feed fetcher.

        Args:
            timeout: Per-attempt request timeout in seconds (default from config)
            retry_config: Attempt cap and backoff (default from config)
            sleep: Awaitable used between attempts (``asyncio.sleep``)
            user_agent: User-Agent header (default from config)
        """
        settings = get_settings()
        self.timeout = timeout or settings.fetch.request_timeout
        self.retry_config = retry_config or RetryConfig(
            max_attempts=settings.fetch.max_attempts,
            base_delay=settings.fetch.backoff_base_seconds,
        )
        self.retry_manager = RetryManager(self.retry_config, sleep=sleep)
        self.user_agent = user_agent or settings.fetch.user_agent
        self.logger = logger

        self.ssl_context = ssl.create_default_context(cafile=certifi.where())

    @asynccontextmanager
    async def get_session(self):
        """Get a configured aiohttp session."""
        connector = aiohttp.TCPConnector(ssl=self.ssl_context, limit_per_host=2)
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "application/rss+xml, application/atom+xml, application/xml, text/xml, */*",
        }

        async with aiohttp.ClientSession(
            connector=connector, timeout=timeout, headers=headers
        ) as session:
            yield session

    async def fetch(
        self, feed_url: str, session: Optional[aiohttp.ClientSession] = None
    ) -> FeedDocument:
        """Fetch and parse one feed, retrying failures.

        Args:
            feed_url: URL of the feed
            session: Shared session; a private one is opened when omitted

        Returns:
            The parsed feed document

        Raises:
            FeedFetchError: When every attempt failed; ``last_error`` holds the
                final attempt's exception
        """
        if session is None:
            async with self.get_session() as own_session:
                return await self.fetch(feed_url, own_session)

        try:
            document = await self.retry_manager.retry_async(
                self._fetch_once, session, feed_url, operation=f"fetch {feed_url}"
            )
        except RetryExhaustedError as e:
            raise FeedFetchError(
                f"Giving up on {feed_url} after {e.attempts} attempts: {e.last_error}",
                feed_url=feed_url,
                last_error=e.last_error,
                attempts=e.attempts,
                error_code=ErrorCode.FEED_RETRIES_EXHAUSTED,
            ) from e.last_error

        self.logger.info(f"Fetched {document.item_count} items from {feed_url}")
        return document

    async def _fetch_once(self, session: aiohttp.ClientSession, feed_url: str) -> FeedDocument:
        """One HTTP request plus parse; raises on any failure."""
        self.logger.debug(f"Requesting feed: {feed_url}")

        try:
            async with session.get(feed_url) as response:
                if response.status != 200:
                    raise FeedFetchError(
                        f"HTTP {response.status}: {response.reason}",
                        feed_url=feed_url,
                        error_code=ErrorCode.FEED_NETWORK_ERROR,
                    )
                content = await response.read()
                # feedparser looks headers up by lowercase name
                headers = {key.lower(): value for key, value in response.headers.items()}
        except asyncio.TimeoutError as e:
            raise FeedFetchError(
                f"Timed out after {self.timeout}s",
                feed_url=feed_url,
                error_code=ErrorCode.FEED_FETCH_TIMEOUT,
            ) from e

        return parse_feed_document(content, feed_url, response_headers=headers)

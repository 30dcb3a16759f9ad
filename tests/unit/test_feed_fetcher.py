"""
Feed Fetcher Tests
==================

Tests for feed parsing, raw item shaping and fetch retries.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from newsharvest.processing.feed_fetcher import (
    FeedDocument,
    FeedFetcher,
    entry_to_raw_item,
    parse_feed_document,
)
from newsharvest.recovery.retry_logic import RetryConfig
from newsharvest.utils.exceptions import ErrorCode, FeedFetchError, FeedParseError

FEED_URL = "https://example.com/feed.xml"


def _mock_session(status=200, body=b"", headers=None, reason="OK"):
    """aiohttp-like session whose ``get`` yields one canned response."""
    response = MagicMock()
    response.status = status
    response.reason = reason
    response.read = AsyncMock(return_value=body)
    response.headers = headers or {}

    request_cm = MagicMock()
    request_cm.__aenter__ = AsyncMock(return_value=response)
    request_cm.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.get = MagicMock(return_value=request_cm)
    return session


class TestParseFeedDocument:
    """Test feed document parsing."""

    def test_parse_rss(self, sample_rss):
        document = parse_feed_document(sample_rss, FEED_URL)

        assert document.title == "Test RSS Feed"
        assert document.item_count == 3

        first = document.items[0]
        assert first["link"] == "https://example.com/a"
        assert first["guid"] == "https://example.com/a"
        assert first["enclosure"]["url"] == "https://cdn.example.com/enclosure.jpg"
        assert first["iso_date"] == "2024-09-05T12:00:00+00:00"
        assert "body.jpg" in first["content:encoded"]
        assert first["summary"] == "Short summary of the first article"

    def test_guid_without_permalink(self, sample_rss):
        document = parse_feed_document(sample_rss, FEED_URL)
        second = document.items[1]

        assert second["guid"] == "id-123"
        assert "link" not in second

    def test_parse_atom(self, sample_atom):
        document = parse_feed_document(sample_atom, FEED_URL)

        assert document.title == "Test Atom Feed"
        assert document.item_count == 1
        item = document.items[0]
        assert item["link"] == "https://atom.example.com/entry"
        assert item["summary"] == "Atom entry summary"
        assert item["iso_date"].startswith("2024-09-05T12:00:00")

    def test_unusable_payload(self):
        with pytest.raises(FeedParseError) as exc_info:
            parse_feed_document("this is not a feed", FEED_URL)
        assert exc_info.value.feed_url == FEED_URL
        assert exc_info.value.error_code == ErrorCode.FEED_PARSE_ERROR

    def test_empty_feed_with_title_is_usable(self):
        rss = """<?xml version="1.0"?><rss version="2.0"><channel><title>Empty</title></channel></rss>"""
        document = parse_feed_document(rss, FEED_URL)
        assert document.title == "Empty"
        assert document.items == []


class TestEntryToRawItem:
    """Test flattening of feedparser entries."""

    def test_absent_fields_are_dropped(self):
        item = entry_to_raw_item({"title": "Only title"})
        assert item == {"title": "Only title"}

    def test_media_fields(self):
        item = entry_to_raw_item(
            {
                "media_content": [{"url": "https://cdn.example.com/c.jpg"}],
                "media_thumbnail": [{"url": "https://cdn.example.com/t.jpg"}],
            }
        )
        assert item["media:content"]["url"] == "https://cdn.example.com/c.jpg"
        assert item["media:thumbnail"]["url"] == "https://cdn.example.com/t.jpg"

    def test_snippet_is_plain_text(self):
        item = entry_to_raw_item({"summary": "<p>Hello <b>there</b></p>"})
        assert item["content_snippet"] == "Hello there"


class TestFeedFetcher:
    """Test fetching with retries."""

    @pytest.fixture
    def sleep(self):
        return AsyncMock()

    @pytest.fixture
    def fetcher(self, sleep):
        return FeedFetcher(
            timeout=5, retry_config=RetryConfig(max_attempts=3, base_delay=1.0), sleep=sleep
        )

    def test_initialization_defaults(self):
        fetcher = FeedFetcher()
        assert fetcher.timeout == 25
        assert fetcher.retry_config.max_attempts == 3

    @pytest.mark.asyncio
    async def test_fetch_success(self, fetcher, sample_rss):
        session = _mock_session(
            body=sample_rss.encode("utf-8"), headers={"Content-Type": "application/rss+xml"}
        )

        document = await fetcher.fetch(FEED_URL, session)

        assert isinstance(document, FeedDocument)
        assert document.item_count == 3
        session.get.assert_called_once_with(FEED_URL)

    @pytest.mark.asyncio
    async def test_http_error_is_retried_then_reported(self, fetcher, sleep):
        session = _mock_session(status=503, reason="Service Unavailable")

        with pytest.raises(FeedFetchError) as exc_info:
            await fetcher.fetch(FEED_URL, session)

        error = exc_info.value
        assert error.error_code == ErrorCode.FEED_RETRIES_EXHAUSTED
        assert error.attempts == 3
        assert "503" in str(error.last_error)
        assert session.get.call_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_fails_twice_then_succeeds(self, fetcher, sleep):
        document = FeedDocument(feed_url=FEED_URL, title="ok")
        with patch.object(
            fetcher,
            "_fetch_once",
            AsyncMock(side_effect=[ConnectionError("reset"), TimeoutError("slow"), document]),
        ) as mock_fetch:
            result = await fetcher.fetch(FEED_URL, MagicMock())

        assert result is document
        assert mock_fetch.await_count == 3
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_last_error_is_final_attempt(self, fetcher):
        final = ConnectionError("third")
        with patch.object(
            fetcher,
            "_fetch_once",
            AsyncMock(side_effect=[ConnectionError("first"), ConnectionError("second"), final]),
        ):
            with pytest.raises(FeedFetchError) as exc_info:
                await fetcher.fetch(FEED_URL, MagicMock())

        assert exc_info.value.last_error is final
        assert exc_info.value.feed_url == FEED_URL

    @pytest.mark.asyncio
    async def test_timeout_is_classified(self, fetcher):
        request_cm = MagicMock()
        request_cm.__aenter__ = AsyncMock(side_effect=asyncio.TimeoutError())
        request_cm.__aexit__ = AsyncMock(return_value=False)
        session = MagicMock()
        session.get = MagicMock(return_value=request_cm)

        with pytest.raises(FeedFetchError) as exc_info:
            await fetcher.fetch(FEED_URL, session)

        assert exc_info.value.last_error.error_code == ErrorCode.FEED_FETCH_TIMEOUT

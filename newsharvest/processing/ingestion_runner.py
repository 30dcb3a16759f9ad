"""
Ingestion Runner
================

Drives every configured feed source through fetch, normalize and submit,
and tallies what happened to each item.

Failures are contained at the level they happen: a bad item is counted
and skipped, a feed that cannot be fetched is marked failed, and the run
always moves on to the next source.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from ..config.settings import get_settings
from ..database.models import Article, StoreResult
from ..normalization.normalizer import Normalizer
from ..storage.article_repository import ArticleStore
from ..utils.logging import PerformanceLogger, get_logger_for_component
from ..utils.exceptions import ConfigurationError, ErrorCode, FeedError
from .feed_fetcher import FeedDocument, FeedFetcher


class FeedState(str, Enum):
    """Lifecycle of one feed source within a run."""
    PENDING = "pending"
    FETCHING = "fetching"
    NORMALIZING = "normalizing"
    SUBMITTING = "submitting"
    DONE = "done"
    FEED_FAILED = "feed_failed"


class ItemOutcome(str, Enum):
    INSERTED = "inserted"
    DUPLICATED = "duplicated"
    SKIPPED = "skipped"


@dataclass
class FetchOutcome:
    """Per-feed tally. Reported to the operator, never persisted."""

    feed_url: str
    inserted: int = 0
    duplicated: int = 0
    skipped: int = 0
    error: Optional[str] = None
    state: FeedState = FeedState.PENDING
    feed_title: Optional[str] = None
    item_count: int = 0

    @property
    def failed(self) -> bool:
        return self.state == FeedState.FEED_FAILED

    def record(self, outcome: ItemOutcome) -> None:
        if outcome == ItemOutcome.INSERTED:
            self.inserted += 1
        elif outcome == ItemOutcome.DUPLICATED:
            self.duplicated += 1
        else:
            self.skipped += 1

    def as_dict(self) -> dict:
        return {
            "feed_url": self.feed_url,
            "inserted": self.inserted,
            "duplicated": self.duplicated,
            "skipped": self.skipped,
            "error": self.error,
            "state": self.state.value,
        }


@dataclass
class RunSummary:
    """Outcomes of one run, in configured feed order, plus totals."""

    outcomes: List[FetchOutcome] = field(default_factory=list)

    @property
    def inserted(self) -> int:
        return sum(o.inserted for o in self.outcomes)

    @property
    def duplicated(self) -> int:
        return sum(o.duplicated for o in self.outcomes)

    @property
    def skipped(self) -> int:
        return sum(o.skipped for o in self.outcomes)

    @property
    def failed_feeds(self) -> List[str]:
        return [o.feed_url for o in self.outcomes if o.failed]

    @property
    def fully_successful(self) -> bool:
        """True only when no feed failed and no item was skipped."""
        return not self.failed_feeds and self.skipped == 0

    def totals(self) -> dict:
        return {
            "inserted": self.inserted,
            "duplicated": self.duplicated,
            "skipped": self.skipped,
            "failed_feeds": len(self.failed_feeds),
        }


class IngestionRunner:
    """Fetches, normalizes and stores articles for a list of feed sources."""

    def __init__(
        self,
        store: ArticleStore,
        fetcher: Optional[FeedFetcher] = None,
        normalizer: Optional[Normalizer] = None,
        parallel_feeds: Optional[int] = None,
    ):
        """Initialize the runner.

        Args:
            store: Destination for normalized articles
            fetcher: Feed fetcher (default from config)
            normalizer: Article normalizer (default from config)
            parallel_feeds: Sources processed at once; 1 keeps them strictly sequential
        """
        self.settings = get_settings()
        self.store = store
        self.fetcher = fetcher or FeedFetcher()
        self.normalizer = normalizer or Normalizer(
            excerpt_max_length=self.settings.normalization.excerpt_max_length
        )
        self.parallel_feeds = parallel_feeds or self.settings.processing.parallel_feeds
        self.logger = get_logger_for_component("ingestion_runner")

    async def run(self, feed_urls: Optional[Sequence[str]] = None) -> RunSummary:
        """Ingest every feed source and return the run tally.

        Args:
            feed_urls: Sources to process (default: configured feeds)

        Raises:
            ConfigurationError: If there is no feed source at all
        """
        urls = list(feed_urls) if feed_urls is not None else self.settings.get_feed_urls()
        if not urls:
            raise ConfigurationError(
                "No feed sources configured; set NEWSHARVEST_FEEDS__URLS or FEED_1, FEED_2, ...",
                config_key="feeds.urls",
                error_code=ErrorCode.CONFIG_MISSING,
            )

        self.logger.info(f"Starting ingestion of {len(urls)} feed(s)")

        async with self.fetcher.get_session() as session:
            if self.parallel_feeds <= 1:
                outcomes = [await self.ingest_feed(url, session) for url in urls]
            else:
                semaphore = asyncio.Semaphore(self.parallel_feeds)

                async def ingest_with_semaphore(url: str) -> FetchOutcome:
                    async with semaphore:
                        return await self.ingest_feed(url, session)

                outcomes = list(
                    await asyncio.gather(*(ingest_with_semaphore(url) for url in urls))
                )

        summary = RunSummary(outcomes=outcomes)
        self.logger.info(f"Ingestion finished: {summary.totals()}")
        if summary.failed_feeds:
            self.logger.warning(f"Failed feeds: {summary.failed_feeds}")
        return summary

    async def ingest_feed(self, feed_url: str, session=None) -> FetchOutcome:
        """Process one source; never raises for fetch or item failures."""
        outcome = FetchOutcome(feed_url=feed_url)
        feed_logger = get_logger_for_component("ingestion_runner", feed_url=feed_url)

        with PerformanceLogger(feed_logger, f"ingestion of {feed_url}"):
            outcome.state = FeedState.FETCHING
            try:
                document = await self.fetcher.fetch(feed_url, session)
            except FeedError as e:
                outcome.state = FeedState.FEED_FAILED
                outcome.error = str(e.last_error) if getattr(e, "last_error", None) else str(e)
                feed_logger.error(f"Feed failed: {outcome.error}")
                return outcome

            outcome.feed_title = document.title
            outcome.item_count = document.item_count
            await self._process_document(document, outcome)
            outcome.state = FeedState.DONE

        feed_logger.info(
            f"Feed done -> inserted: {outcome.inserted}, "
            f"duplicated: {outcome.duplicated}, skipped: {outcome.skipped}"
        )
        return outcome

    async def _process_document(self, document: FeedDocument, outcome: FetchOutcome) -> None:
        """Normalize then submit each item in document order."""
        for raw_item in document.items:
            outcome.state = FeedState.NORMALIZING
            article = self.normalizer.normalize(raw_item)

            outcome.state = FeedState.SUBMITTING
            outcome.record(await self.submit_article(article))

    async def submit_article(self, article: Article) -> ItemOutcome:
        """Submit one article and classify the store's answer.

        The store is blocking, so each submit runs in the default executor.
        """
        if not article.has_storage_keys:
            self.logger.debug(f"Skipping item without title/url: {article.canonical_url!r}")
            return ItemOutcome.SKIPPED

        loop = asyncio.get_running_loop()
        try:
            result = await loop.run_in_executor(None, self.store.submit, article)
        except Exception as e:
            self.logger.error(f"Store rejected {article.canonical_url}: {e}")
            return ItemOutcome.SKIPPED

        if result == StoreResult.INSERTED:
            return ItemOutcome.INSERTED
        if result == StoreResult.DUPLICATE:
            return ItemOutcome.DUPLICATED

        self.logger.warning(
            f"Unexpected store response {result!r} for {article.canonical_url}"
        )
        return ItemOutcome.SKIPPED

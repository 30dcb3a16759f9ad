"""
Article Repository
==================

The article store contract used by the ingestion runner, and its SQLite
implementation.

Duplicates are detected only through the store's own unique constraint on
``url_hash``: the insert is attempted and a conflict means "already
stored". There is no read-before-write.
"""

import sqlite3
from abc import ABC, abstractmethod
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.models import Article, StoreResult
from ..normalization.fingerprint import is_url_hash
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import ErrorCode, StoreRejectedError


class ArticleStore(ABC):
    """Anything that can persist canonical articles keyed by ``url_hash``."""

    @abstractmethod
    def submit(self, article: Article) -> StoreResult:
        """Store ``article`` unless its ``url_hash`` is already present.

        Raises:
            StoreRejectedError: On validation or connectivity failure
        """


class SQLiteArticleRepository(ArticleStore):
    """Article store backed by the ``articles`` SQLite table."""

    INSERT_SQL = """
        INSERT INTO articles (title, canonical_url, url_hash, excerpt,
                              content_html, image_url, published_at)
        VALUES (:title, :canonical_url, :url_hash, :excerpt,
                :content_html, :image_url, :published_at)
        ON CONFLICT(url_hash) DO NOTHING
    """

    def __init__(self, db_connection: DatabaseConnection):
        """Initialize article repository.

        Args:
            db_connection: Database connection manager
        """
        self.db = db_connection
        self.logger = get_logger_for_component("article_repository")

    def submit(self, article: Article) -> StoreResult:
        if not article.has_storage_keys:
            self.logger.warning(f"Rejecting article without storage keys: {article}")
            return StoreResult.REJECTED

        try:
            with self.db.get_connection() as conn:
                cursor = conn.execute(self.INSERT_SQL, article.to_row())
                conn.commit()
                affected = cursor.rowcount
        except sqlite3.Error as e:
            raise StoreRejectedError(
                f"Failed to store article {article.canonical_url}: {e}",
                url_hash=article.url_hash,
                error_code=(
                    ErrorCode.DATABASE_CONSTRAINT
                    if isinstance(e, sqlite3.IntegrityError)
                    else ErrorCode.DATABASE_ERROR
                ),
            ) from e

        if affected == 1:
            self.logger.debug(f"Stored article {article.url_hash}")
            return StoreResult.INSERTED
        if affected == 0:
            return StoreResult.DUPLICATE

        self.logger.warning(f"Unexpected row count {affected} for {article.url_hash}")
        return StoreResult.REJECTED

    def get_by_hash(self, url_hash: str) -> Optional[Article]:
        """Load a stored article by its dedup key."""
        if not is_url_hash(url_hash):
            return None

        row = self.db.execute_one(
            """
            SELECT title, canonical_url, url_hash, excerpt, content_html,
                   image_url, published_at
            FROM articles WHERE url_hash = ?
            """,
            (url_hash,),
        )
        if row is None:
            return None
        return Article(**dict(row))

    def count_articles(self) -> int:
        row = self.db.execute_one("SELECT COUNT(*) AS total FROM articles")
        return row["total"] if row else 0

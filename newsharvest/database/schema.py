"""
NewsHarvest Database Schema
==========================

SQLite schema for the local article store. ``url_hash`` carries the unique
constraint that decides what counts as a duplicate.
"""

import sqlite3
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class DatabaseSchema:
    """Creates and checks the article store tables."""

    REQUIRED_TABLES = ("articles",)

    def __init__(self, db_path: str = "data/newsharvest.db"):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def create_tables(self) -> None:
        """Create all tables and indexes if they do not exist yet."""
        with sqlite3.connect(self.db_path) as conn:
            self._create_articles_table(conn)
            self._create_indexes(conn)
            conn.commit()
            logger.info("Database schema created successfully")

    def _create_articles_table(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS articles (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                canonical_url TEXT NOT NULL,
                url_hash TEXT NOT NULL UNIQUE CHECK (length(url_hash) = 40),
                excerpt TEXT,
                content_html TEXT,
                image_url TEXT,
                published_at TIMESTAMP,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """
        )

    def _create_indexes(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_articles_published_at ON articles(published_at)"
        )

    def verify_schema(self) -> bool:
        """Check that every required table exists."""
        with sqlite3.connect(self.db_path) as conn:
            rows = conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table'"
            ).fetchall()
        existing = {row[0] for row in rows}
        missing = [table for table in self.REQUIRED_TABLES if table not in existing]
        if missing:
            logger.error(f"Missing tables: {missing}")
            return False
        return True

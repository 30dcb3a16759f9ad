"""
NewsHarvest Database Connection Management
=========================================

SQLite connection pooling and query helpers for the article store.
"""

import sqlite3
import threading
import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Generator
from queue import Queue, Empty, Full

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """Thread-safe SQLite database connection manager with pooling."""

    def __init__(self, db_path: str = "data/newsharvest.db", pool_size: int = 5):
        """Initialize database connection manager.

        Args:
            db_path: Path to SQLite database file
            pool_size: Maximum number of connections in pool
        """
        self.db_path = Path(db_path)
        self.pool_size = pool_size
        self.pool: Queue = Queue(maxsize=pool_size)
        self.lock = threading.Lock()
        self._total_connections = 0

        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        for _ in range(self.pool_size):
            self.pool.put(self._create_connection())

    def _create_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            self.db_path,
            check_same_thread=False,
            timeout=30.0  # Seconds to wait on a locked database
        )
        conn.execute("PRAGMA journal_mode = WAL")
        conn.execute("PRAGMA synchronous = NORMAL")
        conn.row_factory = sqlite3.Row

        with self.lock:
            self._total_connections += 1

        logger.debug(f"Created database connection #{self._total_connections}")
        return conn

    @contextmanager
    def get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Borrow a pooled connection; it is returned when the block exits.

        Usage:
            with db.get_connection() as conn:
                rows = conn.execute("SELECT * FROM articles").fetchall()
        """
        start_time = time.time()
        try:
            conn = self.pool.get(timeout=10.0)
        except Empty:
            logger.warning("Connection pool exhausted, creating new connection")
            conn = self._create_connection()

        acquisition_time = time.time() - start_time
        if acquisition_time > 1.0:
            logger.warning(f"Database connection acquisition took {acquisition_time:.2f}s")

        try:
            yield conn
        except sqlite3.Error as e:
            logger.error(f"Database error: {e}")
            conn.rollback()
            raise
        finally:
            try:
                self.pool.put_nowait(conn)
            except Full:
                conn.close()
                with self.lock:
                    self._total_connections -= 1

    def execute_one(self, query: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        """Execute a query and return the first row, if any."""
        with self.get_connection() as conn:
            return conn.execute(query, params).fetchone()

    def close_all_connections(self) -> None:
        """Close all connections in the pool."""
        logger.info("Closing all database connections")

        while not self.pool.empty():
            try:
                self.pool.get_nowait().close()
            except (Empty, sqlite3.Error):
                break

        with self.lock:
            self._total_connections = 0

"""
Database connection management and schema initialization.
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ..exceptions import PersistenceError

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """Manages database connection and schema."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @contextmanager
    def conn(self) -> Iterator[sqlite3.Connection]:
        """
        Get database connection with row factory.

        Commits on success. Any sqlite3 error rolls back and surfaces as
        PersistenceError.
        """
        try:
            connection = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            logger.exception(f"Could not open database at {self.db_path}")
            raise PersistenceError("Database unavailable") from e

        connection.row_factory = sqlite3.Row
        try:
            connection.execute("PRAGMA foreign_keys = ON")
            yield connection
            connection.commit()
        except sqlite3.Error as e:
            connection.rollback()
            logger.exception("Database operation failed")
            raise PersistenceError("Database operation failed") from e
        finally:
            connection.close()

    def _init_schema(self):
        """Initialize database schema."""
        with self.conn() as connection:
            connection.executescript("""
                CREATE TABLE IF NOT EXISTS feeds (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    url TEXT NOT NULL,
                    title TEXT NOT NULL,
                    last_fetched_at TIMESTAMP,
                    fetch_error TEXT,
                    created_at TIMESTAMP NOT NULL,
                    UNIQUE (user_id, url)
                );

                CREATE TABLE IF NOT EXISTS feed_items (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    feed_id INTEGER NOT NULL REFERENCES feeds(id) ON DELETE CASCADE,
                    guid TEXT,
                    title TEXT NOT NULL,
                    link TEXT NOT NULL DEFAULT '',
                    description TEXT,
                    author TEXT,
                    published_at TIMESTAMP,
                    status TEXT NOT NULL DEFAULT 'unread'
                        CHECK (status IN ('unread', 'read', 'archived')),
                    created_at TIMESTAMP NOT NULL
                );

                CREATE TABLE IF NOT EXISTS notes (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    feed_item_id INTEGER NOT NULL REFERENCES feed_items(id) ON DELETE CASCADE,
                    user_id TEXT NOT NULL,
                    content TEXT NOT NULL,
                    selected_text TEXT,
                    created_at TIMESTAMP NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_feeds_user ON feeds(user_id, created_at DESC);
                CREATE INDEX IF NOT EXISTS idx_items_feed_link ON feed_items(feed_id, link);
                CREATE INDEX IF NOT EXISTS idx_items_feed_guid ON feed_items(feed_id, guid);
                CREATE INDEX IF NOT EXISTS idx_items_status ON feed_items(status, published_at DESC);
                CREATE INDEX IF NOT EXISTS idx_notes_item ON notes(feed_item_id, user_id, created_at DESC);
            """)

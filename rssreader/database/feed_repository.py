"""
Feed repository - CRUD operations for feeds.
"""

import sqlite3

from ..exceptions import DuplicateFeedError
from .connection import DatabaseConnection
from .converters import row_to_feed, utc_now
from .models import DBFeed

_FEED_SELECT = """
    SELECT f.*,
           COUNT(CASE WHEN i.status = 'unread' THEN 1 END) as unread_count
    FROM feeds f
    LEFT JOIN feed_items i ON f.id = i.feed_id
"""


class FeedRepository:
    """Repository for feed operations. Every query is scoped to one user."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def add(self, user_id: str, url: str, title: str) -> int:
        """Add a new feed. Returns feed ID."""
        with self._db.conn() as conn:
            try:
                cursor = conn.execute(
                    "INSERT INTO feeds (user_id, url, title, created_at) VALUES (?, ?, ?, ?)",
                    (user_id, url, title, utc_now())
                )
            except sqlite3.IntegrityError as e:
                raise DuplicateFeedError(f"Already subscribed to {url}") from e
            return cursor.lastrowid

    def get(self, feed_id: int, user_id: str) -> DBFeed | None:
        """Get single feed by ID, or None if the user does not own it."""
        with self._db.conn() as conn:
            row = conn.execute(
                _FEED_SELECT + " WHERE f.id = ? AND f.user_id = ? GROUP BY f.id",
                (feed_id, user_id)
            ).fetchone()
            return row_to_feed(row) if row else None

    def get_by_url(self, url: str, user_id: str) -> DBFeed | None:
        with self._db.conn() as conn:
            row = conn.execute(
                _FEED_SELECT + " WHERE f.url = ? AND f.user_id = ? GROUP BY f.id",
                (url, user_id)
            ).fetchone()
            return row_to_feed(row) if row else None

    def get_all(self, user_id: str) -> list[DBFeed]:
        """Get all of a user's feeds with unread counts, newest subscription first."""
        with self._db.conn() as conn:
            rows = conn.execute(
                _FEED_SELECT + " WHERE f.user_id = ? GROUP BY f.id ORDER BY f.created_at DESC, f.id DESC",
                (user_id,)
            ).fetchall()
            return [row_to_feed(row) for row in rows]

    def update_fetched(self, feed_id: int, error: str | None = None):
        """Update feed's last fetched timestamp and last refresh error."""
        with self._db.conn() as conn:
            conn.execute(
                "UPDATE feeds SET last_fetched_at = ?, fetch_error = ? WHERE id = ?",
                (utc_now(), error, feed_id)
            )

    def update_title(self, feed_id: int, title: str):
        with self._db.conn() as conn:
            conn.execute("UPDATE feeds SET title = ? WHERE id = ?", (title, feed_id))

    def delete(self, feed_id: int, user_id: str) -> bool:
        """
        Delete feed along with its items and their notes.

        Returns False if the user owns no such feed.
        """
        with self._db.conn() as conn:
            cursor = conn.execute(
                "DELETE FROM feeds WHERE id = ? AND user_id = ?",
                (feed_id, user_id)
            )
            return cursor.rowcount > 0

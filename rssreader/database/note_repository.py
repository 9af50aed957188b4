"""
Note repository - user notes attached to feed items.
"""

from .connection import DatabaseConnection
from .converters import row_to_note, utc_now
from .models import DBNote


class NoteRepository:
    """Repository for note operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def add(
        self,
        feed_item_id: int,
        user_id: str,
        content: str,
        selected_text: str | None = None
    ) -> DBNote:
        """Add a note and return it as stored."""
        with self._db.conn() as conn:
            cursor = conn.execute(
                """INSERT INTO notes (feed_item_id, user_id, content, selected_text, created_at)
                   VALUES (?, ?, ?, ?, ?)""",
                (feed_item_id, user_id, content, selected_text, utc_now())
            )
            row = conn.execute(
                "SELECT * FROM notes WHERE id = ?", (cursor.lastrowid,)
            ).fetchone()
            return row_to_note(row)

    def get_for_item(self, feed_item_id: int, user_id: str) -> list[DBNote]:
        """Get a user's notes on an item, newest first."""
        with self._db.conn() as conn:
            rows = conn.execute(
                """SELECT * FROM notes
                   WHERE feed_item_id = ? AND user_id = ?
                   ORDER BY created_at DESC, id DESC""",
                (feed_item_id, user_id)
            ).fetchall()
            return [row_to_note(row) for row in rows]

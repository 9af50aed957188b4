"""
Item repository - feed items, scoped to a user through the owning feed.
"""

from .connection import DatabaseConnection
from .converters import row_to_item, to_db_timestamp, utc_now
from .models import DBFeedItem, ItemStatus

# Display order: newest published first, undated items last, then newest stored
DISPLAY_ORDER = "(i.published_at IS NULL), i.published_at DESC, i.created_at DESC, i.id DESC"

_ITEM_SELECT = """
    SELECT i.*, f.title as feed_title
    FROM feed_items i
    JOIN feeds f ON i.feed_id = f.id
"""


class ItemRepository:
    """Repository for feed item operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def add_many(self, items) -> list[int]:
        """Insert reconciled items. Returns their IDs in insertion order."""
        ids = []
        with self._db.conn() as conn:
            for item in items:
                cursor = conn.execute(
                    """INSERT INTO feed_items
                       (feed_id, guid, title, link, description, author, published_at, status, created_at)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                    (
                        item.feed_id,
                        item.guid,
                        item.title,
                        item.link or "",
                        item.description,
                        item.author,
                        to_db_timestamp(item.published_at),
                        ItemStatus(item.status).value,
                        utc_now(),
                    )
                )
                ids.append(cursor.lastrowid)
        return ids

    def get_for_feed(self, feed_id: int) -> list[DBFeedItem]:
        """All stored items of a feed, used for reconciliation."""
        with self._db.conn() as conn:
            rows = conn.execute(
                _ITEM_SELECT + f" WHERE i.feed_id = ? ORDER BY {DISPLAY_ORDER}",
                (feed_id,)
            ).fetchall()
            return [row_to_item(row) for row in rows]

    def get(self, item_id: int, user_id: str) -> DBFeedItem | None:
        """Get an item if it belongs to one of the user's feeds."""
        with self._db.conn() as conn:
            row = conn.execute(
                _ITEM_SELECT + " WHERE i.id = ? AND f.user_id = ?",
                (item_id, user_id)
            ).fetchone()
            return row_to_item(row) if row else None

    def get_page(
        self,
        user_id: str,
        status: ItemStatus | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[DBFeedItem], int]:
        """
        Get one page of the user's items in display order.

        Returns (items, total) where total counts every matching item.
        """
        conditions = ["f.user_id = ?"]
        params: list = [user_id]
        if status is not None:
            conditions.append("i.status = ?")
            params.append(ItemStatus(status).value)
        where = " AND ".join(conditions)

        with self._db.conn() as conn:
            total = conn.execute(
                f"SELECT COUNT(*) as cnt FROM feed_items i JOIN feeds f ON i.feed_id = f.id WHERE {where}",
                params
            ).fetchone()["cnt"]
            rows = conn.execute(
                _ITEM_SELECT + f" WHERE {where} ORDER BY {DISPLAY_ORDER} LIMIT ? OFFSET ?",
                params + [limit, offset]
            ).fetchall()
            return [row_to_item(row) for row in rows], total

    def update_status(self, item_id: int, user_id: str, status: ItemStatus) -> bool:
        """Set an item's status. Returns False if the user owns no such item."""
        with self._db.conn() as conn:
            cursor = conn.execute(
                """UPDATE feed_items SET status = ?
                   WHERE id = ? AND feed_id IN (SELECT id FROM feeds WHERE user_id = ?)""",
                (ItemStatus(status).value, item_id, user_id)
            )
            return cursor.rowcount > 0

    def get_next(
        self,
        current: DBFeedItem,
        user_id: str,
        status: ItemStatus | None = None,
    ) -> DBFeedItem | None:
        """
        Get the next-most-recent item after current, in display order.

        For a dated current item that is the newest item published strictly
        before it, else the first undated item. Undated items come last, so
        after an undated current item only undated items stored before it
        qualify. current itself is only the anchor; it need not match the
        status filter.
        """
        published = to_db_timestamp(current.published_at)
        if published is None:
            created = to_db_timestamp(current.created_at)
            after = "(i.published_at IS NULL AND (i.created_at < ? OR (i.created_at = ? AND i.id < ?)))"
            after_params = [created, created, current.id]
        else:
            after = "(i.published_at < ? OR i.published_at IS NULL)"
            after_params = [published]

        conditions = ["f.user_id = ?", "i.id != ?", after]
        params: list = [user_id, current.id] + after_params
        if status is not None:
            conditions.append("i.status = ?")
            params.append(ItemStatus(status).value)

        with self._db.conn() as conn:
            row = conn.execute(
                _ITEM_SELECT + f" WHERE {' AND '.join(conditions)} ORDER BY {DISPLAY_ORDER} LIMIT 1",
                params
            ).fetchone()
            return row_to_item(row) if row else None

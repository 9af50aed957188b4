"""
Database row converters - convert SQLite rows to dataclasses.
"""

import sqlite3
from datetime import datetime, timezone

from .models import DBFeed, DBFeedItem, DBNote, ItemStatus


def to_db_timestamp(value: datetime | None) -> str | None:
    """Store timestamps as UTC ISO 8601 so they sort lexicographically."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _optional(row: sqlite3.Row, column: str):
    """Columns that only some queries select."""
    try:
        return row[column]
    except (IndexError, KeyError):
        return None


def row_to_feed(row: sqlite3.Row) -> DBFeed:
    """Convert a database row to a DBFeed."""
    return DBFeed(
        id=row["id"],
        user_id=row["user_id"],
        url=row["url"],
        title=row["title"],
        last_fetched_at=_parse_timestamp(row["last_fetched_at"]),
        created_at=_parse_timestamp(row["created_at"]) or datetime.now(timezone.utc),
        fetch_error=row["fetch_error"],
        unread_count=_optional(row, "unread_count") or 0,
    )


def row_to_item(row: sqlite3.Row) -> DBFeedItem:
    """Convert a database row to a DBFeedItem."""
    return DBFeedItem(
        id=row["id"],
        feed_id=row["feed_id"],
        guid=row["guid"],
        title=row["title"],
        link=row["link"],
        description=row["description"],
        published_at=_parse_timestamp(row["published_at"]),
        status=ItemStatus(row["status"]),
        created_at=_parse_timestamp(row["created_at"]) or datetime.now(timezone.utc),
        author=row["author"],
        feed_title=_optional(row, "feed_title"),
    )


def row_to_note(row: sqlite3.Row) -> DBNote:
    """Convert a database row to a DBNote."""
    return DBNote(
        id=row["id"],
        feed_item_id=row["feed_item_id"],
        user_id=row["user_id"],
        content=row["content"],
        selected_text=row["selected_text"],
        created_at=_parse_timestamp(row["created_at"]) or datetime.now(timezone.utc),
    )

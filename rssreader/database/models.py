"""
Database models - dataclasses for database entities.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class ItemStatus(str, Enum):
    UNREAD = "unread"
    READ = "read"
    ARCHIVED = "archived"


@dataclass
class DBFeed:
    id: int
    user_id: str
    url: str
    title: str
    last_fetched_at: datetime | None
    created_at: datetime
    fetch_error: str | None = None
    unread_count: int = 0


@dataclass
class DBFeedItem:
    id: int
    feed_id: int
    guid: str | None
    title: str
    link: str
    description: str | None
    published_at: datetime | None
    status: ItemStatus
    created_at: datetime
    author: str | None = None
    feed_title: str | None = None  # Joined from feeds in list queries


@dataclass
class DBNote:
    id: int
    feed_item_id: int
    user_id: str
    content: str
    selected_text: str | None
    created_at: datetime

"""
Database module - SQLite persistence for feeds, items and notes.

Uses repository pattern for better separation of concerns.
"""

from .connection import DatabaseConnection
from .models import DBFeed, DBFeedItem, DBNote, ItemStatus
from .feed_repository import FeedRepository
from .item_repository import ItemRepository
from .note_repository import NoteRepository
from .database import Database

__all__ = [
    "Database",
    "DatabaseConnection",
    "DBFeed",
    "DBFeedItem",
    "DBNote",
    "ItemStatus",
    "FeedRepository",
    "ItemRepository",
    "NoteRepository",
]

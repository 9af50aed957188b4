"""
Database facade - provides unified access to all repositories.
"""

from pathlib import Path

from .connection import DatabaseConnection
from .feed_repository import FeedRepository
from .item_repository import ItemRepository
from .note_repository import NoteRepository


class Database:
    """
    Unified database access facade.

    Services reach the tables through the repositories hung off this object.
    """

    def __init__(self, db_path: Path | str):
        self._connection = DatabaseConnection(Path(db_path))

        self.feeds = FeedRepository(self._connection)
        self.items = ItemRepository(self._connection)
        self.notes = NoteRepository(self._connection)

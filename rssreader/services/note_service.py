"""
Note service: notes on selections of article text.
"""

from ..auth import AuthContext
from ..database import Database
from ..database.models import DBNote
from ..exceptions import ValidationError, require_item


class NoteService:
    """Service for note business logic."""

    def __init__(self, db: Database):
        self.db = db

    def create_note(
        self,
        auth: AuthContext,
        feed_item_id: int,
        content: str,
        selected_text: str | None = None,
    ) -> DBNote:
        """
        Attach a note to one of the user's items.

        Raises:
            ValidationError: If content is empty
            NotFoundError: If the user owns no such item
        """
        content = (content or "").strip()
        if not content:
            raise ValidationError("Note content is required", code="missing_fields")

        require_item(self.db.items.get(feed_item_id, auth.user_id))
        return self.db.notes.add(feed_item_id, auth.user_id, content, selected_text or None)

    def list_notes(self, auth: AuthContext, feed_item_id: int) -> list[DBNote]:
        """Get the user's notes on an item, newest first."""
        require_item(self.db.items.get(feed_item_id, auth.user_id))
        return self.db.notes.get_for_item(feed_item_id, auth.user_id)

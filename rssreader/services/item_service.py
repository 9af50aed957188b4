"""
Item service: listing, status changes and reading-order navigation.
"""

import math
from dataclasses import dataclass

from ..auth import AuthContext
from ..cache import AdvisoryCache
from ..config import config
from ..database import Database
from ..database.models import DBFeedItem, ItemStatus
from ..exceptions import ValidationError, require_item
from .feed_service import item_list_prefix


@dataclass
class ItemPage:
    items: list[DBFeedItem]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def parse_status(value: str | ItemStatus | None) -> ItemStatus | None:
    """
    Convert a status filter to ItemStatus. None and "all" mean no filter.

    Raises:
        ValidationError: If value is not a known status
    """
    if value is None or isinstance(value, ItemStatus):
        return value
    value = value.strip().lower()
    if not value or value == "all":
        return None
    try:
        return ItemStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in ItemStatus)
        raise ValidationError(
            f"Invalid status '{value}'. Expected one of: {allowed}",
            code="invalid_status",
        )


class ItemService:
    """Service for feed item business logic."""

    def __init__(self, db: Database, item_list_cache: AdvisoryCache | None = None):
        self.db = db
        self.item_list_cache = item_list_cache

    def list_items(
        self,
        auth: AuthContext,
        status: str | ItemStatus | None = ItemStatus.UNREAD,
        page: int = 1,
        limit: int | None = None,
    ) -> ItemPage:
        """
        Get one page of the user's items, newest first with undated items last.

        Only unread items unless status says otherwise; None or "all" lists
        every item.

        Raises:
            ValidationError: If page or limit is out of range or status is unknown
        """
        limit = config.PAGE_SIZE if limit is None else limit
        if page < 1:
            raise ValidationError("page must be at least 1")
        if not 1 <= limit <= config.MAX_PAGE_SIZE:
            raise ValidationError(f"limit must be between 1 and {config.MAX_PAGE_SIZE}")
        item_status = parse_status(status)

        cache_key = (
            f"{item_list_prefix(auth.user_id)}"
            f"{item_status.value if item_status else 'all'}:{page}:{limit}"
        )
        if self.item_list_cache is not None:
            cached, is_fresh = self.item_list_cache.get(cache_key)
            if is_fresh:
                return cached

        items, total = self.db.items.get_page(
            auth.user_id,
            status=item_status,
            limit=limit,
            offset=(page - 1) * limit,
        )
        result = ItemPage(items=items, total=total, page=page, limit=limit)

        if self.item_list_cache is not None:
            self.item_list_cache.put(cache_key, result)
        return result

    def get_item(self, auth: AuthContext, item_id: int) -> DBFeedItem:
        return require_item(self.db.items.get(item_id, auth.user_id))

    def update_status(
        self,
        auth: AuthContext,
        item_id: int,
        status: str | ItemStatus,
    ) -> DBFeedItem:
        """
        Set an item's status.

        Raises:
            NotFoundError: If the user owns no such item
            ValidationError: If status is unknown
        """
        item_status = parse_status(status)
        if item_status is None:
            raise ValidationError("status is required", code="invalid_status")

        require_item(self.db.items.get(item_id, auth.user_id))
        self.db.items.update_status(item_id, auth.user_id, item_status)

        if self.item_list_cache is not None:
            self.item_list_cache.invalidate_prefix(item_list_prefix(auth.user_id))
        return require_item(self.db.items.get(item_id, auth.user_id))

    def get_next(
        self,
        auth: AuthContext,
        current_id: int,
        status: str | ItemStatus | None = ItemStatus.UNREAD,
    ) -> DBFeedItem | None:
        """
        Get the item after current_id in display order among items with the
        given status (unread by default, None or "all" for any). Returns None
        at the end of the list.

        Raises:
            NotFoundError: If the user owns no item current_id
        """
        item_status = parse_status(status)
        current = require_item(self.db.items.get(current_id, auth.user_id))
        return self.db.items.get_next(current, auth.user_id, status=item_status)

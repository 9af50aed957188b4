"""
Item Reconciler - Merge freshly parsed feed items into the stored item set.

A re-fetch must never duplicate items or regress their status: items already
stored for the feed (same link, or same guid for link-less items) are
skipped, everything else is inserted as unread with a normalized publish
date.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Iterable, TypeVar

from .database.models import DBFeedItem, ItemStatus
from .feeds import ParsedItem


@dataclass
class NewFeedItem:
    """A feed item ready to be persisted."""
    feed_id: int
    guid: str
    title: str
    link: str
    description: str
    author: str | None
    published_at: datetime | None
    status: ItemStatus = ItemStatus.UNREAD


@dataclass
class ReconcileResult:
    to_insert: list[NewFeedItem] = field(default_factory=list)
    to_skip: list[ParsedItem] = field(default_factory=list)


T = TypeVar("T")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def dedup_key(feed_id: int, link: str | None, guid: str | None) -> tuple[int, str]:
    """Identity of an item within its feed: the link, or the guid without one."""
    if link and link.strip():
        return feed_id, "link:" + link.strip()
    return feed_id, "guid:" + (guid or "").strip()


def normalize_published(item: ParsedItem) -> datetime | None:
    """
    Turn an item's publish date into an aware UTC datetime.

    Uses the parser's value when it has one, otherwise tries RFC 822 and
    ISO 8601 on the raw string. Returns None when absent or unparseable.
    """
    if item.published is not None:
        return _to_utc(item.published)

    raw = (item.pub_date or "").strip()
    if not raw:
        return None

    try:
        return _to_utc(parsedate_to_datetime(raw))
    except (TypeError, ValueError, IndexError):
        pass

    try:
        return _to_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))
    except ValueError:
        return None


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).replace(microsecond=0)


def display_sort_key(item) -> tuple:
    """
    Sort key for display order: newest published first, undated items last.

    Ties break on created_at then id (both descending) when the item has them.
    """
    published = getattr(item, "published_at", None)
    created = getattr(item, "created_at", None)
    item_id = getattr(item, "id", None)
    return (
        published is None,
        -(_to_utc(published) - _EPOCH).total_seconds() if published else 0.0,
        -(_to_utc(created) - _EPOCH).total_seconds() if created else 0.0,
        -(item_id or 0),
    )


def sort_items(items: Iterable[T]) -> list[T]:
    """Order items by published_at descending, nulls last."""
    return sorted(items, key=display_sort_key)


def reconcile(
    feed_id: int,
    parsed_items: list[ParsedItem],
    existing_items: list[DBFeedItem],
) -> ReconcileResult:
    """
    Split parsed items into new items to insert and known items to skip.

    Existing items are never modified, so their read/archived status
    survives re-fetches. Running reconcile again with the inserted items
    added to existing_items yields nothing to insert.
    """
    seen = {dedup_key(feed_id, item.link, item.guid) for item in existing_items}
    result = ReconcileResult()

    for parsed in parsed_items:
        key = dedup_key(feed_id, parsed.link, parsed.guid)
        if key in seen:
            result.to_skip.append(parsed)
            continue
        seen.add(key)
        result.to_insert.append(NewFeedItem(
            feed_id=feed_id,
            guid=parsed.guid,
            title=parsed.title,
            link=parsed.link,
            description=parsed.content,
            author=parsed.author,
            published_at=normalize_published(parsed),
        ))

    result.to_insert = sort_items(result.to_insert)
    return result

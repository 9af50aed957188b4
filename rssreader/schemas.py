"""
Pydantic models for API request/response validation.
"""

from datetime import datetime

from pydantic import BaseModel

from .database import DBFeed, DBFeedItem, DBNote
from .extractor import ExtractedArticle
from .feeds import ParsedFeed, ParsedItem


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


# ─────────────────────────────────────────────────────────────
# Feed Schemas
# ─────────────────────────────────────────────────────────────

class FeedResponse(BaseModel):
    """Subscribed feed."""
    id: int
    url: str
    title: str
    unread_count: int
    last_fetched_at: str | None
    fetch_error: str | None = None
    created_at: str

    @classmethod
    def from_db(cls, feed: DBFeed) -> "FeedResponse":
        return cls(
            id=feed.id,
            url=feed.url,
            title=feed.title,
            unread_count=feed.unread_count,
            last_fetched_at=_iso(feed.last_fetched_at),
            fetch_error=feed.fetch_error,
            created_at=feed.created_at.isoformat(),
        )


class AddFeedRequest(BaseModel):
    """Request to subscribe to a feed."""
    url: str


class FeedFailureResponse(BaseModel):
    feed_id: int
    url: str
    error: str


class RefreshFeedResponse(BaseModel):
    """Result of refreshing one feed."""
    feed: FeedResponse
    new_items: int


class RefreshAllResponse(BaseModel):
    """Result of refreshing all feeds."""
    refreshed: int
    new_items: int
    failures: list[FeedFailureResponse]


# ─────────────────────────────────────────────────────────────
# Item Schemas
# ─────────────────────────────────────────────────────────────

class ItemResponse(BaseModel):
    """Stored feed item."""
    id: int
    feed_id: int
    feed_title: str | None = None
    guid: str | None
    title: str
    link: str
    description: str | None
    author: str | None = None
    published_at: str | None
    status: str
    created_at: str

    @classmethod
    def from_db(cls, item: DBFeedItem) -> "ItemResponse":
        return cls(
            id=item.id,
            feed_id=item.feed_id,
            feed_title=item.feed_title,
            guid=item.guid,
            title=item.title,
            link=item.link,
            description=item.description,
            author=item.author,
            published_at=_iso(item.published_at),
            status=item.status.value,
            created_at=item.created_at.isoformat(),
        )


class ItemPageResponse(BaseModel):
    """One page of items."""
    items: list[ItemResponse]
    total: int
    page: int
    total_pages: int


class UpdateItemStatusRequest(BaseModel):
    """Request to set an item's status (unread, read or archived)."""
    status: str


class NextItemResponse(BaseModel):
    """Next item in reading order, null at the end of the list."""
    item: ItemResponse | None


# ─────────────────────────────────────────────────────────────
# Live RSS Schemas
# ─────────────────────────────────────────────────────────────

class FetchFeedRequest(BaseModel):
    """Request to read a feed without subscribing."""
    url: str


class MediaResponse(BaseModel):
    url: str | None
    type: str | None = None
    medium: str | None = None


class ParsedItemResponse(BaseModel):
    """Item as read live from a feed."""
    title: str
    link: str
    content: str
    guid: str
    pub_date: str | None
    author: str | None = None
    categories: list[str] = []
    media: MediaResponse | None = None

    @classmethod
    def from_parsed(cls, item: ParsedItem) -> "ParsedItemResponse":
        return cls(
            title=item.title,
            link=item.link,
            content=item.content,
            guid=item.guid,
            pub_date=item.pub_date,
            author=item.author,
            categories=item.categories,
            media=MediaResponse(
                url=item.media.url,
                type=item.media.type,
                medium=item.media.medium,
            ) if item.media else None,
        )


class ParsedFeedResponse(BaseModel):
    """Feed as read live from the network."""
    title: str
    description: str | None
    link: str | None
    version: str
    items: list[ParsedItemResponse]

    @classmethod
    def from_parsed(cls, feed: ParsedFeed) -> "ParsedFeedResponse":
        return cls(
            title=feed.title,
            description=feed.description,
            link=feed.link,
            version=feed.version,
            items=[ParsedItemResponse.from_parsed(i) for i in feed.items],
        )


class TimelineEntryResponse(BaseModel):
    feed_id: int
    feed_title: str
    published_at: str | None
    item: ParsedItemResponse


class TimelineResponse(BaseModel):
    """Live items of all subscribed feeds, newest first."""
    entries: list[TimelineEntryResponse]
    failures: list[FeedFailureResponse]


# ─────────────────────────────────────────────────────────────
# Article Extraction Schemas
# ─────────────────────────────────────────────────────────────

class ExtractRequest(BaseModel):
    """Request to extract the article at a URL."""
    url: str


class ExtractedArticleResponse(BaseModel):
    """Readable article content."""
    url: str
    title: str
    content: str
    text_content: str
    excerpt: str
    byline: str | None
    length: int
    site_name: str | None = None

    @classmethod
    def from_article(cls, article: ExtractedArticle) -> "ExtractedArticleResponse":
        return cls(
            url=article.url,
            title=article.title,
            content=article.content,
            text_content=article.text_content,
            excerpt=article.excerpt,
            byline=article.byline,
            length=article.length,
            site_name=article.site_name,
        )


# ─────────────────────────────────────────────────────────────
# Note Schemas
# ─────────────────────────────────────────────────────────────

class NoteRequest(BaseModel):
    """Request to attach a note to an item."""
    feed_item_id: int
    content: str
    selected_text: str | None = None


class NoteResponse(BaseModel):
    id: int
    feed_item_id: int
    content: str
    selected_text: str | None
    created_at: str

    @classmethod
    def from_db(cls, note: DBNote) -> "NoteResponse":
        return cls(
            id=note.id,
            feed_item_id=note.feed_item_id,
            content=note.content,
            selected_text=note.selected_text,
            created_at=note.created_at.isoformat(),
        )


# ─────────────────────────────────────────────────────────────
# Misc Schemas
# ─────────────────────────────────────────────────────────────

class StatusResponse(BaseModel):
    status: str
    version: str

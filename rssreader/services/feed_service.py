"""
Feed service: business logic for feed subscriptions.

Handles subscribing (with feed autodiscovery), unsubscribing and refreshing
stored feeds. Every refresh runs the fetch -> parse -> reconcile pipeline and
only inserts items the feed has not stored before.
"""

import logging
from dataclasses import dataclass, field

from ..auth import AuthContext
from ..cache import AdvisoryCache
from ..database import Database
from ..database.models import DBFeed
from ..exceptions import (
    DuplicateFeedError,
    EmptyFeedError,
    ParseError,
    ReaderError,
    require_feed,
)
from ..feeds import FeedParser, ParsedFeed, discover_feed_url
from ..fetcher import Fetcher, RawPayload
from ..reconciler import reconcile
from ..url_validator import require_absolute_url

logger = logging.getLogger(__name__)


def item_list_prefix(user_id: str) -> str:
    """Cache key prefix of all item list pages of a user."""
    return f"items:{user_id}:"


@dataclass
class FeedFailure:
    feed_id: int
    url: str
    error: str


@dataclass
class RefreshSummary:
    """Outcome of refreshing several feeds."""
    refreshed: int = 0
    new_items: int = 0
    failures: list[FeedFailure] = field(default_factory=list)


class FeedService:
    """Service for feed-related business logic."""

    def __init__(
        self,
        db: Database,
        fetcher: Fetcher,
        feed_parser: FeedParser,
        item_list_cache: AdvisoryCache | None = None,
    ):
        self.db = db
        self.fetcher = fetcher
        self.feed_parser = feed_parser
        self.item_list_cache = item_list_cache

    # ─────────────────────────────────────────────────────────────
    # Feed Management
    # ─────────────────────────────────────────────────────────────

    def list_feeds(self, auth: AuthContext) -> list[DBFeed]:
        return self.db.feeds.get_all(auth.user_id)

    def get_feed(self, auth: AuthContext, feed_id: int) -> DBFeed:
        return require_feed(self.db.feeds.get(feed_id, auth.user_id))

    async def add_feed(self, auth: AuthContext, url: str) -> DBFeed:
        """
        Subscribe to a feed and store its current items as unread.

        url may also point to a website that advertises its feed with a
        <link rel="alternate"> tag.

        Raises:
            ValidationError: If url is not an absolute http(s) URL
            DuplicateFeedError: If the user already subscribes to the feed
            FetchError: If the feed cannot be retrieved
            ParseError: If the document is not a feed
            EmptyFeedError: If the feed has no items
        """
        url = require_absolute_url(url)
        self._check_not_subscribed(auth, url)

        payload = await self.fetcher.fetch(url)
        parsed, feed_url = await self._parse_or_discover(url, payload)
        if feed_url != url:
            self._check_not_subscribed(auth, feed_url)

        if not parsed.items:
            raise EmptyFeedError("Feed contains no items")

        feed_id = self.db.feeds.add(auth.user_id, feed_url, parsed.title or feed_url)
        try:
            inserted = self._store_items(feed_id, parsed)
            self.db.feeds.update_fetched(feed_id)
        except Exception:
            # A half-stored subscription would block the retry as a duplicate
            logger.warning(f"Rolling back subscription to {feed_url} for user {auth.user_id}")
            self.db.feeds.delete(feed_id, auth.user_id)
            raise
        self._invalidate_item_lists(auth)

        logger.info(f"User {auth.user_id} subscribed to {feed_url} ({inserted} items)")
        return require_feed(self.db.feeds.get(feed_id, auth.user_id))

    def delete_feed(self, auth: AuthContext, feed_id: int) -> None:
        """
        Unsubscribe from a feed. Its items and their notes are deleted too.

        Raises:
            NotFoundError: If the user has no such feed
        """
        require_feed(self.db.feeds.get(feed_id, auth.user_id))
        self.db.feeds.delete(feed_id, auth.user_id)
        self._invalidate_item_lists(auth)

    # ─────────────────────────────────────────────────────────────
    # Refresh
    # ─────────────────────────────────────────────────────────────

    async def refresh_feed(self, auth: AuthContext, feed_id: int) -> int:
        """
        Re-fetch one feed. Returns the number of new items.

        The failure is recorded on the feed and re-raised.
        """
        feed = require_feed(self.db.feeds.get(feed_id, auth.user_id))

        try:
            payload = await self.fetcher.fetch(feed.url)
            parsed = self.feed_parser.parse(payload.content)
        except ReaderError as e:
            self.db.feeds.update_fetched(feed.id, error=e.message)
            raise

        inserted = self._apply_refresh(feed, parsed)
        if inserted:
            self._invalidate_item_lists(auth)
        return inserted

    async def refresh_all(self, auth: AuthContext) -> RefreshSummary:
        """
        Re-fetch every feed of the user with bounded concurrency.

        A feed that fails is recorded and skipped; the rest still refresh.
        """
        feeds = self.db.feeds.get_all(auth.user_id)
        results = await self.fetcher.fetch_many([feed.url for feed in feeds])

        summary = RefreshSummary()
        for feed, result in zip(feeds, results):
            if isinstance(result, Exception):
                self._record_failure(summary, feed, result)
                continue
            try:
                parsed = self.feed_parser.parse(result.content)
            except ParseError as e:
                self._record_failure(summary, feed, e)
                continue

            summary.new_items += self._apply_refresh(feed, parsed)
            summary.refreshed += 1

        if summary.new_items:
            self._invalidate_item_lists(auth)
        logger.info(
            f"Refreshed {summary.refreshed}/{len(feeds)} feeds for user {auth.user_id}, "
            f"{summary.new_items} new items"
        )
        return summary

    # ─────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────

    def _record_failure(self, summary: RefreshSummary, feed: DBFeed, error: Exception) -> None:
        message = error.message if isinstance(error, ReaderError) else str(error)
        logger.warning(f"Skipping feed {feed.id} ({feed.url}): {message}")
        self.db.feeds.update_fetched(feed.id, error=message)
        summary.failures.append(FeedFailure(feed.id, feed.url, message))

    def _check_not_subscribed(self, auth: AuthContext, url: str) -> None:
        if self.db.feeds.get_by_url(url, auth.user_id):
            raise DuplicateFeedError(f"Already subscribed to {url}")

    async def _parse_or_discover(self, url: str, payload: RawPayload) -> tuple[ParsedFeed, str]:
        """Parse payload as a feed, falling back to the feed an HTML page links."""
        try:
            return self.feed_parser.parse(payload.content), url
        except ParseError:
            discovered = discover_feed_url(payload.text, payload.final_url)
            if not discovered or discovered == url:
                raise

        logger.info(f"Discovered feed {discovered} on {url}")
        payload = await self.fetcher.fetch(discovered)
        return self.feed_parser.parse(payload.content), discovered

    def _apply_refresh(self, feed: DBFeed, parsed: ParsedFeed) -> int:
        inserted = self._store_items(feed.id, parsed)
        if parsed.title and parsed.title != feed.title:
            self.db.feeds.update_title(feed.id, parsed.title)
        self.db.feeds.update_fetched(feed.id)
        return inserted

    def _store_items(self, feed_id: int, parsed: ParsedFeed) -> int:
        existing = self.db.items.get_for_feed(feed_id)
        result = reconcile(feed_id, parsed.items, existing)
        if result.to_insert:
            self.db.items.add_many(result.to_insert)
        return len(result.to_insert)

    def _invalidate_item_lists(self, auth: AuthContext) -> None:
        if self.item_list_cache is not None:
            self.item_list_cache.invalidate_prefix(item_list_prefix(auth.user_id))

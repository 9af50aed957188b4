"""
RSS service: live feed content that is not persisted.

Used by the aggregated timeline view, which reads every subscribed feed
straight from the network instead of from stored items.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from ..auth import AuthContext
from ..database import Database
from ..feeds import FeedParser, ParsedFeed, ParsedItem
from ..fetcher import Fetcher
from ..exceptions import ParseError, ReaderError
from ..reconciler import normalize_published, sort_items
from ..url_validator import require_absolute_url
from .feed_service import FeedFailure

logger = logging.getLogger(__name__)


@dataclass
class TimelineEntry:
    feed_id: int
    feed_title: str
    item: ParsedItem
    published_at: datetime | None


@dataclass
class Timeline:
    entries: list[TimelineEntry] = field(default_factory=list)
    failures: list[FeedFailure] = field(default_factory=list)


class RssService:
    """Service for live feed reads."""

    def __init__(self, db: Database, fetcher: Fetcher, feed_parser: FeedParser):
        self.db = db
        self.fetcher = fetcher
        self.feed_parser = feed_parser

    async def fetch_feed_content(self, auth: AuthContext, url: str) -> ParsedFeed:
        """
        Fetch and parse any feed URL without subscribing to it.

        Raises:
            ValidationError: If url is not an absolute http(s) URL
            FetchError: If the feed cannot be retrieved
            ParseError: If the document is not a feed
        """
        url = require_absolute_url(url)
        payload = await self.fetcher.fetch(url)
        parsed = self.feed_parser.parse(payload.content)
        logger.debug(f"Fetched {len(parsed.items)} live items from {url} for user {auth.user_id}")
        return parsed

    async def timeline(self, auth: AuthContext, limit: int = 100) -> Timeline:
        """
        Merge the current items of all the user's feeds, newest first.

        Feeds that fail to fetch or parse are reported in failures and
        skipped.
        """
        feeds = self.db.feeds.get_all(auth.user_id)
        results = await self.fetcher.fetch_many([feed.url for feed in feeds])

        timeline = Timeline()
        for feed, result in zip(feeds, results):
            if isinstance(result, Exception):
                message = result.message if isinstance(result, ReaderError) else str(result)
                logger.warning(f"Timeline skipping feed {feed.id} ({feed.url}): {message}")
                timeline.failures.append(FeedFailure(feed.id, feed.url, message))
                continue
            try:
                parsed = self.feed_parser.parse(result.content)
            except ParseError as e:
                logger.warning(f"Timeline skipping feed {feed.id} ({feed.url}): {e.message}")
                timeline.failures.append(FeedFailure(feed.id, feed.url, e.message))
                continue

            timeline.entries.extend(
                TimelineEntry(
                    feed_id=feed.id,
                    feed_title=feed.title,
                    item=item,
                    published_at=normalize_published(item),
                )
                for item in parsed.items
            )

        timeline.entries = sort_items(timeline.entries)[:limit]
        return timeline

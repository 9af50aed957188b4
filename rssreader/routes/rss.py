"""
Live RSS routes: read feeds straight from the network.
"""

from fastapi import APIRouter, Query

from ..auth import AuthDep
from ..schemas import (
    FeedFailureResponse,
    FetchFeedRequest,
    ParsedFeedResponse,
    ParsedItemResponse,
    TimelineEntryResponse,
    TimelineResponse,
)
from ..services import RssServiceDep

router = APIRouter(prefix="/rss", tags=["rss"])


@router.post("")
async def fetch_feed_content(
    request: FetchFeedRequest,
    service: RssServiceDep,
    auth: AuthDep,
) -> ParsedFeedResponse:
    """Fetch and parse a feed without subscribing to it."""
    feed = await service.fetch_feed_content(auth, request.url)
    return ParsedFeedResponse.from_parsed(feed)


@router.get("/timeline")
async def timeline(
    service: RssServiceDep,
    auth: AuthDep,
    limit: int = Query(default=100, ge=1, le=500),
) -> TimelineResponse:
    """Current items of all subscribed feeds, merged newest first."""
    result = await service.timeline(auth, limit=limit)
    return TimelineResponse(
        entries=[
            TimelineEntryResponse(
                feed_id=e.feed_id,
                feed_title=e.feed_title,
                published_at=e.published_at.isoformat() if e.published_at else None,
                item=ParsedItemResponse.from_parsed(e.item),
            )
            for e in result.entries
        ],
        failures=[
            FeedFailureResponse(feed_id=f.feed_id, url=f.url, error=f.error)
            for f in result.failures
        ],
    )

"""
Feed routes: subscribe, list, unsubscribe, refresh.
"""

from fastapi import APIRouter

from ..auth import AuthDep
from ..schemas import (
    AddFeedRequest,
    FeedFailureResponse,
    FeedResponse,
    RefreshAllResponse,
    RefreshFeedResponse,
)
from ..services import FeedServiceDep

router = APIRouter(prefix="/feeds", tags=["feeds"])


# ─────────────────────────────────────────────────────────────
# Feed Management
# ─────────────────────────────────────────────────────────────

@router.get("")
async def list_feeds(service: FeedServiceDep, auth: AuthDep) -> list[FeedResponse]:
    """List all subscribed feeds."""
    return [FeedResponse.from_db(f) for f in service.list_feeds(auth)]


@router.post("", status_code=201)
async def add_feed(
    request: AddFeedRequest,
    service: FeedServiceDep,
    auth: AuthDep,
) -> FeedResponse:
    """Subscribe to a new feed and store its items."""
    feed = await service.add_feed(auth, request.url)
    return FeedResponse.from_db(feed)


@router.delete("/{feed_id}")
async def remove_feed(feed_id: int, service: FeedServiceDep, auth: AuthDep) -> dict:
    """Unsubscribe from a feed, deleting its items and notes."""
    service.delete_feed(auth, feed_id)
    return {"success": True}


# ─────────────────────────────────────────────────────────────
# Refresh (static path before /{feed_id})
# ─────────────────────────────────────────────────────────────

@router.post("/refresh")
async def refresh_all_feeds(service: FeedServiceDep, auth: AuthDep) -> RefreshAllResponse:
    """Refresh every subscribed feed. Failing feeds are reported, not fatal."""
    summary = await service.refresh_all(auth)
    return RefreshAllResponse(
        refreshed=summary.refreshed,
        new_items=summary.new_items,
        failures=[
            FeedFailureResponse(feed_id=f.feed_id, url=f.url, error=f.error)
            for f in summary.failures
        ],
    )


@router.post("/{feed_id}/refresh")
async def refresh_feed(feed_id: int, service: FeedServiceDep, auth: AuthDep) -> RefreshFeedResponse:
    """Refresh a single feed."""
    new_items = await service.refresh_feed(auth, feed_id)
    feed = service.get_feed(auth, feed_id)
    return RefreshFeedResponse(feed=FeedResponse.from_db(feed), new_items=new_items)

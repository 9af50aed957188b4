"""
Item routes: paginated listing, status changes, next item.
"""

from fastapi import APIRouter, Query

from ..auth import AuthDep
from ..config import config
from ..schemas import ItemPageResponse, ItemResponse, NextItemResponse, UpdateItemStatusRequest
from ..services import ItemServiceDep

router = APIRouter(prefix="/items", tags=["items"])


@router.get("")
async def list_items(
    service: ItemServiceDep,
    auth: AuthDep,
    status: str = "unread",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=config.PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
) -> ItemPageResponse:
    """
    Get one page of items, newest first.

    status filters to unread (the default), read or archived; pass "all"
    for every item.
    """
    result = service.list_items(auth, status=status, page=page, limit=limit)
    return ItemPageResponse(
        items=[ItemResponse.from_db(i) for i in result.items],
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
    )


@router.get("/next")
async def get_next_item(
    service: ItemServiceDep,
    auth: AuthDep,
    current_id: int,
    status: str = "unread",
) -> NextItemResponse:
    """Get the item after current_id in reading order, unread only by default."""
    item = service.get_next(auth, current_id, status=status)
    return NextItemResponse(item=ItemResponse.from_db(item) if item else None)


@router.get("/{item_id}")
async def get_item(item_id: int, service: ItemServiceDep, auth: AuthDep) -> ItemResponse:
    return ItemResponse.from_db(service.get_item(auth, item_id))


@router.patch("/{item_id}")
async def update_item_status(
    item_id: int,
    request: UpdateItemStatusRequest,
    service: ItemServiceDep,
    auth: AuthDep,
) -> ItemResponse:
    """Mark an item unread, read or archived."""
    item = service.update_status(auth, item_id, request.status)
    return ItemResponse.from_db(item)

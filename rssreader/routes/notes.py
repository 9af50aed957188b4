"""
Note routes: annotate item text.
"""

from fastapi import APIRouter

from ..auth import AuthDep
from ..schemas import NoteRequest, NoteResponse
from ..services import NoteServiceDep

router = APIRouter(prefix="/notes", tags=["notes"])


@router.post("", status_code=201)
async def create_note(request: NoteRequest, service: NoteServiceDep, auth: AuthDep) -> NoteResponse:
    """Attach a note to one of the user's items."""
    note = service.create_note(
        auth,
        feed_item_id=request.feed_item_id,
        content=request.content,
        selected_text=request.selected_text,
    )
    return NoteResponse.from_db(note)


@router.get("")
async def list_notes(feed_item_id: int, service: NoteServiceDep, auth: AuthDep) -> list[NoteResponse]:
    """List the user's notes on an item, newest first."""
    return [NoteResponse.from_db(n) for n in service.list_notes(auth, feed_item_id)]

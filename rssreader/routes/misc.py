"""
Miscellaneous routes: health check.
"""

from fastapi import APIRouter

from .. import __version__
from ..config import state
from ..rate_limit import limiter
from ..schemas import StatusResponse

router = APIRouter(tags=["misc"])


@router.get("/status")
@limiter.exempt
async def health_check() -> StatusResponse:
    """API health check. Needs no authentication."""
    return StatusResponse(
        status="ok" if state.db is not None else "starting",
        version=__version__,
    )

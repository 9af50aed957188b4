"""
Request rate limiting.

A slowapi Limiter caps requests per client address. Feed and article
endpoints fetch remote hosts, so the cap also bounds the outbound traffic
one client can cause. RATE_LIMIT_PER_MINUTE <= 0 turns limiting off.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from .config import config

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = 60


def limit_string(per_minute: int) -> str:
    """slowapi limit for a per-minute budget. Never below one request."""
    return f"{max(per_minute, 1)}/minute"


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[limit_string(config.RATE_LIMIT_PER_MINUTE)],
    enabled=config.RATE_LIMIT_PER_MINUTE > 0,
    storage_uri="memory://",
)


def on_rate_limited(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(
        f"Rate limit hit by {get_remote_address(request)} on {request.method} {request.url.path}"
    )
    return JSONResponse(
        status_code=429,
        content={
            "error": f"Too many requests ({exc.detail}). Please wait and try again.",
            "code": "rate_limited",
        },
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )


def install_rate_limiting(app: FastAPI):
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, on_rate_limited)

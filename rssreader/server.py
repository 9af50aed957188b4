"""
RSS Reader API Server

FastAPI application providing endpoints for:
- Feed management (add, remove, refresh)
- Items (paginated listing, read/archive status, next item)
- Live feed reads and the aggregated timeline
- Article extraction
- Notes
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import __version__
from .cache import MemoryCache
from .config import config, state
from .database import Database
from .exceptions import PersistenceError, ReaderError
from .extractor import ArticleExtractor
from .feeds import FeedParser
from .fetcher import Fetcher
from .rate_limit import install_rate_limiting
from .routes import (
    articles_router,
    feeds_router,
    items_router,
    misc_router,
    notes_router,
    rss_router,
)

logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize application resources."""
    # Startup - skip if already initialized (e.g., by tests)
    if state.db is None:
        state.db = Database(config.DB_PATH)
        state.feed_parser = FeedParser()
        state.fetcher = Fetcher(
            timeout=config.FETCH_TIMEOUT,
            user_agent=config.USER_AGENT,
            max_concurrency=config.FETCH_CONCURRENCY,
            block_private_networks=config.BLOCK_PRIVATE_NETWORKS,
        )
        state.extractor = ArticleExtractor(min_text_length=config.MIN_ARTICLE_LENGTH)
        state.article_cache = MemoryCache(ttl_seconds=config.ARTICLE_CACHE_TTL)
        state.item_list_cache = MemoryCache(ttl_seconds=config.ITEM_LIST_CACHE_TTL)
        logger.info(f"Database ready at {config.DB_PATH}")

        if not config.auth_enabled():
            logger.warning("AUTH_API_KEY not set, trusting X-User-Id from any caller")

    yield


app = FastAPI(
    title="RSS Reader API",
    version=__version__,
    lifespan=lifespan
)

install_rate_limiting(app)


# ─────────────────────────────────────────────────────────────
# Error Handlers
# ─────────────────────────────────────────────────────────────

@app.exception_handler(ReaderError)
async def reader_error_handler(request: Request, exc: ReaderError) -> JSONResponse:
    if exc.status_code == 500:
        # Clients only see a generic message; PersistenceError is logged by the connection layer
        if not isinstance(exc, PersistenceError):
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": "Internal server error", "code": exc.code},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "code": exc.code},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    missing = [e for e in errors if e.get("type") == "missing"]
    first = (missing or errors or [{}])[0]
    field_name = ".".join(str(part) for part in first.get("loc", ())[1:]) or "request"
    if missing:
        message = f"Missing required field: {field_name}"
    else:
        message = f"Invalid value for {field_name}: {first.get('msg', 'invalid input')}"
    return JSONResponse(
        status_code=400,
        content={"error": message, "code": "missing_fields" if missing else "invalid_input"},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# Include routers
app.include_router(misc_router)
app.include_router(feeds_router)
app.include_router(items_router)
app.include_router(rss_router)
app.include_router(articles_router)
app.include_router(notes_router)


def main():
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        app,
        host=config.HOST,
        port=config.PORT,
        log_level=config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()

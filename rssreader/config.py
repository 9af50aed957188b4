"""
Configuration and application state management.
"""

import os
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from .exceptions import ReaderError

if TYPE_CHECKING:
    from .database import Database
    from .cache import AdvisoryCache
    from .extractor import ArticleExtractor
    from .feeds import FeedParser
    from .fetcher import Fetcher

# Load environment variables
load_dotenv()


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Parse boolean from environment variable."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


class Config:
    """Application configuration from environment."""
    DB_PATH: Path = Path(os.getenv("DB_PATH", "./data/reader.db"))
    HOST: str = os.getenv("HOST", "127.0.0.1")
    PORT: int = int(os.getenv("PORT", "5005"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Authentication
    # The upstream auth provider forwards the user identity in X-User-Id.
    # When AUTH_API_KEY is set, X-API-Key must match it as well.
    AUTH_API_KEY: str = os.getenv("AUTH_API_KEY", "")
    # Fixed identity for local development when no X-User-Id is sent
    DEV_USER_ID: str = os.getenv("DEV_USER_ID", "")

    # Fetching
    USER_AGENT: str = os.getenv(
        "USER_AGENT", "RSS Reader/1.0 (+https://github.com/rss-reader)"
    )
    FETCH_TIMEOUT: float = float(os.getenv("FETCH_TIMEOUT", "20"))  # seconds
    FETCH_CONCURRENCY: int = int(os.getenv("FETCH_CONCURRENCY", "3"))
    BLOCK_PRIVATE_NETWORKS: bool = _parse_bool(
        os.getenv("BLOCK_PRIVATE_NETWORKS"), default=True
    )

    # Extraction
    MIN_ARTICLE_LENGTH: int = int(os.getenv("MIN_ARTICLE_LENGTH", "200"))

    # Advisory caches (seconds)
    ARTICLE_CACHE_TTL: int = int(os.getenv("ARTICLE_CACHE_TTL", "86400"))
    ITEM_LIST_CACHE_TTL: int = int(os.getenv("ITEM_LIST_CACHE_TTL", "300"))

    PAGE_SIZE: int = int(os.getenv("PAGE_SIZE", "20"))
    MAX_PAGE_SIZE: int = 100

    # Requests per minute per client, 0 disables
    RATE_LIMIT_PER_MINUTE: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))

    @classmethod
    def auth_enabled(cls) -> bool:
        """Check if API key authentication is configured."""
        return bool(cls.AUTH_API_KEY)


config = Config()


class AppState:
    """Shared application state, built once in the server lifespan."""
    db: "Database | None" = None
    fetcher: "Fetcher | None" = None
    feed_parser: "FeedParser | None" = None
    extractor: "ArticleExtractor | None" = None
    article_cache: "AdvisoryCache | None" = None
    item_list_cache: "AdvisoryCache | None" = None


state = AppState()


def _require(component, name: str):
    if component is None:
        raise ReaderError(f"{name} not initialized", code="not_initialized")
    return component


def get_db() -> "Database":
    """Dependency to get database instance."""
    return _require(state.db, "Database")


def get_fetcher() -> "Fetcher":
    """Dependency to get the shared fetcher."""
    return _require(state.fetcher, "Fetcher")


def get_feed_parser() -> "FeedParser":
    """Dependency to get the shared feed parser."""
    return _require(state.feed_parser, "Feed parser")


def get_extractor() -> "ArticleExtractor":
    """Dependency to get the shared article extractor."""
    return _require(state.extractor, "Article extractor")

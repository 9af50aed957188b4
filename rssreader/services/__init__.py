"""
Service layer for business logic.

Services encapsulate business logic, keeping routes as thin HTTP adapters.
Each service receives its dependencies via constructor injection, and every
operation takes the caller's AuthContext explicitly.

Usage in routes:
    from ..services import ItemServiceDep

    @router.get("")
    async def list_items(service: ItemServiceDep, auth: AuthDep):
        return service.list_items(auth)
"""

from typing import Annotated

from fastapi import Depends

from ..config import state, get_db, get_extractor, get_feed_parser, get_fetcher
from ..database import Database
from ..extractor import ArticleExtractor
from ..feeds import FeedParser
from ..fetcher import Fetcher

from .article_service import ArticleService
from .feed_service import FeedService
from .item_service import ItemService
from .note_service import NoteService
from .rss_service import RssService

__all__ = [
    # Services
    "ArticleService",
    "FeedService",
    "ItemService",
    "NoteService",
    "RssService",
    # Dependency factories
    "get_article_service",
    "get_feed_service",
    "get_item_service",
    "get_note_service",
    "get_rss_service",
    # Type aliases for dependency injection
    "ArticleServiceDep",
    "FeedServiceDep",
    "ItemServiceDep",
    "NoteServiceDep",
    "RssServiceDep",
]


def get_article_service(
    fetcher: Annotated[Fetcher, Depends(get_fetcher)],
    extractor: Annotated[ArticleExtractor, Depends(get_extractor)],
) -> ArticleService:
    """Dependency to get ArticleService instance."""
    return ArticleService(
        fetcher=fetcher,
        extractor=extractor,
        article_cache=state.article_cache,
    )


def get_feed_service(
    db: Annotated[Database, Depends(get_db)],
    fetcher: Annotated[Fetcher, Depends(get_fetcher)],
    feed_parser: Annotated[FeedParser, Depends(get_feed_parser)],
) -> FeedService:
    """Dependency to get FeedService instance."""
    return FeedService(
        db=db,
        fetcher=fetcher,
        feed_parser=feed_parser,
        item_list_cache=state.item_list_cache,
    )


def get_item_service(db: Annotated[Database, Depends(get_db)]) -> ItemService:
    """Dependency to get ItemService instance."""
    return ItemService(db=db, item_list_cache=state.item_list_cache)


def get_note_service(db: Annotated[Database, Depends(get_db)]) -> NoteService:
    """Dependency to get NoteService instance."""
    return NoteService(db=db)


def get_rss_service(
    db: Annotated[Database, Depends(get_db)],
    fetcher: Annotated[Fetcher, Depends(get_fetcher)],
    feed_parser: Annotated[FeedParser, Depends(get_feed_parser)],
) -> RssService:
    """Dependency to get RssService instance."""
    return RssService(db=db, fetcher=fetcher, feed_parser=feed_parser)


ArticleServiceDep = Annotated[ArticleService, Depends(get_article_service)]
FeedServiceDep = Annotated[FeedService, Depends(get_feed_service)]
ItemServiceDep = Annotated[ItemService, Depends(get_item_service)]
NoteServiceDep = Annotated[NoteService, Depends(get_note_service)]
RssServiceDep = Annotated[RssService, Depends(get_rss_service)]

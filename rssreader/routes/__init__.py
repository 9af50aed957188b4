"""
API route modules.
"""

from .articles import router as articles_router
from .feeds import router as feeds_router
from .items import router as items_router
from .misc import router as misc_router
from .notes import router as notes_router
from .rss import router as rss_router

__all__ = [
    "articles_router",
    "feeds_router",
    "items_router",
    "misc_router",
    "notes_router",
    "rss_router",
]

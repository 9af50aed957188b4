"""
Article service: full-content extraction for arbitrary article pages.
"""

import logging

from ..auth import AuthContext
from ..cache import AdvisoryCache
from ..exceptions import ExtractionError
from ..extractor import ArticleExtractor, ExtractedArticle
from ..fetcher import Fetcher
from ..url_validator import require_absolute_url

logger = logging.getLogger(__name__)


def article_cache_key(url: str) -> str:
    return f"article:{url}"


class ArticleService:
    """Service for article extraction."""

    def __init__(
        self,
        fetcher: Fetcher,
        extractor: ArticleExtractor,
        article_cache: AdvisoryCache | None = None,
    ):
        self.fetcher = fetcher
        self.extractor = extractor
        self.article_cache = article_cache

    async def extract(self, auth: AuthContext, url: str) -> ExtractedArticle:
        """
        Fetch a page and extract its main article.

        A fetch failure and a page without article content are distinct
        errors.

        Raises:
            ValidationError: If url is not an absolute http(s) URL
            FetchError: If the page cannot be retrieved
            ExtractionError: If no article content was found
        """
        url = require_absolute_url(url)
        cache_key = article_cache_key(url)

        if self.article_cache is not None:
            cached, is_fresh = self.article_cache.get(cache_key)
            if is_fresh:
                return cached

        payload = await self.fetcher.fetch_page(url)
        article = self.extractor.extract(payload.text, payload.final_url)
        if article is None:
            logger.info(f"No article content found at {url} (user {auth.user_id})")
            raise ExtractionError()

        if self.article_cache is not None:
            self.article_cache.put(cache_key, article)
        return article

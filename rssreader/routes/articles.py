"""
Article routes: reader-mode extraction of arbitrary pages.
"""

from fastapi import APIRouter

from ..auth import AuthDep
from ..schemas import ExtractedArticleResponse, ExtractRequest
from ..services import ArticleServiceDep

router = APIRouter(tags=["articles"])


@router.post("/extract")
async def extract_article(
    request: ExtractRequest,
    service: ArticleServiceDep,
    auth: AuthDep,
) -> ExtractedArticleResponse:
    """
    Extract the readable article at a URL.

    Errors distinguish an unreachable page (400/502, code "unreachable")
    from a page without article content (422, code "not_extractable").
    """
    article = await service.extract(auth, request.url)
    return ExtractedArticleResponse.from_article(article)

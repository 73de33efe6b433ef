from __future__ import annotations

from typing import Optional
from urllib.parse import urlparse

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.core.logging import get_logger
from app.deps.news import get_article_content_service
from app.models.article import ArticleContentResponse
from services.article_content_service import (
    ArticleContentService,
    ArticleFetchError,
    build_failure_response,
)

logger = get_logger(module="article_content_router")

router = APIRouter(
    prefix="/article-content",
    tags=["news"],
)


def _is_http_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@router.get(
    "",
    response_model=ArticleContentResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
async def get_article_content(
    url: Optional[str] = Query(None, description="Absolute http(s) URL of the article."),
    service: ArticleContentService = Depends(get_article_content_service),
):
    target = (url or "").strip()
    if not target:
        return JSONResponse(status_code=400, content={"success": False, "error": "URL parameter is required"})
    if not _is_http_url(target):
        return JSONResponse(status_code=400, content={"success": False, "error": "URL must be http(s)"})

    try:
        return await service.fetch_article(target)
    except ArticleFetchError as exc:
        logger.warning("article_content_fetch_failed", url=target, error=str(exc))
        failure = build_failure_response(str(exc))
    except Exception as exc:
        logger.exception("article_content_unexpected_error", url=target)
        failure = build_failure_response(f"{type(exc).__name__}: {exc}")

    return JSONResponse(status_code=500, content=failure.model_dump(by_alias=True, exclude_none=True))

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.config import Settings, get_settings
from app.core.logging import get_logger
from app.deps.news import get_news_aggregation_service
from app.models.news import NewsListResponse
from services.news_aggregation_service import (
    CATEGORY_FILTERS,
    SORT_MODES,
    NewsAggregationService,
    NewsQuery,
    NoNewsFoundError,
    build_news_response,
    clamp_limit,
)

logger = get_logger(module="news_router")

router = APIRouter(
    prefix="/news",
    tags=["news"],
)

_TRUTHY = {"1", "true", "yes", "on"}


def _parse_flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in _TRUTHY


@router.get("", response_model=NewsListResponse, response_model_by_alias=True)
async def get_news(
    category: str = Query("all", description="all, base, crypto, ai or world."),
    limit: Optional[str] = Query(None, description="Max items, clamped to [1, 50]."),
    skip_ai: Optional[str] = Query(None, description="1/true/yes/on skips LLM enrichment."),
    sort: str = Query("relevance", description="relevance or source."),
    settings: Settings = Depends(get_settings),
    service: NewsAggregationService = Depends(get_news_aggregation_service),
):
    normalized = category.strip().lower() or "all"
    if normalized not in CATEGORY_FILTERS:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": f"Invalid category. Use one of: {', '.join(CATEGORY_FILTERS)}",
            },
        )

    sort_mode = sort.strip().lower()
    query = NewsQuery(
        category=normalized,
        limit=clamp_limit(limit, default=settings.NEWS_DEFAULT_LIMIT, maximum=settings.NEWS_MAX_LIMIT),
        skip_ai=_parse_flag(skip_ai),
        sort=sort_mode if sort_mode in SORT_MODES else "relevance",
    )

    try:
        result = await service.run(query)
    except NoNewsFoundError as exc:
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "No news found",
                "debug": exc.debug.model_dump(by_alias=True),
            },
        )

    return build_news_response(result, query)

# app/deps/news.py
from __future__ import annotations

from typing import AsyncIterator

from fastapi import Depends

from app.config import Settings, get_settings
from services.article_content_service import ArticleContentService
from services.news_aggregation_service import NewsAggregationService

__all__ = ["get_news_aggregation_service", "get_article_content_service"]


def get_news_aggregation_service(settings: Settings = Depends(get_settings)) -> NewsAggregationService:
    """Nieuwe service per request; er wordt niets tussen requests gedeeld."""
    return NewsAggregationService(settings)


async def get_article_content_service(
    settings: Settings = Depends(get_settings),
) -> AsyncIterator[ArticleContentService]:
    async with ArticleContentService(timeout_s=settings.NEWS_FETCH_TIMEOUT_S) as service:
        yield service

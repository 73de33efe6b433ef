"""
News aggregation pipeline.

fetch (all providers) -> dedupe -> category filter -> enrich (or fallback)
-> re-filter after AI overrides -> sort -> limit -> envelope.

State lives only for one `run`: no cache, no cross-request seen-set.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple, Type

from app.config import Settings
from app.core.logging import get_logger
from app.models.news import NewsCategory, NewsDebugInfo, NewsItem, NewsListResponse
from app.models.news_sources import NewsProvider, get_news_providers
from services.base_scraper_service import BaseScraperService
from services.news_cryptopanic_service import CryptoPanicNewsProvider
from services.news_dedupe import remove_duplicates
from services.news_enrichment_service import NewsEnrichmentService, apply_fallback
from services.news_newsdata_service import NewsDataNewsProvider
from services.news_provider_service import NewsProviderService, Sleeper
from services.news_rss_provider import RSSNewsProvider

logger = get_logger(module="news_aggregation_service")

ALL_CATEGORIES = "all"
CATEGORY_FILTERS: Tuple[str, ...] = (ALL_CATEGORIES, *(c.value for c in NewsCategory))
SORT_MODES: Tuple[str, ...] = ("relevance", "source")

PROVIDER_CLASSES: Dict[str, Type[NewsProviderService]] = {
    "rss": RSSNewsProvider,
    "cryptopanic": CryptoPanicNewsProvider,
    "newsdata": NewsDataNewsProvider,
}


class NoNewsFoundError(Exception):
    """Every provider came back empty; carries the diagnostics for the 500 body."""

    def __init__(self, debug: NewsDebugInfo):
        super().__init__("No news found")
        self.debug = debug


@dataclass(frozen=True)
class NewsQuery:
    category: str = ALL_CATEGORIES
    limit: int = 30
    skip_ai: bool = False
    sort: str = "relevance"


@dataclass
class AggregationResult:
    items: List[NewsItem]
    debug: NewsDebugInfo
    ai: bool


def clamp_limit(value: Optional[object], *, default: int, maximum: int) -> int:
    """Parse a user-supplied limit and clamp it to [1, maximum]."""
    if value is None or value == "":
        return default
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return max(1, min(maximum, parsed))


def filter_by_category(items: Sequence[NewsItem], category: str) -> List[NewsItem]:
    if category == ALL_CATEGORIES:
        return list(items)
    return [item for item in items if item.category.value == category]


def build_provider_service(
    provider: NewsProvider,
    http: BaseScraperService,
    settings: Settings,
    *,
    sleep: Sleeper = asyncio.sleep,
) -> NewsProviderService:
    provider_cls = PROVIDER_CLASSES[provider.type]
    credential = getattr(settings, provider.credential_name) if provider.credential_name else None
    return provider_cls(provider, http, credential=credential, sleep=sleep)


def _utc_iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class NewsAggregationService:
    def __init__(
        self,
        settings: Settings,
        *,
        providers: Optional[Sequence[NewsProvider]] = None,
        enricher: Optional[NewsEnrichmentService] = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self.settings = settings
        self._providers = list(providers) if providers is not None else None
        self._enricher = enricher
        self._sleep = sleep

    def _provider_configs(self) -> List[NewsProvider]:
        if self._providers is not None:
            return self._providers
        return get_news_providers(self.settings.NEWS_SOURCES_PATH)

    @property
    def ai_available(self) -> bool:
        return self._enricher is not None or self.settings.ai_enabled

    def _get_enricher(self) -> NewsEnrichmentService:
        if self._enricher is None:
            self._enricher = NewsEnrichmentService(self.settings)
        return self._enricher

    async def collect(self) -> Tuple[List[NewsItem], NewsDebugInfo]:
        """Fetch every provider concurrently; each provider runs its own variants sequentially."""
        debug = NewsDebugInfo()
        configs = self._provider_configs()

        async with BaseScraperService(timeout_s=self.settings.NEWS_FETCH_TIMEOUT_S) as http:
            services = [
                build_provider_service(provider, http, self.settings, sleep=self._sleep)
                for provider in configs
            ]
            results = await asyncio.gather(*(service.fetch() for service in services))

        collected: List[NewsItem] = []
        for result in results:
            debug.sources[result.key] = result.count
            debug.errors.extend(result.errors)
            if result.skipped:
                debug.skipped.append(result.key)
            collected.extend(result.items)

        debug.total_collected = len(collected)
        logger.info(
            "news_collect_done",
            providers=len(configs),
            total=debug.total_collected,
            per_source=debug.sources,
            errors=len(debug.errors),
        )
        return collected, debug

    async def run(self, query: NewsQuery) -> AggregationResult:
        items, debug = await self.collect()
        if not items:
            logger.error("news_no_items_collected", errors=debug.errors, skipped=debug.skipped)
            raise NoNewsFoundError(debug)

        unique = remove_duplicates(items)
        debug.after_dedupe = len(unique)
        breakdown = Counter(item.category.value for item in unique)
        logger.info("news_deduplicated", before=len(items), after=len(unique), categories=dict(breakdown))

        selected = filter_by_category(unique, query.category)
        # Bij sort=source hoeven alleen de items binnen de limit verrijkt te worden
        if query.sort != "relevance":
            selected = selected[: query.limit]
        selected = selected[: self.settings.NEWS_MAX_LIMIT]

        use_ai = not query.skip_ai and self.ai_available
        if use_ai:
            selected = await self._get_enricher().enrich_all(selected)
            selected = filter_by_category(selected, query.category)
        else:
            selected = [apply_fallback(item) for item in selected]

        if query.sort == "relevance":
            # sorted() is stabiel: gelijke scores houden de bronvolgorde
            selected = sorted(selected, key=lambda item: item.relevance_score or 0, reverse=True)

        final = selected[: query.limit]
        debug.base_articles = sum(1 for item in final if item.category == NewsCategory.BASE)
        debug.total_processed = len(final)
        logger.info(
            "news_pipeline_done",
            category=query.category,
            limit=query.limit,
            ai=use_ai,
            returned=len(final),
        )
        return AggregationResult(items=final, debug=debug, ai=use_ai)


def build_news_response(result: AggregationResult, query: NewsQuery) -> NewsListResponse:
    return NewsListResponse(
        success=True,
        data=result.items,
        count=len(result.items),
        timestamp=_utc_iso_now(),
        category=query.category,
        limit=query.limit,
        ai=result.ai,
        debug=result.debug,
    )

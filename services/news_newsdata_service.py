"""
NewsData.io "latest" API provider.

One call per configured query, sequential, with a fixed delay in between.
All queries are tried; results accumulate.
"""

from __future__ import annotations

import time
from typing import Any, Dict, List

from app.models.news import NewsItem
from app.utils.relative_time import format_relative_time
from services.news_categorizer import categorize
from services.news_provider_service import NewsProviderService, ProviderResult, payload_failure_reason

_DEFAULT_PAGE_SIZE = 3


class NewsDataNewsProvider(NewsProviderService):
    def _params(self, query: str) -> Dict[str, Any]:
        return {
            "apikey": self.credential,
            "q": query,
            "language": "en",
            "size": self.provider.page_size or _DEFAULT_PAGE_SIZE,
        }

    async def _collect(self, result: ProviderResult) -> None:
        for position, query in enumerate(self.provider.variants):
            if position > 0:
                await self._pause()
            try:
                payload = await self.http.fetch_json(self.provider.url, params=self._params(query))
            except Exception as exc:
                message = self.describe_error(exc)
                self._log.warning("news_newsdata_query_failed", query=query, error=message)
                result.errors.append(f"{self.provider.name} '{query}': {message}")
                continue

            articles = payload.get("results")
            if payload.get("status") == "error" or not isinstance(articles, list):
                reason = payload_failure_reason(payload)
                self._log.warning("news_newsdata_no_results", query=query, reason=reason)
                result.errors.append(f"{self.provider.name} '{query}': {reason}")
                continue

            items = self._to_items(position, articles)
            result.items.extend(items)
            self._log.info("news_newsdata_query_done", query=query, items=len(items))

    def _to_items(self, query_index: int, articles: List[Any]) -> List[NewsItem]:
        fetched_ms = int(time.time() * 1000)
        items: List[NewsItem] = []
        for idx, article in enumerate(articles[: self.provider.max_items]):
            if not isinstance(article, dict):
                continue
            title = str(article.get("title") or "").strip()
            url = str(article.get("link") or "").strip()
            if not title or not url:
                continue
            description = str(article.get("description") or "").strip()
            article_id = article.get("article_id")
            item_id = (
                f"{self.provider.key}_{article_id}"
                if article_id
                else f"{self.provider.key}_{fetched_ms}_{query_index}_{idx}"
            )
            items.append(
                NewsItem(
                    id=item_id,
                    category=categorize(title, description, default=self.provider.default_category),
                    title=title,
                    url=url,
                    source=article.get("source_name") or article.get("source_id") or self.provider.name,
                    timestamp=format_relative_time(article.get("pubDate")),
                    raw_content=description or title,
                )
            )
        return items

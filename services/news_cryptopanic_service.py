"""
CryptoPanic posts API provider.

One call per configured filter (rising, hot, ...), issued sequentially with a
fixed delay. A failing filter is recorded and the next one is still tried.
"""

from __future__ import annotations

from typing import Any, Dict, List

from app.models.news import NewsItem
from app.utils.relative_time import format_relative_time
from services.news_categorizer import categorize
from services.news_provider_service import NewsProviderService, ProviderResult, payload_failure_reason


class CryptoPanicNewsProvider(NewsProviderService):
    def _params(self, filter_name: str) -> Dict[str, Any]:
        return {
            "auth_token": self.credential,
            "public": "true",
            "kind": "news",
            "filter": filter_name,
            "page": 1,
        }

    async def _collect(self, result: ProviderResult) -> None:
        for position, filter_name in enumerate(self.provider.variants):
            if position > 0:
                await self._pause()
            try:
                payload = await self.http.fetch_json(self.provider.url, params=self._params(filter_name))
            except Exception as exc:
                message = self.describe_error(exc)
                self._log.warning("news_cryptopanic_filter_failed", filter=filter_name, error=message)
                result.errors.append(f"{self.provider.name} {filter_name}: {message}")
                continue

            posts = payload.get("results")
            if not isinstance(posts, list):
                reason = payload_failure_reason(payload)
                self._log.warning("news_cryptopanic_no_results", filter=filter_name, reason=reason)
                result.errors.append(f"{self.provider.name} {filter_name}: {reason}")
                continue

            items = self._to_items(filter_name, posts)
            result.items.extend(items)
            self._log.info("news_cryptopanic_filter_done", filter=filter_name, items=len(items))

    def _to_items(self, filter_name: str, posts: List[Any]) -> List[NewsItem]:
        items: List[NewsItem] = []
        for idx, post in enumerate(posts[: self.provider.max_items]):
            if not isinstance(post, dict):
                continue
            title = str(post.get("title") or "").strip()
            url = str(post.get("url") or "").strip()
            if not title or not url:
                continue
            source = post.get("source")
            source_name = source.get("title") if isinstance(source, dict) else None
            items.append(
                NewsItem(
                    id=f"{self.provider.key}_{filter_name}_{post.get('id') or idx}",
                    category=categorize(
                        title,
                        "",
                        post.get("currencies") or [],
                        default=self.provider.default_category,
                    ),
                    title=title,
                    url=url,
                    source=source_name or self.provider.name,
                    timestamp=format_relative_time(post.get("created_at") or post.get("published_at")),
                    raw_content=title,
                )
            )
        return items

"""
Plain RSS provider (Coinbase Blog).

Fetches the feed once, parses it with feedparser and keeps the first
`max_items` entries.
"""

from __future__ import annotations

from app.models.news import NewsItem
from app.utils.relative_time import format_relative_time
from services.news_categorizer import categorize
from services.news_provider_service import NewsProviderService, ProviderResult
from services.rss_normalization import parse_rss


class RSSNewsProvider(NewsProviderService):
    async def _collect(self, result: ProviderResult) -> None:
        response = await self.http.fetch(self.provider.url)
        entries, norm_errors = parse_rss(response.content)

        for err in norm_errors:
            self._log.debug("news_rss_normalization_error", error=str(err))
        self._log.info("news_rss_parsed", entries=len(entries), errors=len(norm_errors))

        for idx, entry in enumerate(entries[: self.provider.max_items]):
            title = entry.title or "Untitled"
            result.items.append(
                NewsItem(
                    id=f"{self.provider.key}_{idx}",
                    category=categorize(
                        title,
                        entry.description,
                        default=self.provider.default_category,
                    ),
                    title=title,
                    url=entry.link,
                    source=self.provider.name,
                    timestamp=format_relative_time(entry.pub_date),
                    raw_content=entry.description or title,
                )
            )

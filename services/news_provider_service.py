from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from app.core.logging import get_logger, scrub_query_secrets
from app.models.news import NewsItem
from app.models.news_sources import NewsProvider
from services.base_scraper_service import BaseScraperService

logger = get_logger(module="news_provider_service")

Sleeper = Callable[[float], Awaitable[None]]


@dataclass
class ProviderResult:
    """Outcome of one provider fetch. Failures show up in `errors`, never as exceptions."""

    key: str
    name: str
    items: List[NewsItem] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    skipped: bool = False

    @property
    def count(self) -> int:
        return len(self.items)


def payload_failure_reason(payload: Dict[str, Any]) -> str:
    """Short reason for an API payload without a usable `results` list."""
    status = payload.get("status")
    reason = str(status) if status else "no results"
    detail = payload.get("results")
    if isinstance(detail, dict) and detail.get("message"):
        reason = f"{reason} ({detail['message']})"
    return scrub_query_secrets(reason)


class NewsProviderService:
    """
    Base class for upstream news providers.

    Subclasses implement `_collect`; `fetch` wraps it so that a broken provider
    contributes zero items plus an error message instead of failing the request.
    """

    def __init__(
        self,
        provider: NewsProvider,
        http: BaseScraperService,
        *,
        credential: Optional[str] = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self.provider = provider
        self.http = http
        self.credential = credential
        self._sleep = sleep
        self._log = get_logger(module="news_provider_service", provider=provider.key)

    @property
    def requires_credential(self) -> bool:
        return self.provider.credential_name is not None

    async def fetch(self) -> ProviderResult:
        result = ProviderResult(key=self.provider.key, name=self.provider.name)
        if self.requires_credential and not self.credential:
            self._log.info("news_provider_skipped_no_credential", credential=self.provider.credential_name)
            result.skipped = True
            return result

        try:
            await self._collect(result)
        except Exception as exc:
            message = self.describe_error(exc)
            self._log.warning("news_provider_failed", error=message)
            result.errors.append(f"{self.provider.name}: {message}")

        self._log.info("news_provider_done", items=result.count, errors=len(result.errors))
        return result

    async def _collect(self, result: ProviderResult) -> None:
        raise NotImplementedError

    async def _pause(self) -> None:
        """Fixed delay between calls to the same provider (rate limits)."""
        if self.provider.call_delay_ms > 0:
            await self._sleep(self.provider.call_delay_s)

    def describe_error(self, exc: Exception) -> str:
        # httpx zet de volledige URL (incl. auth_token/apikey) in de foutmelding
        if isinstance(exc, httpx.HTTPStatusError):
            message = f"HTTP {exc.response.status_code}"
        elif isinstance(exc, httpx.TimeoutException):
            message = "timeout"
        else:
            message = f"{type(exc).__name__}: {exc}"
        if self.credential:
            message = message.replace(self.credential, "***")
        return scrub_query_secrets(message)

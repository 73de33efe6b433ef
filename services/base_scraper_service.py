from __future__ import annotations

import asyncio
from typing import Any, Dict, Mapping, Optional

import httpx

from app.core.logging import get_logger

logger = get_logger()

DEFAULT_USER_AGENT = "crypto-news-hub/1.0"
# Sommige nieuwssites blokkeren alles wat niet op een browser lijkt
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class BaseScraperService:
    """
    Shared base class for outbound HTTP: news providers and article pages.

    Provides common HTTP client management, optional retry logic and
    concurrency control. Use as an async context manager.
    """

    def __init__(
        self,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout_s: float = 10.0,
        max_concurrency: int = 5,
        max_retries: int = 0,
    ) -> None:
        """
        Args:
            user_agent: User-Agent string for HTTP requests
            timeout_s: Request timeout in seconds
            max_concurrency: Maximum concurrent requests (semaphore limit)
            max_retries: Retry attempts for failed requests (0 = single attempt)
        """
        self.user_agent = user_agent
        self.timeout_s = timeout_s
        self.max_concurrency = max(1, max_concurrency)
        self.max_retries = max(0, max_retries)
        self._client: Optional[httpx.AsyncClient] = None
        self._sem = asyncio.Semaphore(self.max_concurrency)

    async def __aenter__(self) -> "BaseScraperService":
        """Initialize HTTP client on context entry."""
        self._client = httpx.AsyncClient(
            timeout=self.timeout_s,
            headers={"User-Agent": self.user_agent},
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        """Close HTTP client on context exit."""
        if self._client:
            await self._client.aclose()

    async def fetch(self, url: str, *, params: Optional[Mapping[str, Any]] = None) -> httpx.Response:
        """
        Fetch URL with retry logic and concurrency control.

        Raises:
            httpx.HTTPError: If all attempts fail (non-2xx, network, timeout)
        """
        if self._client is None:
            raise RuntimeError(f"{self.__class__.__name__} HTTP client not initialized")

        attempt = 0
        delay = 1.0
        last_exc: Optional[Exception] = None

        while attempt <= self.max_retries:
            try:
                async with self._sem:
                    response = await self._client.get(url, params=params)
                response.raise_for_status()
                return response
            except httpx.HTTPError as exc:
                last_exc = exc
                attempt += 1
                if attempt > self.max_retries:
                    break
                logger.debug("scraper_fetch_retry", url=url, attempt=attempt, error=str(exc))
                await asyncio.sleep(delay)
                delay = min(delay * 2, 10)

        assert last_exc is not None
        raise last_exc

    async def fetch_html(self, url: str) -> str:
        """Fetch URL and return response text (HTML/XML)."""
        response = await self.fetch(url)
        return response.text

    async def fetch_json(self, url: str, *, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """
        Fetch URL and decode a JSON object body.

        Raises:
            ValueError: If the body is not a JSON object
        """
        response = await self.fetch(url, params=params)
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError(f"expected JSON object, got {type(payload).__name__}")
        return payload

# -*- coding: utf-8 -*-
"""
Article Content Service.

Haalt een artikelpagina op en maakt er leesbare platte tekst van. Bewust
simpel: geen readability-algoritme, alleen een paar bekende containers.
"""

from __future__ import annotations

import re
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from app.core.logging import get_logger
from app.models.article import (
    ARTICLE_LOAD_FAILED_MESSAGE,
    ARTICLE_UNAVAILABLE_MESSAGE,
    ArticleContentResponse,
)
from services.base_scraper_service import BROWSER_USER_AGENT, BaseScraperService

logger = get_logger(module="article_content_service")

MAX_CONTENT_CHARS = 10_000
MIN_CONTENT_CHARS = 100

_WHITESPACE_RE = re.compile(r"\s+")
_ARTICLE_CLASS_RE = re.compile("article", re.IGNORECASE)
_CONTENT_CLASS_RE = re.compile("content", re.IGNORECASE)


class ArticleFetchError(Exception):
    """Upstream page could not be fetched (non-2xx, network, timeout)."""


def _normalize_text(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def _find_container(soup: BeautifulSoup):
    return (
        soup.find("article")
        or soup.find("div", class_=_ARTICLE_CLASS_RE)
        or soup.find("div", class_=_CONTENT_CLASS_RE)
        or soup.find("main")
    )


def extract_article_text(html: str) -> str:
    """
    Strip scripts/styles, prefer the first known article container, normalise
    whitespace and cap the length.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    for element in soup(["script", "style"]):
        element.decompose()

    container = _find_container(soup)
    text = _normalize_text((container or soup).get_text(" "))

    if len(text) > MAX_CONTENT_CHARS:
        text = text[:MAX_CONTENT_CHARS] + "..."
    return text


def build_article_response(text: str) -> ArticleContentResponse:
    if len(text) < MIN_CONTENT_CHARS:
        return ArticleContentResponse(content=ARTICLE_UNAVAILABLE_MESSAGE, is_fallback=True)
    return ArticleContentResponse(content=text, is_fallback=False)


def build_failure_response(error: Optional[str]) -> ArticleContentResponse:
    return ArticleContentResponse(
        success=False,
        content=ARTICLE_LOAD_FAILED_MESSAGE,
        error=error or "Failed to fetch article content",
    )


class ArticleContentService(BaseScraperService):
    """Fetches article pages with a browser-like User-Agent."""

    def __init__(self, *, timeout_s: float = 10.0) -> None:
        super().__init__(user_agent=BROWSER_USER_AGENT, timeout_s=timeout_s, max_concurrency=1)

    async def fetch_article(self, url: str) -> ArticleContentResponse:
        """
        Raises:
            ArticleFetchError: page could not be fetched
        """
        try:
            html = await self.fetch_html(url)
        except httpx.HTTPStatusError as exc:
            raise ArticleFetchError(f"Failed to fetch article: {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise ArticleFetchError(f"Failed to fetch article: {type(exc).__name__}") from exc

        text = extract_article_text(html)
        logger.info("article_content_extracted", url=url, chars=len(text))
        return build_article_response(text)

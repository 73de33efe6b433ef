"""
Test fixtures for the news pipeline tests.

Factory functions for creating test data:
- make_settings()
- make_news_item()
- make_provider()
- FakeChatClient (stands in for AsyncOpenAI)
"""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Sequence, Union

from app.config import Settings
from app.models.news import NewsCategory, NewsItem
from app.models.news_sources import NewsProvider


def make_settings(**overrides: Any) -> Settings:
    """Settings without .env and without credentials unless passed in."""
    values: Dict[str, Any] = {
        "CRYPTO_PANIC_KEY": None,
        "NEWSDATA_KEY": None,
        "GROQ_API_KEY": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_news_item(
    item_id: str = "item_0",
    title: str = "Base Mainnet Launches",
    category: Union[NewsCategory, str] = NewsCategory.BASE,
    source: str = "Test Source",
    raw_content: Optional[str] = None,
    url: Optional[str] = None,
) -> NewsItem:
    """Factory function to create an un-enriched NewsItem."""
    return NewsItem(
        id=item_id,
        category=NewsCategory(category),
        title=title,
        url=url or f"https://example.com/{item_id}",
        source=source,
        timestamp="Just now",
        raw_content=title if raw_content is None else raw_content,
    )


def make_provider(
    key: str = "test_rss",
    type: str = "rss",
    name: str = "Test Feed",
    url: str = "https://example.com/feed",
    max_items: int = 10,
    call_delay_ms: int = 0,
    variants: Sequence[str] = (),
    default_category: NewsCategory = NewsCategory.WORLD,
    page_size: Optional[int] = None,
) -> NewsProvider:
    """Factory function to create a NewsProvider config entry."""
    return NewsProvider(
        key=key,
        type=type,
        name=name,
        url=url,
        max_items=max_items,
        call_delay_ms=call_delay_ms,
        variants=tuple(variants),
        default_category=default_category,
        page_size=page_size,
        raw={},
    )


def make_ai_reply(**fields: Any) -> str:
    payload = {
        "summary": "Short summary.",
        "relevanceScore": 80,
        "vibe": "bullish",
        "whyItMatters": "Base users get cheaper transactions.",
    }
    payload.update(fields)
    return json.dumps(payload)


class _FakeCompletions:
    def __init__(self, owner: "FakeChatClient") -> None:
        self._owner = owner

    async def create(self, **kwargs: Any) -> SimpleNamespace:
        self._owner.calls.append(kwargs)
        reply = self._owner.next_reply(kwargs)
        if isinstance(reply, BaseException):
            raise reply
        message = SimpleNamespace(content=reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeChatClient:
    """
    Minimal AsyncOpenAI stand-in: `client.chat.completions.create(...)`.

    `replies` is consumed in order; a single string or exception is reused
    for every call.
    """

    def __init__(self, replies: Union[str, BaseException, List[Union[str, BaseException]]]) -> None:
        self._replies = replies
        self.calls: List[Dict[str, Any]] = []
        self.chat = SimpleNamespace(completions=_FakeCompletions(self))

    def next_reply(self, kwargs: Dict[str, Any]) -> Union[str, BaseException]:
        if isinstance(self._replies, list):
            return self._replies.pop(0)
        return self._replies

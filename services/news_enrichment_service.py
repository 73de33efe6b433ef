from __future__ import annotations

import asyncio
import json
import re
from typing import Any, Dict, List, Optional, Sequence

from openai import AsyncOpenAI  # pip install openai>=1

from app.config import Settings
from app.core.logging import get_logger
from app.models.news import (
    DEFAULT_RELEVANCE_SCORE,
    SUMMARY_FALLBACK_CHARS,
    SUMMARY_UNAVAILABLE,
    WHY_IT_MATTERS_DEFAULT,
    WHY_IT_MATTERS_FALLBACK,
    AIAnalysis,
    NewsItem,
    Vibe,
)

logger = get_logger(module="news_enrichment_service")

_CODE_FENCE_RE = re.compile(r"```(?:json)?", flags=re.IGNORECASE)

PROMPT_TEMPLATE = """Analyze this news for Base blockchain users.

Title: "{title}"
Content: "{content}"
Current category: {category}

Provide JSON only (no markdown):
{{
  "summary": "2-3 sentence summary (max 100 words)",
  "relevanceScore": [number 0-100],
  "vibe": "bullish" OR "bearish" OR "neutral",
  "whyItMatters": "Why Base users care (max 30 words)",
  "suggestedCategory": "base" OR "crypto" OR "ai" OR "world"
}}"""


def build_prompt(item: NewsItem) -> str:
    return PROMPT_TEMPLATE.format(
        title=item.title.replace('"', "'"),
        content=_truncate(item.raw_content or item.title).replace('"', "'"),
        category=item.category.value,
    )


def _truncate(value: str, max_len: int = 2000) -> str:
    cleaned = value.strip()
    if len(cleaned) <= max_len:
        return cleaned
    return cleaned[: max_len - 3].rstrip() + "..."


def _extract_first_json(text: str) -> str:
    """
    Pak het eerste {...}-blok en verwijder trailing commas.
    """
    m = re.search(r"\{.*\}", text, flags=re.DOTALL)
    candidate = m.group(0) if m else text.strip()
    candidate = re.sub(r",\s*([}\]])", r"\1", candidate)
    return candidate.strip()


def parse_ai_analysis(raw_text: str) -> AIAnalysis:
    """
    Strip markdown code fences and parse the model output.

    Raises:
        ValueError: no JSON object could be decoded
    """
    cleaned = _CODE_FENCE_RE.sub("", raw_text or "").strip()
    try:
        data: Any = json.loads(cleaned)
    except json.JSONDecodeError:
        data = json.loads(_extract_first_json(cleaned))
    if not isinstance(data, dict):
        raise ValueError(f"expected JSON object, got {type(data).__name__}")
    return AIAnalysis.model_validate(data)


def fallback_summary(item: NewsItem) -> str:
    if item.raw_content:
        return item.raw_content[:SUMMARY_FALLBACK_CHARS]
    return SUMMARY_UNAVAILABLE


def apply_fallback(item: NewsItem) -> NewsItem:
    """Deterministic enrichment used when the LLM is off or failed."""
    item.summary = fallback_summary(item)
    item.relevance_score = DEFAULT_RELEVANCE_SCORE
    item.vibe = Vibe.NEUTRAL
    item.why_it_matters = WHY_IT_MATTERS_FALLBACK
    return item


def apply_analysis(item: NewsItem, analysis: AIAnalysis) -> NewsItem:
    item.summary = analysis.summary or fallback_summary(item)
    item.relevance_score = analysis.relevance_score
    item.vibe = analysis.vibe
    item.why_it_matters = analysis.why_it_matters or WHY_IT_MATTERS_DEFAULT
    if analysis.suggested_category and analysis.suggested_category != item.category:
        logger.info(
            "news_enrichment_category_override",
            item_id=item.id,
            previous=item.category.value,
            suggested=analysis.suggested_category.value,
        )
        item.category = analysis.suggested_category
    return item


class NewsEnrichmentService:
    """
    LLM enrichment (summary, relevance, vibe, why-it-matters) over an
    OpenAI-compatible chat endpoint. Never raises: failures become fallbacks.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        client: Optional[Any] = None,
        max_concurrency: Optional[int] = None,
        timeout_s: Optional[float] = None,
    ) -> None:
        self.model = settings.GROQ_MODEL
        self.timeout_s = timeout_s if timeout_s is not None else settings.NEWS_ENRICH_TIMEOUT_S
        self.max_concurrency = max(1, max_concurrency or settings.NEWS_ENRICH_MAX_CONCURRENCY)
        self._client = client or AsyncOpenAI(
            api_key=settings.GROQ_API_KEY,
            base_url=settings.GROQ_BASE_URL,
            timeout=self.timeout_s,
            max_retries=0,
        )
        self._sem = asyncio.Semaphore(self.max_concurrency)

    def _build_messages(self, item: NewsItem) -> List[Dict[str, str]]:
        return [{"role": "user", "content": build_prompt(item)}]

    async def _complete(self, item: NewsItem) -> str:
        completion = await self._client.chat.completions.create(
            model=self.model,
            messages=self._build_messages(item),
            temperature=0.3,
            max_tokens=500,
        )
        return completion.choices[0].message.content or ""

    async def enrich(self, item: NewsItem) -> NewsItem:
        try:
            async with self._sem:
                raw_text = await asyncio.wait_for(self._complete(item), timeout=self.timeout_s)
            analysis = parse_ai_analysis(raw_text)
        except Exception as exc:
            logger.warning(
                "news_enrichment_failed",
                item_id=item.id,
                title=item.title[:80],
                error=f"{type(exc).__name__}: {exc}",
            )
            return apply_fallback(item)
        return apply_analysis(item, analysis)

    async def enrich_all(self, items: Sequence[NewsItem]) -> List[NewsItem]:
        results = await asyncio.gather(*(self.enrich(item) for item in items))
        logger.info(
            "news_enrichment_done",
            items=len(results),
            max_concurrency=self.max_concurrency,
        )
        return list(results)

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class NewsCategory(str, Enum):
    BASE = "base"
    CRYPTO = "crypto"
    AI = "ai"
    WORLD = "world"


class Vibe(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


DEFAULT_RELEVANCE_SCORE = 50
SUMMARY_FALLBACK_CHARS = 150
SUMMARY_UNAVAILABLE = "Summary unavailable"
WHY_IT_MATTERS_DEFAULT = "Relevant to ecosystem."
WHY_IT_MATTERS_FALLBACK = "Stay informed about crypto developments."


def clamp_relevance(value: Any) -> int:
    """
    Coerce a model-provided score to an int in [0, 100].
    Non-numeric or missing values fall back to the neutral 50.
    """
    if isinstance(value, bool) or value is None:
        return DEFAULT_RELEVANCE_SCORE
    try:
        number = float(value)
    except (TypeError, ValueError):
        return DEFAULT_RELEVANCE_SCORE
    if number != number:  # NaN
        return DEFAULT_RELEVANCE_SCORE
    # clamp eerst; round(inf) geeft OverflowError
    return int(round(max(0.0, min(100.0, number))))


@dataclass
class RawFeedEntry:
    """Single <item> from an RSS feed, before it becomes a NewsItem."""

    title: str
    link: str
    description: str
    pub_date: Any = None
    raw: Dict[str, Any] = field(default_factory=dict)


class NewsItem(BaseModel):
    """
    Public news payload. The classifier sets `category`,
    the enrichment step fills summary/relevance_score/vibe/why_it_matters.
    Serialized with camelCase keys (rawContent, relevanceScore, ...).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    id: str
    category: NewsCategory
    title: str
    url: str
    source: str
    timestamp: str
    raw_content: str = ""
    summary: Optional[str] = None
    relevance_score: Optional[int] = Field(default=None, ge=0, le=100)
    vibe: Optional[Vibe] = None
    why_it_matters: Optional[str] = None


class AIAnalysis(BaseModel):
    """
    JSON object returned by the LLM. Out-of-range scores are clipped,
    unknown vibes become neutral, unknown categories are dropped.
    """

    summary: Optional[str] = None
    relevance_score: int = Field(
        default=DEFAULT_RELEVANCE_SCORE,
        validation_alias=AliasChoices("relevanceScore", "relevance_score", "score"),
    )
    vibe: Vibe = Vibe.NEUTRAL
    why_it_matters: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("whyItMatters", "why_it_matters"),
    )
    suggested_category: Optional[NewsCategory] = Field(
        default=None,
        validation_alias=AliasChoices("suggestedCategory", "suggested_category", "category"),
    )

    @field_validator("summary", "why_it_matters", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    @field_validator("relevance_score", mode="before")
    @classmethod
    def _coerce_and_clip_score(cls, v: Any) -> int:
        # CLIP vóór constraints zodat 150 niet faalt maar 100 wordt
        return clamp_relevance(v)

    @field_validator("vibe", mode="before")
    @classmethod
    def _coerce_vibe(cls, v: Any) -> Vibe:
        try:
            return Vibe(str(v).strip().lower())
        except ValueError:
            return Vibe.NEUTRAL

    @field_validator("suggested_category", mode="before")
    @classmethod
    def _coerce_category(cls, v: Any) -> Optional[NewsCategory]:
        if v is None:
            return None
        try:
            return NewsCategory(str(v).strip().lower())
        except ValueError:
            return None


class NewsDebugInfo(BaseModel):
    """Diagnostic counters for one pipeline run."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sources: Dict[str, int] = Field(default_factory=dict)
    errors: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)
    total_collected: int = 0
    after_dedupe: int = 0
    base_articles: int = 0
    total_processed: int = 0


class NewsListResponse(BaseModel):
    """Success envelope for /api/news."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    data: List[NewsItem]
    count: int
    timestamp: str
    category: str
    limit: int
    ai: bool
    debug: NewsDebugInfo

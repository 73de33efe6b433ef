from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

ARTICLE_UNAVAILABLE_MESSAGE = (
    'Full article content is not available. Please use the "Read Full Story" '
    "button to view the original article."
)
ARTICLE_LOAD_FAILED_MESSAGE = (
    'Unable to load full article content. Please use the "Read Full Story" '
    "button to view the original article."
)


class ArticleContentResponse(BaseModel):
    """Payload for /api/article-content."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    content: str
    is_fallback: bool = False
    error: Optional[str] = None

"""
News provider registry loader.

Parses configs/news_sources.yml into strongly-typed NewsProvider objects with
structlog-backed validation and caching.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

from app.config import get_settings
from app.core.logging import get_logger
from app.models.news import NewsCategory

logger = get_logger()

PROVIDER_TYPES: Sequence[str] = ("rss", "cryptopanic", "newsdata")

# Welke credential een provider nodig heeft; ontbreekt die, dan wordt hij overgeslagen.
PROVIDER_CREDENTIALS: Dict[str, Optional[str]] = {
    "rss": None,
    "cryptopanic": "CRYPTO_PANIC_KEY",
    "newsdata": "NEWSDATA_KEY",
}

_FALLBACK_MAX_ITEMS = 10
_FALLBACK_CALL_DELAY_MS = 500


@dataclass(frozen=True)
class NewsProvider:
    """Single upstream news provider definition."""

    key: str
    type: str
    name: str
    url: str
    max_items: int
    call_delay_ms: int
    variants: Tuple[str, ...]
    default_category: NewsCategory
    page_size: Optional[int]
    raw: Dict[str, object]

    @property
    def credential_name(self) -> Optional[str]:
        return PROVIDER_CREDENTIALS.get(self.type)

    @property
    def call_delay_s(self) -> float:
        return self.call_delay_ms / 1000.0


def load_news_sources_config(path: Optional[Path] = None) -> Dict[str, object]:
    """
    Load raw YAML config.

    Returns empty dict if file is missing or invalid to keep the API serving.
    """
    cfg_path = Path(path) if path else get_settings().NEWS_SOURCES_PATH
    try:
        text = cfg_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.error("news_sources_config_not_found", path=str(cfg_path))
        return {}
    except OSError as exc:
        logger.error("news_sources_config_read_error", path=str(cfg_path), error=str(exc))
        return {}

    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        logger.error("news_sources_config_parse_error", path=str(cfg_path), error=str(exc))
        return {}

    if not isinstance(data, dict):
        logger.error(
            "news_sources_config_invalid_root",
            path=str(cfg_path),
            root_type=type(data).__name__,
        )
        return {}

    return data


def _coerce_positive_int(value: object, fallback: int, *, field: str, source: str) -> int:
    if value is None:
        return fallback
    try:
        return max(0, int(value))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        logger.warning("news_source_invalid_int", source=source, field=field, value=value)
        return fallback


def _coerce_variants(raw: Dict[str, object], provider_type: str) -> Tuple[str, ...]:
    field = "queries" if provider_type == "newsdata" else "filters"
    values = raw.get(field)
    if values is None:
        return ()
    if isinstance(values, str):
        values = [values]
    if not isinstance(values, list):
        logger.warning("news_source_invalid_variants", field=field, value=values)
        return ()
    return tuple(str(v).strip() for v in values if str(v).strip())


def _coerce_category(value: object, *, source: str) -> NewsCategory:
    if value is None:
        return NewsCategory.WORLD
    try:
        return NewsCategory(str(value).strip().lower())
    except ValueError:
        logger.warning("news_source_invalid_default_category", source=source, value=value)
        return NewsCategory.WORLD


def _validate_provider(raw: Dict[str, object], defaults: Dict[str, Any]) -> Optional[NewsProvider]:
    """Validate raw dict and convert to NewsProvider, logging issues."""
    required_keys = ("key", "type", "name", "url")
    missing = [k for k in required_keys if not raw.get(k)]
    if missing:
        logger.warning("news_source_invalid_missing_fields", missing=missing, raw=raw)
        return None

    provider_type = str(raw.get("type")).strip().lower()
    if provider_type not in PROVIDER_TYPES:
        logger.warning(
            "news_source_invalid_type",
            type=provider_type,
            allowed=list(PROVIDER_TYPES),
            raw=raw,
        )
        return None

    url = raw.get("url")
    if not isinstance(url, str) or not url.startswith(("http://", "https://")):
        logger.warning("news_source_invalid_url", url=url, raw=raw)
        return None

    key = str(raw.get("key")).strip().lower()
    name = str(raw.get("name")).strip()

    variants = _coerce_variants(raw, provider_type)
    if provider_type != "rss" and not variants:
        logger.warning("news_source_missing_variants", source=key, type=provider_type)
        return None

    max_items = _coerce_positive_int(
        raw.get("max_items", defaults.get("max_items")),
        _FALLBACK_MAX_ITEMS,
        field="max_items",
        source=key,
    )
    call_delay_ms = _coerce_positive_int(
        raw.get("call_delay_ms", defaults.get("call_delay_ms")),
        _FALLBACK_CALL_DELAY_MS,
        field="call_delay_ms",
        source=key,
    )
    page_size = _coerce_positive_int(raw.get("page_size"), 0, field="page_size", source=key) or None

    return NewsProvider(
        key=key,
        type=provider_type,
        name=name,
        url=url,
        max_items=max_items,
        call_delay_ms=call_delay_ms,
        variants=variants,
        default_category=_coerce_category(
            raw.get("default_category", defaults.get("default_category")),
            source=key,
        ),
        page_size=page_size,
        raw=raw,
    )


@lru_cache(maxsize=8)
def _load_providers_from_path(path_str: str) -> Tuple[NewsProvider, ...]:
    cfg_path = Path(path_str)
    cfg = load_news_sources_config(cfg_path)
    raw_providers = cfg.get("providers", [])
    defaults = cfg.get("defaults") or {}
    defaults_dict = defaults if isinstance(defaults, dict) else {}

    if not isinstance(raw_providers, list):
        logger.error(
            "news_sources_invalid_providers_type",
            actual_type=type(raw_providers).__name__,
            path=str(cfg_path),
        )
        return ()

    result: List[NewsProvider] = []
    seen_keys: set[str] = set()
    for idx, raw in enumerate(raw_providers):
        if not isinstance(raw, dict):
            logger.warning(
                "news_source_invalid_entry_type",
                index=idx,
                value_type=type(raw).__name__,
            )
            continue
        if raw.get("enabled") is False:
            logger.info("news_source_disabled", key=raw.get("key"))
            continue
        parsed = _validate_provider(raw, defaults_dict)
        if not parsed:
            continue
        if parsed.key in seen_keys:
            logger.warning("news_source_duplicate_key", key=parsed.key)
            continue
        seen_keys.add(parsed.key)
        result.append(parsed)

    logger.info("news_sources_loaded", path=str(cfg_path), total=len(result))
    return tuple(result)


def get_news_providers(path: Optional[Path] = None) -> List[NewsProvider]:
    """
    Public accessor for all valid providers.

    Accepts optional path (useful for tests). Results are cached per-path.
    """
    cfg_path = Path(path) if path else get_settings().NEWS_SOURCES_PATH
    return list(_load_providers_from_path(str(cfg_path.resolve())))


def clear_news_sources_cache() -> None:
    """Reset LRU cache (useful for tests)."""
    _load_providers_from_path.cache_clear()

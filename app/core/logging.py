# app/core/logging.py
from __future__ import annotations

import logging
import re
import sys
from typing import Any, Dict, TextIO
from datetime import datetime, timezone

import structlog

from app.core.request_id import get_request_id, get_run_id


# -------- Processors ---------------------------------------------------------

def _add_ts(_: Any, __: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    # ISO 8601 UTC timestamp, kort & sorteerbaar
    event_dict.setdefault("ts", datetime.now(timezone.utc).isoformat(timespec="milliseconds"))
    return event_dict

def _add_level(_: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    # structlog geeft de methodenaam mee (info/warning/...), die gebruiken we als level
    event_dict.setdefault("level", method_name)
    event_dict["level"] = str(event_dict["level"]).lower()
    return event_dict

def _add_service(service_name: str):
    def _inner(_: Any, __: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict
    return _inner

def _add_request_or_run_ids(_: Any, __: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    rid = get_request_id()
    if rid:
        event_dict.setdefault("request_id", rid)
    run = get_run_id()
    if run:
        event_dict.setdefault("run_id", run)
    return event_dict

# Provider keys zitten in query strings (auth_token, apikey); nooit loggen.
_SECRET_KEYS = {
    "authorization", "auth", "token", "auth_token", "access_token",
    "api_key", "apikey", "secret", "password",
    "crypto_panic_key", "newsdata_key", "groq_api_key",
}

_QUERY_SECRET_RE = re.compile(r"(?i)\b(auth_token|apikey|api_key|access_token)=[^&\s'\"]+")


def scrub_query_secrets(value: str) -> str:
    """Mask credential query params inside free text (URLs in httpx error messages)."""
    return _QUERY_SECRET_RE.sub(r"\1=***", value)


def _secret_guard(_: Any, __: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    for k in list(event_dict.keys()):
        if str(k).lower() in _SECRET_KEYS:
            event_dict[k] = "***redacted***"
        elif isinstance(event_dict[k], str):
            event_dict[k] = scrub_query_secrets(event_dict[k])
    return event_dict


# -------- Public API ---------------------------------------------------------

_configured = False

def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO

def configure_logging(
    service_name: str = "news-api",
    *,
    level: int | str = logging.INFO,
    stream: TextIO | None = None,
) -> None:
    """
    Configureer één globale structlog stack voor API & worker.

    Module-level loggers zijn lazy proxies; een latere aanroep (bijv. de worker
    met service_name="worker") geldt dus ook voor al geïmporteerde modules.
    """
    global _configured
    numeric_level = _resolve_level(level)
    out = stream or sys.stderr

    logging.basicConfig(
        level=numeric_level,
        format="%(message)s",
        stream=out,
        force=True,  # overschrijf eerdere configs
    )

    processors = [
        _add_ts,
        _add_level,
        _add_service(service_name),
        _add_request_or_run_ids,
        _secret_guard,
        structlog.processors.EventRenamer("event"),
        structlog.processors.dict_tracebacks,
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=out),
        cache_logger_on_first_use=False,
    )
    _configured = True

def get_logger(**initial_values: Any) -> Any:
    """Lazy logger; de actuele configuratie wordt pas bij elke log-call opgehaald."""
    if not _configured:
        configure_logging("news-api")  # sane default
    return structlog.get_logger(**initial_values)

# Een makkelijk te importeren alias
logger = get_logger()

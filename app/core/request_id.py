# app/core/request_id.py
from __future__ import annotations

import contextvars
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

REQUEST_ID_HEADER = "X-Request-Id"
_MAX_INCOMING_ID_LEN = 128

_request_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("request_id", default=None)
_run_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("run_id", default=None)


def get_request_id() -> Optional[str]:
    return _request_id_ctx.get()


def get_run_id() -> Optional[str]:
    return _run_id_ctx.get()


def new_id() -> str:
    return uuid.uuid4().hex


def resolve_request_id(incoming: Optional[str]) -> str:
    """Neem de id van de client over als die bruikbaar is, anders een nieuwe."""
    candidate = (incoming or "").strip()
    if candidate and len(candidate) <= _MAX_INCOMING_ID_LEN and candidate.isprintable():
        return candidate
    return new_id()


@contextmanager
def _bound(var: contextvars.ContextVar[Optional[str]], value: str) -> Iterator[str]:
    token = var.set(value)
    try:
        yield value
    finally:
        var.reset(token)


@contextmanager
def request_id_scope(incoming: Optional[str] = None) -> Iterator[str]:
    """Eén HTTP-request; de middleware zet hem, de log-processor leest hem."""
    with _bound(_request_id_ctx, resolve_request_id(incoming)) as rid:
        yield rid


@contextmanager
def with_run_id(run_id: Optional[str] = None) -> Iterator[str]:
    """
    Gebruik in de worker:
        with with_run_id():
            ... één pipeline-run ...
    """
    with _bound(_run_id_ctx, run_id or new_id()) as rid:
        yield rid

from __future__ import annotations

import re
from typing import Iterable, List, Protocol

DEDUPE_PREFIX_LENGTH = 50
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


class _Titled(Protocol):
    title: str


def dedupe_key(title: str, *, prefix_length: int = DEDUPE_PREFIX_LENGTH) -> str:
    """Lowercased title prefix with everything but [a-z0-9] removed."""
    prefix = (title or "").lower()[:prefix_length]
    return _NON_ALNUM_RE.sub("", prefix)


def remove_duplicates(items: Iterable[_Titled], *, prefix_length: int = DEDUPE_PREFIX_LENGTH) -> List[_Titled]:
    """
    Drop near-duplicate titles, keeping the first occurrence and input order.
    Titles that only differ in punctuation, casing or anything past the
    prefix collide.
    """
    seen: set[str] = set()
    unique: List[_Titled] = []
    for item in items:
        key = dedupe_key(item.title, prefix_length=prefix_length)
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique

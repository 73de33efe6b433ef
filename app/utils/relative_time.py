from __future__ import annotations

import calendar
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional

RECENTLY = "Recently"
JUST_NOW = "Just now"


def parse_published_at(value: Any) -> Optional[datetime]:
    """
    Best-effort parse of the date shapes our providers send:
    feedparser struct_time, ISO 8601 (CryptoPanic, with 'Z'), 'YYYY-MM-DD HH:MM:SS'
    (NewsData, UTC) and RFC 822 (raw RSS pubDate). Naive values are taken as UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, time.struct_time):
        dt = datetime.fromtimestamp(calendar.timegm(value), tz=timezone.utc)
    elif isinstance(value, str):
        dt = _parse_date_string(value.strip())
        if dt is None:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _parse_date_string(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        pass
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None


def format_relative_time(value: Any, *, now: Optional[datetime] = None) -> str:
    """
    'Just now', '5m ago', '3h ago', '2d ago'; older than a week gives M/D/YYYY.
    Unparseable input gives 'Recently'.
    """
    published = parse_published_at(value)
    if published is None:
        return RECENTLY

    current = now or datetime.now(timezone.utc)
    diff_s = (current - published).total_seconds()
    diff_mins = int(diff_s // 60)
    diff_hours = int(diff_s // 3600)
    diff_days = int(diff_s // 86400)

    if diff_mins < 1:
        return JUST_NOW
    if diff_mins < 60:
        return f"{diff_mins}m ago"
    if diff_hours < 24:
        return f"{diff_hours}h ago"
    if diff_days < 7:
        return f"{diff_days}d ago"
    return f"{published.month}/{published.day}/{published.year}"

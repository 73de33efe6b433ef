from __future__ import annotations

import calendar
import time
from datetime import datetime, timedelta, timezone

import pytest

from app.utils.relative_time import format_relative_time, parse_published_at

NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "delta, expected",
    [
        (timedelta(seconds=30), "Just now"),
        (timedelta(minutes=5), "5m ago"),
        (timedelta(hours=3), "3h ago"),
        (timedelta(days=2), "2d ago"),
        (timedelta(days=8), "1/2/2024"),
    ],
)
def test_format_relative_time_buckets(delta, expected):
    assert format_relative_time(NOW - delta, now=NOW) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-01-10T11:55:00Z", "5m ago"),
        ("2024-01-10 09:00:00", "3h ago"),
        ("Wed, 10 Jan 2024 11:00:00 GMT", "1h ago"),
    ],
)
def test_format_relative_time_string_inputs(value, expected):
    assert format_relative_time(value, now=NOW) == expected


def test_format_relative_time_struct_time():
    published = time.gmtime(calendar.timegm((2024, 1, 9, 12, 0, 0, 0, 0, 0)))
    assert format_relative_time(published, now=NOW) == "1d ago"


@pytest.mark.parametrize("value", [None, "", "not a date", 12345])
def test_format_relative_time_unparseable(value):
    assert format_relative_time(value, now=NOW) == "Recently"


def test_parse_published_at_naive_is_utc():
    parsed = parse_published_at("2024-01-10 09:00:00")
    assert parsed == datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)

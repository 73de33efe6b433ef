from __future__ import annotations

import re
from html import unescape
from typing import Any, Dict, List, Tuple, Union

import feedparser

from app.models.news import RawFeedEntry

_HTML_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")


class RSSNormalizationError(Exception):
    """
    Recoverable failure for a single RSS/Atom entry.
    Logged and counted, never aborts the provider fetch.
    """

    def __init__(self, message: str, entry_raw: Dict[str, Any] | None = None):
        super().__init__(message)
        self.entry_raw = entry_raw or {}


def strip_html(value: str) -> str:
    text = _HTML_TAG_RE.sub(" ", value or "")
    text = unescape(text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()


def _get_str(entry: Dict[str, Any], key: str) -> str:
    value = entry.get(key)
    if isinstance(value, str):
        return value.strip()
    return ""


def _extract_link(entry: Dict[str, Any]) -> str:
    link = _get_str(entry, "link")
    if link:
        return link
    links = entry.get("links")
    if isinstance(links, list):
        for link_entry in links:
            if isinstance(link_entry, dict):
                href = link_entry.get("href")
                if isinstance(href, str) and href.strip():
                    return href.strip()
    return _get_str(entry, "id")


def _extract_description(entry: Dict[str, Any]) -> str:
    # feedparser mapt <description> op "summary"
    summary = _get_str(entry, "summary") or _get_str(entry, "description")
    if summary:
        return strip_html(summary)
    content = entry.get("content")
    if isinstance(content, list):
        for block in content:
            if isinstance(block, dict):
                val = block.get("value")
                if isinstance(val, str) and val.strip():
                    return strip_html(val)
    return ""


def _extract_pub_date(entry: Dict[str, Any]) -> Any:
    for key in ("published_parsed", "updated_parsed"):
        value = entry.get(key)
        if value:
            return value
    return _get_str(entry, "published") or _get_str(entry, "pubdate") or None


def normalize_entry(entry: Dict[str, Any]) -> RawFeedEntry:
    """
    Map one feedparser entry to a RawFeedEntry. Missing tags become "".

    Raises:
        RSSNormalizationError: entry has neither a title nor a link
    """
    if not isinstance(entry, dict):
        raise RSSNormalizationError(
            f"{type(entry).__name__} object has no attribute 'get'",
        )
    title = strip_html(_get_str(entry, "title"))
    link = _extract_link(entry)
    if not title and not link:
        raise RSSNormalizationError("missing_title_and_link", entry_raw=dict(entry))
    return RawFeedEntry(
        title=title,
        link=link,
        description=_extract_description(entry),
        pub_date=_extract_pub_date(entry),
        raw=dict(entry),
    )


def normalize_feed_entries(parsed_feed: Any) -> Tuple[List[RawFeedEntry], List[RSSNormalizationError]]:
    """
    Iterate a parsed feed safely and collect entries + per-entry errors.
    """
    entries: List[RawFeedEntry] = []
    errors: List[RSSNormalizationError] = []
    if isinstance(parsed_feed, dict):
        raw_entries = parsed_feed.get("entries") or []
    else:
        raw_entries = getattr(parsed_feed, "entries", []) or []
    for raw in raw_entries:
        try:
            entries.append(normalize_entry(raw))
        except RSSNormalizationError as err:
            errors.append(err)
    return entries, errors


def parse_rss(feed_text: Union[str, bytes]) -> Tuple[List[RawFeedEntry], List[RSSNormalizationError]]:
    """Parse raw feed text (RSS 2.0 or Atom) into RawFeedEntry tuples."""
    parsed = feedparser.parse(feed_text)
    return normalize_feed_entries(parsed)

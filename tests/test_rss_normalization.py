from __future__ import annotations

import time

import feedparser

from services.rss_normalization import (
    RSSNormalizationError,
    normalize_entry,
    normalize_feed_entries,
    parse_rss,
    strip_html,
)


def test_rss_normalization_happy_path():
    xml = """
    <rss version="2.0">
      <channel>
        <title>Example RSS</title>
        <item>
          <title>First item</title>
          <link>https://example.com/1</link>
          <description><![CDATA[<p>Hello <b>world</b></p>]]></description>
          <pubDate>Wed, 10 Jan 2024 11:00:00 GMT</pubDate>
        </item>
        <item>
          <title>Second item</title>
          <link>https://example.com/2</link>
        </item>
      </channel>
    </rss>
    """
    parsed = feedparser.parse(xml)
    entries, errors = normalize_feed_entries(parsed)

    assert errors == []
    assert len(entries) == 2

    first = entries[0]
    assert first.title == "First item"
    assert first.link == "https://example.com/1"
    assert first.description == "Hello world"
    assert isinstance(first.pub_date, time.struct_time)

    second = entries[1]
    assert second.description == ""
    assert second.pub_date is None


def test_rss_normalization_atom_feed():
    xml = """<?xml version="1.0" encoding="utf-8"?>
    <feed xmlns="http://www.w3.org/2005/Atom">
      <title>Atom</title>
      <entry>
        <title>Atom entry</title>
        <link href="https://example.com/atom/1"/>
        <updated>2024-01-10T11:00:00Z</updated>
        <summary>Atom summary</summary>
      </entry>
    </feed>
    """
    entries, errors = parse_rss(xml)

    assert errors == []
    assert entries[0].title == "Atom entry"
    assert entries[0].link == "https://example.com/atom/1"
    assert entries[0].description == "Atom summary"


def test_rss_normalization_collects_errors_without_aborting():
    parsed = {
        "entries": [
            {"title": "Kept", "link": "https://example.com/kept"},
            {"summary": "no title, no link"},
            "not-a-dict",
        ]
    }
    entries, errors = normalize_feed_entries(parsed)

    assert [e.title for e in entries] == ["Kept"]
    assert len(errors) == 2
    assert all(isinstance(err, RSSNormalizationError) for err in errors)


def test_normalize_entry_falls_back_to_links_list():
    entry = normalize_entry({"title": "T", "links": [{"href": "https://example.com/from-links"}]})
    assert entry.link == "https://example.com/from-links"


def test_strip_html_unescapes_and_collapses_whitespace():
    assert strip_html("<p>Tom &amp; Jerry</p>\n\n<span>again</span>") == "Tom & Jerry again"


def test_strip_html_keeps_escaped_angle_brackets_as_text():
    assert strip_html("<p>BTC &lt; $100k while ETH &gt; $4k</p>") == "BTC < $100k while ETH > $4k"

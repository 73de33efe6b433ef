from __future__ import annotations

import pytest

from app.models.article import ARTICLE_UNAVAILABLE_MESSAGE
from services.article_content_service import (
    MAX_CONTENT_CHARS,
    ArticleContentService,
    ArticleFetchError,
    build_article_response,
    extract_article_text,
)
from services.base_scraper_service import BROWSER_USER_AGENT

BODY = "Base is scaling fast and developers keep shipping new onchain apps every single week. " * 3


def test_extract_prefers_article_and_drops_scripts():
    html = f"""
    <html><head><style>body {{ color: red; }}</style></head>
    <body>
      <nav>Menu Home About</nav>
      <article>
        <h1>Headline</h1>
        <script>var tracking = "secret";</script>
        <p>{BODY}</p>
      </article>
      <footer>Footer text</footer>
    </body></html>
    """
    text = extract_article_text(html)

    assert text.startswith("Headline")
    assert "tracking" not in text
    assert "Menu" not in text
    assert "Footer" not in text
    assert "color: red" not in text


def test_extract_falls_back_to_content_div():
    html = f'<html><body><div class="sidebar">Ads</div><div class="post-content"><p>{BODY}</p></div></body></html>'
    text = extract_article_text(html)
    assert "Ads" not in text
    assert text == BODY.strip()


def test_extract_uses_whole_document_without_container():
    html = f"<html><body><p>Intro</p><p>{BODY}</p><script>alert(1)</script></body></html>"
    text = extract_article_text(html)
    assert text.startswith("Intro Base is scaling")
    assert "alert" not in text


def test_extract_truncates_long_text():
    html = "<article>" + ("word " * 5000) + "</article>"
    text = extract_article_text(html)
    assert len(text) == MAX_CONTENT_CHARS + 3
    assert text.endswith("...")


def test_short_text_becomes_fallback():
    response = build_article_response(extract_article_text("<article><p>Too short.</p></article>"))
    assert response.is_fallback is True
    assert response.success is True
    assert response.content == ARTICLE_UNAVAILABLE_MESSAGE


@pytest.mark.asyncio
async def test_fetch_article_uses_browser_user_agent(httpx_mock):
    httpx_mock.add_response(
        url="https://news.example.com/story",
        text=f"<html><body><main><p>{BODY}</p></main></body></html>",
    )

    async with ArticleContentService() as service:
        response = await service.fetch_article("https://news.example.com/story")

    assert response.is_fallback is False
    assert response.content == BODY.strip()
    assert httpx_mock.get_requests()[0].headers["User-Agent"] == BROWSER_USER_AGENT


@pytest.mark.asyncio
async def test_fetch_article_http_error(httpx_mock):
    httpx_mock.add_response(url="https://news.example.com/gone", status_code=404)

    async with ArticleContentService() as service:
        with pytest.raises(ArticleFetchError, match="404"):
            await service.fetch_article("https://news.example.com/gone")

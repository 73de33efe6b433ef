from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.config import REPO_ROOT, get_settings
from app.deps.news import get_article_content_service
from app.main import app
from app.models.article import ARTICLE_LOAD_FAILED_MESSAGE, ArticleContentResponse
from services.article_content_service import ArticleFetchError
from tests.fixtures import make_settings


class _FakeArticleService:
    def __init__(self, response=None, error=None) -> None:
        self.response = response
        self.error = error
        self.urls = []

    async def fetch_article(self, url: str) -> ArticleContentResponse:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.response


@pytest_asyncio.fixture
async def async_client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def _override_settings(**values) -> None:
    app.dependency_overrides[get_settings] = lambda: make_settings(**values)


def _use_article_service(service) -> None:
    app.dependency_overrides[get_article_content_service] = lambda: service


@pytest.mark.asyncio
async def test_health_reports_credential_presence_only(async_client):
    _override_settings(CRYPTO_PANIC_KEY="cp-secret", GROQ_API_KEY="gsk-secret")

    response = await async_client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["timestamp"].endswith("Z")
    assert body["env"] == {"CRYPTO_PANIC_KEY": True, "NEWSDATA_KEY": False, "GROQ_API_KEY": True}
    assert "secret" not in response.text


@pytest.mark.asyncio
async def test_og_image_served_with_cache_headers(async_client):
    _override_settings(OG_IMAGE_PATH=REPO_ROOT / "public" / "og-image.png")

    response = await async_client.get("/api/og-image")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.headers["cache-control"] == "public, max-age=31536000, immutable"
    assert response.content.startswith(b"\x89PNG")


@pytest.mark.asyncio
async def test_og_image_missing_returns_404(async_client, tmp_path):
    _override_settings(OG_IMAGE_PATH=tmp_path / "missing.png")

    response = await async_client.get("/api/og-image")

    assert response.status_code == 404
    assert response.json() == {"error": "Image not found"}


@pytest.mark.asyncio
async def test_article_content_requires_url(async_client):
    _use_article_service(_FakeArticleService())

    response = await async_client.get("/api/article-content")

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "URL parameter is required"}


@pytest.mark.asyncio
async def test_article_content_rejects_non_http_url(async_client):
    service = _FakeArticleService()
    _use_article_service(service)

    response = await async_client.get("/api/article-content", params={"url": "file:///etc/passwd"})

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert service.urls == []


@pytest.mark.asyncio
async def test_article_content_success(async_client):
    service = _FakeArticleService(response=ArticleContentResponse(content="Full text", is_fallback=False))
    _use_article_service(service)

    response = await async_client.get("/api/article-content", params={"url": "https://news.example.com/a"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "content": "Full text", "isFallback": False}
    assert service.urls == ["https://news.example.com/a"]


@pytest.mark.asyncio
async def test_article_content_failure_returns_500_envelope(async_client):
    _use_article_service(_FakeArticleService(error=ArticleFetchError("Failed to fetch article: 403")))

    response = await async_client.get("/api/article-content", params={"url": "https://news.example.com/a"})

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "content": ARTICLE_LOAD_FAILED_MESSAGE,
        "isFallback": False,
        "error": "Failed to fetch article: 403",
    }

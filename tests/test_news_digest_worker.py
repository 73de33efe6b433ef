from __future__ import annotations

import io
import json

import pytest

from app.core.logging import configure_logging
from app.models.news import NewsDebugInfo
from app.workers import news_digest_bot
from services import news_aggregation_service
from services.news_aggregation_service import AggregationResult, NewsQuery, NoNewsFoundError
from services.news_enrichment_service import apply_fallback
from tests.fixtures import make_news_item, make_settings


class _StubService:
    def __init__(self, result=None, error=None) -> None:
        self.result = result
        self.error = error

    async def run(self, query):
        if self.error is not None:
            raise self.error
        return self.result


def test_parse_args_defaults():
    args = news_digest_bot.parse_args([])
    assert args.category == "all"
    assert args.limit is None
    assert args.skip_ai is False
    assert args.sort == "relevance"


def test_parse_args_rejects_unknown_category():
    with pytest.raises(SystemExit):
        news_digest_bot.parse_args(["--category", "sports"])


@pytest.mark.asyncio
async def test_run_digest_prints_envelope(capsys):
    item = apply_fallback(make_news_item("a", "Base Mainnet Launches"))
    result = AggregationResult(items=[item], debug=NewsDebugInfo(base_articles=1, total_processed=1), ai=False)

    exit_code = await news_digest_bot.run_digest(NewsQuery(category="base", limit=5), service=_StubService(result))

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["success"] is True
    assert payload["count"] == 1
    assert payload["data"][0]["relevanceScore"] == 50
    assert payload["debug"]["baseArticles"] == 1


@pytest.mark.asyncio
async def test_run_digest_no_news_exit_code(capsys):
    error = NoNewsFoundError(NewsDebugInfo(errors=["Coinbase Blog: timeout"]))

    exit_code = await news_digest_bot.run_digest(NewsQuery(), service=_StubService(error=error))

    assert exit_code == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload == {
        "success": False,
        "error": "No news found",
        "debug": {
            "sources": {},
            "errors": ["Coinbase Blog: timeout"],
            "skipped": [],
            "totalCollected": 0,
            "afterDedupe": 0,
            "baseArticles": 0,
            "totalProcessed": 0,
        },
    }


@pytest.fixture
def restore_logging():
    yield
    configure_logging("news-api")


@pytest.mark.asyncio
async def test_main_async_logs_as_worker_with_configured_level(monkeypatch, restore_logging):
    buf = io.StringIO()
    real_configure = news_digest_bot.configure_logging

    def _configure(service_name, *, level):
        real_configure(service_name, level=level, stream=buf)

    async def _fake_run_digest(query):
        news_aggregation_service.logger.info("digest_info_hidden")
        news_aggregation_service.logger.warning("digest_warning_kept")
        return 0

    monkeypatch.setattr(news_digest_bot, "configure_logging", _configure)
    monkeypatch.setattr(news_digest_bot, "get_settings", lambda: make_settings(LOG_LEVEL="WARNING"))
    monkeypatch.setattr(news_digest_bot, "run_digest", _fake_run_digest)

    assert await news_digest_bot.main_async([]) == 0

    lines = [json.loads(line) for line in buf.getvalue().splitlines()]
    assert [line["event"] for line in lines] == ["digest_warning_kept"]
    assert lines[0]["service"] == "worker"
    assert lines[0]["module"] == "news_aggregation_service"
    assert "run_id" in lines[0]

from __future__ import annotations

import argparse
import asyncio
import json
from typing import List, Optional

from app.config import get_settings
from app.core.logging import configure_logging, get_logger
from app.core.request_id import with_run_id
from services.news_aggregation_service import (
    CATEGORY_FILTERS,
    SORT_MODES,
    NewsAggregationService,
    NewsQuery,
    NoNewsFoundError,
    build_news_response,
    clamp_limit,
)

logger = get_logger(worker="news_digest_bot")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="NewsDigestBot: run the news pipeline once and print the JSON envelope.")
    parser.add_argument(
        "--category",
        choices=CATEGORY_FILTERS,
        default="all",
        help="Category filter (default: all).",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Max items, clamped to [1, 50] (default: 30).",
    )
    parser.add_argument(
        "--skip-ai",
        action="store_true",
        help="Skip LLM enrichment and use the deterministic fallback.",
    )
    parser.add_argument(
        "--sort",
        choices=SORT_MODES,
        default="relevance",
        help="relevance (default) or source order.",
    )
    return parser.parse_args(argv)


async def run_digest(query: NewsQuery, service: Optional[NewsAggregationService] = None) -> int:
    service = service or NewsAggregationService(get_settings())
    try:
        result = await service.run(query)
    except NoNewsFoundError as exc:
        logger.error("news_digest_bot_no_news", errors=exc.debug.errors, skipped=exc.debug.skipped)
        payload = {"success": False, "error": "No news found", "debug": exc.debug.model_dump(by_alias=True)}
        print(json.dumps(payload, indent=2))
        return 1

    response = build_news_response(result, query)
    print(response.model_dump_json(by_alias=True, indent=2))
    logger.info(
        "news_digest_bot_finished",
        category=query.category,
        count=response.count,
        ai=response.ai,
        errors=len(result.debug.errors),
    )
    return 0


async def main_async(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(service_name="worker", level=settings.LOG_LEVEL)
    query = NewsQuery(
        category=args.category,
        limit=clamp_limit(args.limit, default=settings.NEWS_DEFAULT_LIMIT, maximum=settings.NEWS_MAX_LIMIT),
        skip_ai=args.skip_ai,
        sort=args.sort,
    )
    with with_run_id():
        return await run_digest(query)


def main() -> None:
    exit_code = asyncio.run(main_async())
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()

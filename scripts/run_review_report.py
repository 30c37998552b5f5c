import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from guest_reviews.config import settings
from guest_reviews.services.review_service import ReviewService, ReviewsUnavailableError


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print review statistics and trends without the API server.")
    parser.add_argument("listing", nargs="*", help="Optional listing name (partial names match).")
    parser.add_argument(
        "--compact",
        action="store_true",
        help="Print compact JSON output (single line).",
    )
    return parser.parse_args()


def _json_default(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


async def _run() -> int:
    args = _parse_args()
    listing = " ".join(args.listing).strip() or None

    logging.basicConfig(level=settings.log_level.upper(), format=settings.log_format)
    service = ReviewService.from_settings(settings)
    try:
        reviews = await service.search_reviews(listing_filter=listing)
        _, stats = await service.get_stats()
        _, trends = await service.get_trends(listing_filter=listing)
    except ReviewsUnavailableError as exc:
        print(f"Reviews unavailable: {exc}", file=sys.stderr)
        return 1

    result = {
        "listing": listing or "all",
        "source": reviews["source"],
        "review_count": reviews["count"],
        "stats": stats.model_dump(mode="json", by_alias=True, exclude={"recent_reviews"}),
        "trends": trends.model_dump(mode="json", by_alias=True),
    }
    if args.compact:
        print(json.dumps(result, ensure_ascii=False, default=_json_default))
    else:
        print(json.dumps(result, ensure_ascii=False, indent=2, default=_json_default))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(_run()))

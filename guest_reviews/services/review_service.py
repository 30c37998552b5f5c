from __future__ import annotations

from typing import Any

from guest_reviews.config import Settings, settings
from guest_reviews.models.analytics import ListingAggregate, ReviewStats, TrendReport
from guest_reviews.models.review import FetchResult, FetchSource, Review
from guest_reviews.pipeline.stats import StatsAggregator
from guest_reviews.pipeline.trends import TrendAnalyzer
from guest_reviews.services.hostaway_client import HostawayClient
from guest_reviews.services.review_repository import ReviewRepository


class ReviewsUnavailableError(RuntimeError):
    """Neither the upstream API nor the fallback dataset produced reviews."""


class ReviewService:
    def __init__(
        self,
        repository: ReviewRepository,
        stats_aggregator: StatsAggregator | None = None,
        trend_analyzer: TrendAnalyzer | None = None,
    ) -> None:
        self.repository = repository
        self.stats_aggregator = stats_aggregator or StatsAggregator()
        self.trend_analyzer = trend_analyzer or TrendAnalyzer()

    @classmethod
    def from_settings(cls, config: Settings = settings) -> ReviewService:
        client = HostawayClient(
            base_url=config.hostaway_api_url,
            account_id=config.hostaway_account_id,
            api_key=config.hostaway_api_key,
            page_limit=config.hostaway_page_limit,
            timeout_seconds=config.hostaway_timeout_seconds,
        )
        repository = ReviewRepository(
            client=client,
            fallback_path=config.fallback_dataset_path,
            cache_duration_seconds=config.cache_duration_seconds,
            fetch_timeout_seconds=config.hostaway_timeout_seconds,
        )
        return cls(repository=repository)

    async def fetch_reviews(self, listing_filter: str | None = None) -> list[Review]:
        return await self.repository.fetch_reviews(listing_filter)

    async def search_reviews(
        self,
        listing_filter: str | None = None,
        query: str | None = None,
        min_rating: float | None = None,
        sort: str = "newest",
    ) -> dict[str, Any]:
        result = await self._fetch_or_raise(listing_filter)
        reviews = self.repository.filter_by_text(result.reviews, query)
        reviews = self.repository.filter_by_min_rating(reviews, min_rating)
        reviews = self.repository.sort_reviews(reviews, sort)
        return {
            "source": result.source.value,
            "count": len(reviews),
            "result": reviews,
        }

    async def get_stats(self) -> tuple[FetchSource, ReviewStats]:
        result = await self._fetch_or_raise(None)
        return result.source, self.stats_aggregator.aggregate(result.reviews)

    async def get_listings(self) -> list[ListingAggregate]:
        result = await self._fetch_or_raise(None)
        return self.stats_aggregator.listing_aggregates(result.reviews)

    async def get_review(self, review_id: int) -> Review:
        result = await self._fetch_or_raise(None)
        for review in result.reviews:
            if review.id == review_id:
                return review
        raise LookupError(f"Review '{review_id}' not found.")

    async def get_trends(self, listing_filter: str | None = None) -> tuple[FetchSource, TrendReport]:
        result = await self._fetch_or_raise(listing_filter)
        return result.source, self.trend_analyzer.analyze(result.reviews)

    async def _fetch_or_raise(self, listing_filter: str | None) -> FetchResult:
        result = await self.repository.fetch(listing_filter)
        if result.source is FetchSource.UNAVAILABLE:
            raise ReviewsUnavailableError(result.detail or "Reviews are unavailable.")
        return result

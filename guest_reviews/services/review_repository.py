from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from time import monotonic
from typing import Any, Callable

from guest_reviews.models.review import FetchResult, FetchSource, RawReview, Review
from guest_reviews.pipeline.normalizer import ReviewNormalizer
from guest_reviews.pipeline.stats import rating_or_zero
from guest_reviews.services.hostaway_client import HostawayClient, UpstreamError

LOGGER = logging.getLogger(__name__)

ALL_LISTINGS_KEY = "all"
SORT_ORDERS = ("newest", "oldest", "rating")


@dataclass(frozen=True)
class CacheEntry:
    reviews: tuple[Review, ...]
    fetched_at: float


class ReviewRepository:
    """Canonical reviews per listing filter, cached for ``cache_duration_seconds``.

    Only live batches are cached. A fallback batch is served once and the next
    call goes back to the upstream API. Concurrent misses on the same key share
    one in-flight load, so every waiter gets the same result.
    """

    def __init__(
        self,
        client: HostawayClient,
        fallback_path: str | Path,
        *,
        normalizer: ReviewNormalizer | None = None,
        cache_duration_seconds: float = 3600,
        fetch_timeout_seconds: float | None = None,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        self.client = client
        self.fallback_path = Path(fallback_path)
        self.normalizer = normalizer or ReviewNormalizer()
        self.cache_duration_seconds = cache_duration_seconds
        self.fetch_timeout_seconds = fetch_timeout_seconds
        self._clock = clock
        self._cache: dict[str, CacheEntry] = {}
        self._in_flight: dict[str, asyncio.Future[FetchResult]] = {}

    async def fetch(self, listing_filter: str | None = None) -> FetchResult:
        listing = self._clean_filter(listing_filter)
        key = listing or ALL_LISTINGS_KEY

        cached = self._cache.get(key)
        if cached is not None and self._clock() - cached.fetched_at < self.cache_duration_seconds:
            LOGGER.debug("Returning cached reviews for key=%r", key)
            return FetchResult(source=FetchSource.LIVE, reviews=cached.reviews)

        in_flight = self._in_flight.get(key)
        if in_flight is None:
            in_flight = asyncio.ensure_future(self._load(key, listing))
            self._in_flight[key] = in_flight
            in_flight.add_done_callback(lambda done, key=key: self._forget_in_flight(key, done))
        return await asyncio.shield(in_flight)

    async def fetch_reviews(self, listing_filter: str | None = None) -> list[Review]:
        result = await self.fetch(listing_filter)
        return list(result.reviews)

    async def get_review(self, review_id: int) -> Review | None:
        for review in await self.fetch_reviews():
            if review.id == review_id:
                return review
        return None

    def clear_cache(self) -> None:
        self._cache.clear()

    def normalize_records(self, records: Iterable[dict[str, Any]]) -> tuple[Review, ...]:
        reviews: list[Review] = []
        for record in records:
            try:
                raw = RawReview.from_payload(record)
            except ValueError as exc:
                LOGGER.warning("Skipping review record: %s", exc)
                continue
            reviews.append(self.normalizer.normalize(raw))
        return tuple(reviews)

    @staticmethod
    def filter_by_listing(reviews: Iterable[Review], query: str | None) -> list[Review]:
        needle = (query or "").strip().lower()
        if not needle:
            return list(reviews)
        # Either name may be a partial alias of the other.
        return [
            review
            for review in reviews
            if needle in review.listing.lower() or review.listing.lower() in needle
        ]

    @staticmethod
    def filter_by_text(reviews: Iterable[Review], query: str | None) -> list[Review]:
        needle = (query or "").strip().lower()
        if not needle:
            return list(reviews)
        return [
            review
            for review in reviews
            if needle in (review.text or "").lower() or needle in (review.guest_name or "").lower()
        ]

    @staticmethod
    def filter_by_min_rating(reviews: Iterable[Review], threshold: float | None) -> list[Review]:
        if threshold is None:
            return list(reviews)
        return [review for review in reviews if rating_or_zero(review) >= threshold]

    @staticmethod
    def group_by_listing(reviews: Iterable[Review]) -> dict[str, list[Review]]:
        grouped: dict[str, list[Review]] = {}
        for review in reviews:
            grouped.setdefault(review.listing, []).append(review)
        return grouped

    @staticmethod
    def sort_reviews(reviews: Sequence[Review], order: str = "newest") -> list[Review]:
        if order == "newest":
            return sorted(reviews, key=lambda review: review.submitted_at, reverse=True)
        if order == "oldest":
            return sorted(reviews, key=lambda review: review.submitted_at)
        if order == "rating":
            return sorted(reviews, key=rating_or_zero, reverse=True)
        supported = ", ".join(SORT_ORDERS)
        raise ValueError(f"Unknown sort order '{order}'. Supported: {supported}.")

    async def _load(self, key: str, listing: str | None) -> FetchResult:
        if not self.client.configured:
            LOGGER.warning("Hostaway API credentials not configured, using fallback dataset")
            return await self._load_fallback(listing, reason="Hostaway API is not configured.")

        try:
            records = await asyncio.wait_for(
                self.client.fetch_reviews(listing),
                timeout=self.fetch_timeout_seconds,
            )
            reviews = self.normalize_records(records)
        except asyncio.TimeoutError:
            LOGGER.warning("Hostaway fetch for key=%r exceeded %ss, using fallback dataset", key, self.fetch_timeout_seconds)
            return await self._load_fallback(listing, reason="Hostaway API timed out.")
        except UpstreamError as exc:
            LOGGER.warning("Hostaway fetch for key=%r failed, using fallback dataset: %s", key, exc)
            return await self._load_fallback(listing, reason=str(exc))
        except Exception:
            LOGGER.exception("Hostaway fetch for key=%r failed unexpectedly, using fallback dataset", key)
            return await self._load_fallback(listing, reason="Hostaway reviews could not be processed.")

        self._cache[key] = CacheEntry(reviews=reviews, fetched_at=self._clock())
        LOGGER.info("Fetched %s reviews from Hostaway for key=%r", len(reviews), key)
        return FetchResult(source=FetchSource.LIVE, reviews=reviews)

    async def _load_fallback(self, listing: str | None, *, reason: str) -> FetchResult:
        try:
            payload = await asyncio.to_thread(self._read_fallback_payload)
            records = HostawayClient.extract_result(payload, source="Fallback dataset")
        except (OSError, ValueError, UpstreamError) as exc:
            LOGGER.error("Fallback dataset %s could not be loaded: %s", self.fallback_path, exc)
            return FetchResult(source=FetchSource.UNAVAILABLE, detail=f"{reason} Fallback dataset unavailable: {exc}")

        reviews = self.normalize_records(records)
        if listing:
            reviews = tuple(self.filter_by_listing(reviews, listing))
        return FetchResult(source=FetchSource.FALLBACK, reviews=reviews, detail=reason)

    def _read_fallback_payload(self) -> object:
        with self.fallback_path.open(encoding="utf-8") as handle:
            return json.load(handle)

    def _forget_in_flight(self, key: str, done: asyncio.Future[FetchResult]) -> None:
        if self._in_flight.get(key) is done:
            del self._in_flight[key]

    def _clean_filter(self, listing_filter: str | None) -> str | None:
        listing = (listing_filter or "").strip()
        if not listing or listing.lower() == ALL_LISTINGS_KEY:
            return None
        return listing

from collections.abc import Sequence

from guest_reviews.models.analytics import ListingAggregate, ReviewStats
from guest_reviews.models.review import Review
from guest_reviews.pipeline.ratings import mean_or_zero, round_half_up


def rating_or_zero(review: Review) -> float:
    return review.rating if review.rating is not None else 0.0


def category_totals(reviews: Sequence[Review]) -> dict[str, tuple[float, int]]:
    """Sum and count per category over the reviews that actually scored it."""
    totals: dict[str, tuple[float, int]] = {}
    for review in reviews:
        for category, score in review.categories.items():
            total, count = totals.get(category, (0.0, 0))
            totals[category] = (total + score, count + 1)
    return totals


class StatsAggregator:
    _TOP_LISTINGS = 5
    _RECENT_REVIEWS = 5

    def aggregate(self, reviews: Sequence[Review]) -> ReviewStats:
        if not reviews:
            return ReviewStats()

        # Missing ratings count as 0 but stay in the denominator.
        average_rating = round_half_up(mean_or_zero(rating_or_zero(review) for review in reviews))
        listing_aggregates = self.listing_aggregates(reviews)
        top_listings = sorted(listing_aggregates, key=lambda item: item.average_rating, reverse=True)
        recent_reviews = sorted(reviews, key=lambda review: review.submitted_at, reverse=True)

        return ReviewStats(
            total_reviews=len(reviews),
            average_rating=average_rating,
            total_listings=len(listing_aggregates),
            category_averages=self.category_averages(reviews),
            top_listings=top_listings[: self._TOP_LISTINGS],
            recent_reviews=recent_reviews[: self._RECENT_REVIEWS],
        )

    def category_averages(self, reviews: Sequence[Review]) -> dict[str, float]:
        return {category: total / count for category, (total, count) in category_totals(reviews).items()}

    def listing_aggregates(self, reviews: Sequence[Review]) -> list[ListingAggregate]:
        grouped: dict[str, list[float]] = {}
        for review in reviews:
            grouped.setdefault(review.listing, []).append(rating_or_zero(review))

        aggregates = [
            ListingAggregate(
                listing=listing,
                review_count=len(ratings),
                average_rating=round_half_up(mean_or_zero(ratings)),
            )
            for listing, ratings in grouped.items()
        ]
        return sorted(aggregates, key=lambda item: item.review_count, reverse=True)

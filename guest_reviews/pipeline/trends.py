import re
from collections import Counter
from collections.abc import Sequence

from guest_reviews.models.analytics import (
    CategoryTrend,
    IssueTerm,
    MonthBucket,
    RatingDistribution,
    TrendReport,
)
from guest_reviews.models.review import Review
from guest_reviews.pipeline.ratings import mean_or_zero
from guest_reviews.pipeline.stats import category_totals, rating_or_zero

MIN_REVIEWS_FOR_TRENDS = 3
TREND_WINDOW_MONTHS = 3
TREND_THRESHOLD_PERCENT = 5.0
ISSUE_RATING_CEILING = 7.0
ISSUE_MIN_FREQUENCY = 2
ISSUE_LIMIT = 8

STOPWORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
        "is", "are", "was", "were", "be", "been", "being", "have", "has", "had", "do", "does",
        "did", "will", "would", "should", "could", "can", "may", "might", "must", "i", "you",
        "he", "she", "it", "we", "they", "my", "your", "his", "her", "its", "our", "their",
        "this", "that", "these", "those", "am",
    }
)


class TrendAnalyzer:
    """Time-series and text signals over an already fetched batch of reviews.

    Month buckets, recurring issues and the overall trend need at least
    ``MIN_REVIEWS_FOR_TRENDS`` reviews and come back empty (or 0) below that.
    The rating distribution and category ranking are defined for any input.
    """

    _NON_WORD_REGEX = re.compile(r"[^\w\s]")

    def has_enough_data(self, reviews: Sequence[Review]) -> bool:
        return len(reviews) >= MIN_REVIEWS_FOR_TRENDS

    def monthly_buckets(self, reviews: Sequence[Review]) -> list[MonthBucket]:
        if not self.has_enough_data(reviews):
            return []

        ratings_by_month: dict[str, list[float]] = {}
        for review in reviews:
            month = review.submitted_at.strftime("%Y-%m")
            ratings_by_month.setdefault(month, []).append(rating_or_zero(review))

        return [
            MonthBucket(month=month, count=len(ratings), average_rating=mean_or_zero(ratings))
            for month, ratings in sorted(ratings_by_month.items())
        ]

    def overall_trend_percent(self, buckets: Sequence[MonthBucket]) -> float:
        total = len(buckets)
        if total < 2:
            return 0.0

        recent = buckets[-min(TREND_WINDOW_MONTHS, total):]
        # Two months leave the first as baseline, three leave none.
        older = buckets[: min(TREND_WINDOW_MONTHS, total - TREND_WINDOW_MONTHS)]
        if not older:
            return 0.0

        recent_average = mean_or_zero(bucket.average_rating for bucket in recent)
        older_average = mean_or_zero(bucket.average_rating for bucket in older)
        if older_average == 0:
            return 0.0
        return (recent_average - older_average) / older_average * 100

    def trend_direction(self, percent: float) -> str:
        if percent > TREND_THRESHOLD_PERCENT:
            return "improving"
        if percent < -TREND_THRESHOLD_PERCENT:
            return "declining"
        return "flat"

    def rating_distribution(self, reviews: Sequence[Review]) -> RatingDistribution:
        counts = Counter(self._rating_band(rating_or_zero(review)) for review in reviews)
        return RatingDistribution(
            excellent=counts["excellent"],
            good=counts["good"],
            average=counts["average"],
            poor=counts["poor"],
        )

    def recurring_issues(self, reviews: Sequence[Review]) -> list[IssueTerm]:
        if not self.has_enough_data(reviews):
            return []

        frequencies: Counter[str] = Counter()
        for review in reviews:
            if rating_or_zero(review) > ISSUE_RATING_CEILING or not review.text:
                continue
            frequencies.update(self.issue_tokens(review.text))

        # Counter keeps first-seen order, and sorted() is stable on ties.
        ranked = sorted(
            ((word, count) for word, count in frequencies.items() if count >= ISSUE_MIN_FREQUENCY),
            key=lambda item: item[1],
            reverse=True,
        )
        return [IssueTerm(word=word, count=count) for word, count in ranked[:ISSUE_LIMIT]]

    def issue_tokens(self, text: str) -> list[str]:
        words = self._NON_WORD_REGEX.sub(" ", text.lower()).split()
        return [word for word in words if len(word) > 3 and not word.isdigit() and word not in STOPWORDS]

    def category_trends(self, reviews: Sequence[Review]) -> list[CategoryTrend]:
        trends = [
            CategoryTrend(category=category, average=total / count, count=count)
            for category, (total, count) in category_totals(reviews).items()
        ]
        return sorted(trends, key=lambda item: item.average, reverse=True)

    def analyze(self, reviews: Sequence[Review]) -> TrendReport:
        buckets = self.monthly_buckets(reviews)
        percent = self.overall_trend_percent(buckets)
        return TrendReport(
            has_enough_data=self.has_enough_data(reviews),
            monthly=buckets,
            overall_trend_percent=percent,
            direction=self.trend_direction(percent),
            rating_distribution=self.rating_distribution(reviews),
            recurring_issues=self.recurring_issues(reviews),
            category_trends=self.category_trends(reviews),
        )

    def _rating_band(self, rating: float) -> str:
        if rating >= 9:
            return "excellent"
        if rating >= 7:
            return "good"
        if rating >= 5:
            return "average"
        return "poor"

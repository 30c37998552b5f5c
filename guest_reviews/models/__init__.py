from guest_reviews.models.analytics import (
    CategoryTrend,
    IssueTerm,
    ListingAggregate,
    MonthBucket,
    RatingDistribution,
    ReviewStats,
    TrendReport,
)
from guest_reviews.models.review import (
    UNKNOWN_LISTING,
    FetchResult,
    FetchSource,
    RawReview,
    RawReviewCategory,
    Review,
)

__all__ = [
    "UNKNOWN_LISTING",
    "CategoryTrend",
    "FetchResult",
    "FetchSource",
    "IssueTerm",
    "ListingAggregate",
    "MonthBucket",
    "RatingDistribution",
    "RawReview",
    "RawReviewCategory",
    "Review",
    "ReviewStats",
    "TrendReport",
]

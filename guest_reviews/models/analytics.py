from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from guest_reviews.models.review import Review


class _CamelModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class ListingAggregate(_CamelModel):
    listing: str
    review_count: int = Field(default=0, ge=0)
    average_rating: float = 0.0


class ReviewStats(_CamelModel):
    total_reviews: int = Field(default=0, ge=0)
    average_rating: float = 0.0
    total_listings: int = Field(default=0, ge=0)
    category_averages: dict[str, float] = Field(default_factory=dict)
    top_listings: list[ListingAggregate] = Field(default_factory=list)
    recent_reviews: list[Review] = Field(default_factory=list)


class MonthBucket(_CamelModel):
    month: str
    count: int = Field(default=0, ge=0)
    average_rating: float = 0.0


class RatingDistribution(_CamelModel):
    excellent: int = 0
    good: int = 0
    average: int = 0
    poor: int = 0

    @property
    def total(self) -> int:
        return self.excellent + self.good + self.average + self.poor


class IssueTerm(_CamelModel):
    word: str
    count: int


class CategoryTrend(_CamelModel):
    category: str
    average: float
    count: int


class TrendReport(_CamelModel):
    has_enough_data: bool = False
    monthly: list[MonthBucket] = Field(default_factory=list)
    overall_trend_percent: float = 0.0
    direction: str = "flat"
    rating_distribution: RatingDistribution = Field(default_factory=RatingDistribution)
    recurring_issues: list[IssueTerm] = Field(default_factory=list)
    category_trends: list[CategoryTrend] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

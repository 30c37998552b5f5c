from __future__ import annotations

import math
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

UNKNOWN_LISTING = "Unknown listing"


def _as_str(value: object) -> str | None:
    if isinstance(value, str):
        return value
    return None


def _as_number(value: object) -> float | None:
    # bool is an int subclass but never a score
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
        return value if math.isfinite(number) else None
    return None


def _as_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


class RawReviewCategory(BaseModel):
    category: str | None = None
    rating: float | None = None

    @classmethod
    def from_payload(cls, payload: object) -> RawReviewCategory:
        if not isinstance(payload, dict):
            return cls()
        return cls(category=_as_str(payload.get("category")), rating=_as_number(payload.get("rating")))


class RawReview(BaseModel):
    """One upstream review record. Only ``id`` is guaranteed."""

    id: int
    type: str | None = None
    status: str | None = None
    rating: float | None = None
    public_review: str | None = None
    review_category: list[RawReviewCategory] = Field(default_factory=list)
    submitted_at: str | None = None
    guest_name: str | None = None
    listing_name: str | None = None
    channel: str | None = None
    listing_id: int | None = None
    reservation_id: int | None = None
    guest_id: int | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> RawReview:
        review_id = _as_int(payload.get("id"))
        if review_id is None:
            raise ValueError(f"Review record has no usable id: {payload.get('id')!r}")

        raw_categories = payload.get("reviewCategory")
        categories = (
            [RawReviewCategory.from_payload(item) for item in raw_categories]
            if isinstance(raw_categories, list)
            else []
        )

        return cls(
            id=review_id,
            type=_as_str(payload.get("type")),
            status=_as_str(payload.get("status")),
            rating=_as_number(payload.get("rating")),
            public_review=_as_str(payload.get("publicReview")),
            review_category=categories,
            submitted_at=_as_str(payload.get("submittedAt")),
            guest_name=_as_str(payload.get("guestName")),
            listing_name=_as_str(payload.get("listingName")),
            channel=_as_str(payload.get("channel")),
            listing_id=_as_int(payload.get("listingId")),
            reservation_id=_as_int(payload.get("reservationId")),
            guest_id=_as_int(payload.get("guestId")),
        )


class Review(BaseModel):
    id: int
    listing: str = UNKNOWN_LISTING
    type: str = "unknown"
    channel: str = "hostaway"
    status: str = "unknown"
    rating: float | None = None
    categories: dict[str, float] = Field(default_factory=dict)
    text: str | None = None
    submitted_at: datetime
    guest_name: str | None = None
    listing_id: int | None = None
    reservation_id: int | None = None
    guest_id: int | None = None

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class FetchSource(str, Enum):
    LIVE = "live"
    FALLBACK = "fallback"
    UNAVAILABLE = "unavailable"


class FetchResult(BaseModel):
    """Outcome of a repository fetch, tagged by where the batch came from."""

    source: FetchSource
    reviews: tuple[Review, ...] = ()
    detail: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def available(self) -> bool:
        return self.source is not FetchSource.UNAVAILABLE

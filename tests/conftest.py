from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

import pytest

from guest_reviews.models.review import Review

FALLBACK_DATASET = Path(__file__).resolve().parents[1] / "data" / "hostaway.json"


def _make_review(
    review_id: int = 1,
    rating: float | None = None,
    submitted_at: datetime | str = "2024-01-15T10:30:00+00:00",
    **fields: Any,
) -> Review:
    if isinstance(submitted_at, str):
        submitted_at = datetime.fromisoformat(submitted_at)
    return Review(id=review_id, rating=rating, submitted_at=submitted_at, **fields)


@pytest.fixture
def make_review() -> Callable[..., Review]:
    return _make_review


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fallback_dataset() -> Path:
    return FALLBACK_DATASET

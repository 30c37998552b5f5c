import re

from guest_reviews.models.review import UNKNOWN_LISTING, RawReview, RawReviewCategory, Review
from guest_reviews.pipeline.dates import DateNormalizer
from guest_reviews.pipeline.ratings import RatingResolver


class ReviewNormalizer:
    """Reconcile one upstream record into a canonical ``Review``.

    No I/O and no shared state: the same record always yields an equal review,
    except for the timestamp of records with no readable date.
    """

    _WHITESPACE_REGEX = re.compile(r"\s+")

    def __init__(
        self,
        date_normalizer: DateNormalizer | None = None,
        rating_resolver: RatingResolver | None = None,
    ) -> None:
        self.date_normalizer = date_normalizer or DateNormalizer()
        self.rating_resolver = rating_resolver or RatingResolver()

    def normalize(self, raw: RawReview) -> Review:
        categories = self.normalize_categories(raw.review_category)

        return Review(
            id=raw.id,
            listing=self._resolve_listing(raw),
            type=raw.type or "unknown",
            channel=raw.channel or "hostaway",
            status=raw.status or "unknown",
            rating=self.rating_resolver.resolve(raw.rating, categories),
            categories=categories,
            text=raw.public_review,
            submitted_at=self.date_normalizer.normalize(raw.submitted_at),
            guest_name=raw.guest_name,
            listing_id=raw.listing_id,
            reservation_id=raw.reservation_id,
            guest_id=raw.guest_id,
        )

    def normalize_categories(self, entries: list[RawReviewCategory]) -> dict[str, float]:
        categories: dict[str, float] = {}
        for entry in entries:
            if entry.category is None or entry.rating is None:
                continue
            key = self.category_key(entry.category)
            if not key:
                continue
            categories[key] = entry.rating
        return categories

    def category_key(self, name: str) -> str:
        return self._WHITESPACE_REGEX.sub("_", name.strip().lower())

    def _resolve_listing(self, raw: RawReview) -> str:
        if raw.listing_name and raw.listing_name.strip():
            return raw.listing_name.strip()
        if raw.listing_id is not None:
            return f"Property {raw.listing_id}"
        return UNKNOWN_LISTING

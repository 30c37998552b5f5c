from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from guest_reviews.services.review_repository import SORT_ORDERS
from guest_reviews.services.review_service import ReviewService, ReviewsUnavailableError

router = APIRouter(prefix="/reviews")


def get_review_service(request: Request) -> ReviewService:
    return request.app.state.review_service


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _dump(value: Any) -> Any:
    if isinstance(value, list):
        return [_dump(item) for item in value]
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json", by_alias=True)
    return value


def _unavailable(exc: ReviewsUnavailableError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


@router.get("", tags=["Reviews"])
async def list_reviews(
    listing: str | None = Query(default=None),
    q: str | None = Query(default=None),
    min_rating: float | None = Query(default=None, ge=0, le=10),
    sort: str = Query(default="newest", pattern=f"^({'|'.join(SORT_ORDERS)})$"),
    service: ReviewService = Depends(get_review_service),
) -> dict:
    try:
        payload = await service.search_reviews(listing_filter=listing, query=q, min_rating=min_rating, sort=sort)
    except ReviewsUnavailableError as exc:
        raise _unavailable(exc) from exc

    return {
        "status": "success",
        "source": payload["source"],
        "count": payload["count"],
        "result": _dump(payload["result"]),
        "timestamp": _timestamp(),
    }


@router.get("/stats", tags=["Reviews"])
async def get_review_stats(service: ReviewService = Depends(get_review_service)) -> dict:
    try:
        source, stats = await service.get_stats()
    except ReviewsUnavailableError as exc:
        raise _unavailable(exc) from exc

    return {"status": "success", "source": source.value, **_dump(stats), "timestamp": _timestamp()}


@router.get("/listings", tags=["Reviews"])
async def list_listings(service: ReviewService = Depends(get_review_service)) -> dict:
    try:
        listings = await service.get_listings()
    except ReviewsUnavailableError as exc:
        raise _unavailable(exc) from exc

    return {
        "status": "success",
        "count": len(listings),
        "result": _dump(listings),
        "timestamp": _timestamp(),
    }


@router.get("/trends", tags=["Analytics"])
async def get_review_trends(
    listing: str | None = Query(default=None),
    service: ReviewService = Depends(get_review_service),
) -> dict:
    try:
        source, report = await service.get_trends(listing_filter=listing)
    except ReviewsUnavailableError as exc:
        raise _unavailable(exc) from exc

    return {"status": "success", "source": source.value, **_dump(report)}


@router.get("/{review_id}", tags=["Reviews"])
async def get_review(review_id: int, service: ReviewService = Depends(get_review_service)) -> dict:
    try:
        review = await service.get_review(review_id)
    except ReviewsUnavailableError as exc:
        raise _unavailable(exc) from exc
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    return {"status": "success", "result": _dump(review), "timestamp": _timestamp()}

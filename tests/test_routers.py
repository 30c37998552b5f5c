from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from guest_reviews.config import settings
from guest_reviews.main import app
from guest_reviews.routers.reviews import get_review_service
from guest_reviews.services.hostaway_client import HostawayClient
from guest_reviews.services.review_repository import ReviewRepository
from guest_reviews.services.review_service import ReviewService


def _service(fallback_path: Path) -> ReviewService:
    client = HostawayClient(base_url="https://api.example.test", account_id="", api_key="")
    return ReviewService(repository=ReviewRepository(client=client, fallback_path=fallback_path))


@pytest.fixture
def api(fallback_dataset: Path):
    service = _service(fallback_dataset)
    app.dependency_overrides[get_review_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def unavailable_api(tmp_path: Path):
    service = _service(tmp_path / "missing.json")
    app.dependency_overrides[get_review_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_list_reviews_from_fallback(api: TestClient) -> None:
    response = api.get("/reviews")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "success"
    assert payload["source"] == "fallback"
    assert payload["count"] == 10
    first = payload["result"][0]
    assert {"id", "listing", "rating", "categories", "submittedAt", "guestName"} <= set(first)


def test_list_reviews_with_filters(api: TestClient) -> None:
    by_listing = api.get("/reviews", params={"listing": "Shoreditch"}).json()
    by_rating = api.get("/reviews", params={"min_rating": 9, "sort": "rating"}).json()
    by_text = api.get("/reviews", params={"q": "wifi"}).json()

    assert sorted(review["id"] for review in by_listing["result"]) == [7453, 7454, 7459]
    assert [review["id"] for review in by_rating["result"]][:2] == [7453, 7457]
    assert by_rating["count"] == 4
    assert sorted(review["id"] for review in by_text["result"]) == [7458, 7459, 7460]


def test_invalid_sort_is_rejected(api: TestClient) -> None:
    assert api.get("/reviews", params={"sort": "random"}).status_code == 422


def test_review_stats(api: TestClient) -> None:
    payload = api.get("/reviews/stats").json()

    assert payload["source"] == "fallback"
    assert payload["totalReviews"] == 10
    assert payload["totalListings"] == 4
    assert payload["averageRating"] == 6.9
    assert payload["categoryAverages"]["location"] == 9.5
    assert len(payload["topListings"]) == 4


def test_listings(api: TestClient) -> None:
    payload = api.get("/reviews/listings").json()

    assert payload["count"] == 4
    names = {item["listing"]: item["reviewCount"] for item in payload["result"]}
    assert names["Property 155613"] == 1
    assert names["2B N1 A - 29 Shoreditch Heights"] == 3


def test_trends(api: TestClient) -> None:
    payload = api.get("/reviews/trends").json()

    assert payload["source"] == "fallback"
    assert payload["hasEnoughData"] is True
    assert {"word": "noisy", "count": 3} in payload["recurringIssues"]
    assert "heating" not in [issue["word"] for issue in payload["recurringIssues"]]
    assert sum(payload["ratingDistribution"].values()) == 10


def test_get_review_by_id(api: TestClient) -> None:
    found = api.get("/reviews/7455")
    missing = api.get("/reviews/1")

    assert found.status_code == 200
    assert found.json()["result"]["guestName"] == "Lucas Moreau"
    assert missing.status_code == 404


def test_unavailable_reviews_map_to_503(unavailable_api: TestClient) -> None:
    assert unavailable_api.get("/reviews").status_code == 503
    assert unavailable_api.get("/reviews/stats").status_code == 503
    assert unavailable_api.get("/reviews/trends").status_code == 503


def test_health_reports_missing_sources(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(settings, "hostaway_account_id", "")
    monkeypatch.setattr(settings, "hostaway_api_key", "")
    monkeypatch.setattr(settings, "fallback_dataset_path", str(tmp_path / "missing.json"))

    response = TestClient(app).get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "down"


def test_health_degraded_on_fallback_only(monkeypatch: pytest.MonkeyPatch, fallback_dataset: Path) -> None:
    monkeypatch.setattr(settings, "hostaway_account_id", "")
    monkeypatch.setattr(settings, "hostaway_api_key", "")
    monkeypatch.setattr(settings, "fallback_dataset_path", str(fallback_dataset))

    response = TestClient(app).get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"

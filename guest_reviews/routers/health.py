from datetime import datetime, timezone
from pathlib import Path

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from guest_reviews.config import settings

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    upstream: str
    fallback_dataset: str
    environment: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    detail: str | None = None


@router.get("/health", response_model=HealthResponse)
async def get_health() -> JSONResponse:
    fallback_ok = Path(settings.fallback_dataset_path).is_file()
    upstream_ok = settings.hostaway_configured
    healthy = upstream_ok or fallback_ok
    http_status = status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE
    payload = HealthResponse(
        status="ok" if upstream_ok else ("degraded" if fallback_ok else "down"),
        upstream="configured" if upstream_ok else "unconfigured",
        fallback_dataset="present" if fallback_ok else "missing",
        environment=settings.app_env,
        detail=None if healthy else "No upstream credentials and no fallback dataset.",
    )
    return JSONResponse(status_code=http_status, content=payload.model_dump(mode="json", exclude_none=True))

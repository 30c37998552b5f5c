import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from guest_reviews.config import settings
from guest_reviews.routers.health import router as health_router
from guest_reviews.routers.reviews import router as reviews_router
from guest_reviews.services.review_service import ReviewService

logging.basicConfig(level=settings.log_level.upper(), format=settings.log_format)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One repository, and so one cache, per process.
    app.state.review_service = ReviewService.from_settings(settings)
    yield


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    description="API for normalized guest reviews, statistics and trend analysis.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(reviews_router)

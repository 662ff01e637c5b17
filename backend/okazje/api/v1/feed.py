"""Personalized feed API endpoints."""

import uuid

from fastapi import APIRouter, Depends, Query

from okazje.dependencies import get_feed_service
from okazje.schemas.common import ApiResponse
from okazje.services.feed_service import FeedService

router = APIRouter()


@router.get("/users/{user_id}/feed", response_model=ApiResponse)
async def get_feed(
    user_id: str,
    count: int = Query(20, ge=1, le=100, description="Number of feed items"),
    include_recommendations: bool = Query(True, description="Use personalized recommendations"),
    service: FeedService = Depends(get_feed_service),
):
    """Get the user's feed: recommended items first, then trending deals."""
    items = await service.get_personalized_feed(
        user_id, count=count, include_recommendations=include_recommendations
    )
    return ApiResponse(status="success", data=[item.model_dump(mode="json") for item in items])


@router.get("/users/{user_id}/feed/recommendations", response_model=ApiResponse)
async def list_recommendations(
    user_id: str,
    service: FeedService = Depends(get_feed_service),
):
    """Active recommendations that have not been shown yet."""
    recommendations = await service.get_feed_recommendations(user_id)
    return ApiResponse(
        status="success",
        data=[rec.model_dump(mode="json") for rec in recommendations],
    )


@router.post("/users/{user_id}/feed/recommendations/generate", response_model=ApiResponse, status_code=201)
async def generate_recommendations(
    user_id: str,
    count: int = Query(20, ge=1, le=100, description="Maximum recommendations to generate"),
    service: FeedService = Depends(get_feed_service),
):
    """Generate and store a fresh batch of recommendations."""
    recommendations = await service.generate_feed_recommendations(user_id, count=count)
    return ApiResponse(
        status="success",
        data=[rec.model_dump(mode="json") for rec in recommendations],
    )


@router.post("/recommendations/{recommendation_id}/shown", response_model=ApiResponse)
async def mark_shown(
    recommendation_id: uuid.UUID,
    service: FeedService = Depends(get_feed_service),
):
    """Record that a recommendation was displayed."""
    await service.mark_recommendation_shown(recommendation_id)
    return ApiResponse(status="success", data={"id": str(recommendation_id), "shown": True})


@router.post("/recommendations/{recommendation_id}/clicked", response_model=ApiResponse)
async def mark_clicked(
    recommendation_id: uuid.UUID,
    service: FeedService = Depends(get_feed_service),
):
    """Record that a recommendation was clicked."""
    await service.mark_recommendation_clicked(recommendation_id)
    return ApiResponse(status="success", data={"id": str(recommendation_id), "clicked": True})

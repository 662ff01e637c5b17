"""Interaction tracking API endpoints."""

from fastapi import APIRouter, Depends, Query

from okazje.dependencies import get_interaction_service
from okazje.schemas.common import ApiResponse
from okazje.schemas.interaction import InteractionCreateRequest
from okazje.services.interaction_service import InteractionService

router = APIRouter()


@router.post("/interactions", response_model=ApiResponse, status_code=201)
async def record_interaction(
    body: InteractionCreateRequest,
    service: InteractionService = Depends(get_interaction_service),
):
    """Track a user's interaction with a deal or product."""
    interaction = await service.record_interaction(
        user_id=body.user_id,
        item_id=body.item_id,
        item_type=body.item_type,
        interaction_type=body.interaction_type,
        duration=body.duration,
        source=body.source,
        position=body.position,
        category_slug=body.category_slug,
    )

    return ApiResponse(status="success", data=interaction.model_dump(mode="json"))


@router.get("/users/{user_id}/interactions", response_model=ApiResponse)
async def list_user_interactions(
    user_id: str,
    limit: int = Query(100, ge=1, le=500, description="Maximum interactions to return"),
    service: InteractionService = Depends(get_interaction_service),
):
    """Get a user's most recent interactions, newest first."""
    interactions = await service.get_user_interactions(user_id, limit=limit)

    return ApiResponse(
        status="success",
        data=[i.model_dump(mode="json") for i in interactions],
    )

"""User preference API endpoints."""

from fastapi import APIRouter, Depends

from okazje.dependencies import get_preference_service
from okazje.schemas.common import ApiResponse
from okazje.schemas.preferences import FavoriteCategoryRequest, UserPreferencesUpdate
from okazje.services.preference_service import PreferenceService

router = APIRouter()


@router.get("/users/{user_id}/preferences", response_model=ApiResponse)
async def get_preferences(
    user_id: str,
    service: PreferenceService = Depends(get_preference_service),
):
    """Get the user's preferences, created with defaults on first access."""
    prefs = await service.get_user_preferences(user_id)
    return ApiResponse(status="success", data=prefs.model_dump(mode="json"))


@router.patch("/users/{user_id}/preferences", response_model=ApiResponse)
async def update_preferences(
    user_id: str,
    body: UserPreferencesUpdate,
    service: PreferenceService = Depends(get_preference_service),
):
    """Update some of the user's preferences."""
    prefs = await service.update_user_preferences(user_id, body)
    return ApiResponse(status="success", data=prefs.model_dump(mode="json"))


@router.post("/users/{user_id}/preferences/favorite-categories", response_model=ApiResponse)
async def add_favorite_category(
    user_id: str,
    body: FavoriteCategoryRequest,
    service: PreferenceService = Depends(get_preference_service),
):
    """Add a category to the user's favorites."""
    prefs = await service.add_favorite_category(user_id, body.category_slug)
    return ApiResponse(status="success", data=prefs.model_dump(mode="json"))


@router.delete(
    "/users/{user_id}/preferences/favorite-categories/{category_slug}",
    response_model=ApiResponse,
)
async def remove_favorite_category(
    user_id: str,
    category_slug: str,
    service: PreferenceService = Depends(get_preference_service),
):
    """Remove a category from the user's favorites."""
    prefs = await service.remove_favorite_category(user_id, category_slug)
    return ApiResponse(status="success", data=prefs.model_dump(mode="json"))

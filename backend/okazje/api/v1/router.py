"""API v1 router -- aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from okazje.api.v1 import feed, health, interactions, preferences, segments

api_v1_router = APIRouter()

api_v1_router.include_router(health.router, tags=["health"])
api_v1_router.include_router(interactions.router, tags=["interactions"])
api_v1_router.include_router(segments.router, tags=["segments"])
api_v1_router.include_router(preferences.router, tags=["preferences"])
api_v1_router.include_router(feed.router, tags=["feed"])

"""Pydantic schemas for the Okazje+ API.

Domain records exchanged between services and repositories live here too,
so the services never depend on ORM classes.
"""

from okazje.schemas.common import ApiResponse, ErrorDetail, ErrorResponse
from okazje.schemas.feed import FeedRecommendationRecord, RecommendationMetadata
from okazje.schemas.health import HealthCheckResponse
from okazje.schemas.interaction import (
    CatalogItem,
    Interaction,
    InteractionCreateRequest,
    InteractionMetadata,
    ResolvedDeal,
    ResolvedProduct,
)
from okazje.schemas.preferences import (
    FavoriteCategoryRequest,
    FeedPreferences,
    NotificationSettings,
    UserPreferencesRecord,
    UserPreferencesUpdate,
)
from okazje.schemas.segment import (
    BehaviorScoreRecord,
    BehaviorScores,
    SegmentCharacteristics,
    UserSegmentRecord,
)

__all__ = [
    # Common
    "ApiResponse",
    "ErrorDetail",
    "ErrorResponse",
    "HealthCheckResponse",
    # Interactions
    "CatalogItem",
    "Interaction",
    "InteractionCreateRequest",
    "InteractionMetadata",
    "ResolvedDeal",
    "ResolvedProduct",
    # Segmentation
    "BehaviorScoreRecord",
    "BehaviorScores",
    "SegmentCharacteristics",
    "UserSegmentRecord",
    # Preferences
    "FavoriteCategoryRequest",
    "FeedPreferences",
    "NotificationSettings",
    "UserPreferencesRecord",
    "UserPreferencesUpdate",
    # Feed
    "FeedRecommendationRecord",
    "RecommendationMetadata",
]

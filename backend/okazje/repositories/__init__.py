"""Storage adapters for interactions, catalog items, scores, segments, preferences and feeds."""

from okazje.repositories.base import (
    BehaviorScoreStore,
    CatalogStore,
    InteractionStore,
    PreferenceStore,
    RecommendationStore,
    SegmentStore,
)
from okazje.repositories.catalog_repository import SqlCatalogRepository
from okazje.repositories.interaction_repository import SqlInteractionRepository
from okazje.repositories.preference_repository import SqlPreferenceRepository
from okazje.repositories.recommendation_repository import SqlRecommendationRepository
from okazje.repositories.score_repository import SqlBehaviorScoreRepository
from okazje.repositories.segment_repository import SqlSegmentRepository

__all__ = [
    "BehaviorScoreStore",
    "CatalogStore",
    "InteractionStore",
    "PreferenceStore",
    "RecommendationStore",
    "SegmentStore",
    "SqlBehaviorScoreRepository",
    "SqlCatalogRepository",
    "SqlInteractionRepository",
    "SqlPreferenceRepository",
    "SqlRecommendationRepository",
    "SqlSegmentRepository",
]

"""Services module for business logic.

Services receive their stores through the constructor; the factories in
``okazje.dependencies`` wire them to SQLAlchemy repositories per request.
"""

from okazje.services.behavior_scoring import BehaviorScorer, compute_behavior_scores
from okazje.services.cache_service import CacheService, get_cache_service
from okazje.services.feed_service import FeedService, calculate_item_similarity
from okazje.services.interaction_service import InteractionService
from okazje.services.item_resolver import ItemResolver
from okazje.services.preference_service import PreferenceService
from okazje.services.segmentation import SegmentClassifier, choose_segment

__all__ = [
    "BehaviorScorer",
    "compute_behavior_scores",
    "CacheService",
    "get_cache_service",
    "FeedService",
    "calculate_item_similarity",
    "InteractionService",
    "ItemResolver",
    "PreferenceService",
    "SegmentClassifier",
    "choose_segment",
]

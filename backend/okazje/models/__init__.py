"""SQLAlchemy models for Okazje+.

All models are imported here so metadata.create_all and Alembic can discover them.
"""

from okazje.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from okazje.models.deal import Deal
from okazje.models.product import Product
from okazje.models.user_interaction import UserInteraction
from okazje.models.user_behavior_score import UserBehaviorScore
from okazje.models.user_segment import UserSegment
from okazje.models.user_preferences import UserPreferences
from okazje.models.feed_recommendation import FeedRecommendation

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "Deal",
    "Product",
    "UserInteraction",
    "UserBehaviorScore",
    "UserSegment",
    "UserPreferences",
    "FeedRecommendation",
]

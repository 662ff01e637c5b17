"""User segmentation engine.

Classifies users into exactly one of six behavioral segments from their
behavior scores, and caches the assignment for a fixed freshness window
(7 days by default). Stale or missing segments are recomputed on the next
request; every recomputation bumps the segment's version.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple

import structlog

from okazje.config import settings
from okazje.core.exceptions import ValidationError
from okazje.repositories.base import InteractionStore, SegmentStore
from okazje.schemas.segment import (
    SEGMENT_TYPES,
    BehaviorScores,
    SegmentCharacteristics,
    UserSegmentRecord,
)
from okazje.services.behavior_scoring import BehaviorScorer, average_price, top_categories
from okazje.services.cache_service import SEGMENT_DISTRIBUTION_KEY, CacheService
from okazje.services.item_resolver import ItemResolver

logger = structlog.get_logger(__name__)

DOMINANT_SCORE_THRESHOLD = 70
DEAL_HUNTER_THRESHOLD = 75
IMPULSE_BUYER_THRESHOLD = 80
DEFAULT_CONFIDENCE = 0.5
MAX_CATEGORY_PREFERENCES = 5

# Segment assigned when a given score is the highest one and reaches the threshold
DOMINANT_SCORE_SEGMENTS: Dict[str, str] = {
    "price_sensitivity": "price_sensitive",
    "speed_priority": "fast_delivery",
    "brand_loyalty": "brand_lover",
    "quality_focus": "quality_seeker",
}

DEAL_PREFERENCES: Dict[str, List[str]] = {
    "price_sensitive": ["discount", "coupon"],
    "fast_delivery": ["free_shipping", "fast_delivery"],
    "brand_lover": ["brand"],
    "quality_seeker": ["quality", "rating"],
    "deal_hunter": ["discount", "trending"],
    "impulse_buyer": ["discount", "trending"],
}


def choose_segment(scores: BehaviorScores) -> Tuple[str, float]:
    """Apply the segment decision rule; the first matching branch wins.

    Returns:
        Tuple of (segment_type, confidence in [0, 1])
    """
    values = scores.model_dump()
    # sorted() is stable, so ties keep field declaration order
    top_name, top_value = sorted(values.items(), key=lambda entry: entry[1], reverse=True)[0]

    if top_name in DOMINANT_SCORE_SEGMENTS and top_value >= DOMINANT_SCORE_THRESHOLD:
        return DOMINANT_SCORE_SEGMENTS[top_name], top_value / 100

    engagement = scores.engagement_level
    conversion = scores.conversion_potential
    if engagement >= DEAL_HUNTER_THRESHOLD and conversion >= DEAL_HUNTER_THRESHOLD:
        return "deal_hunter", (engagement + conversion) / 200
    if conversion >= IMPULSE_BUYER_THRESHOLD:
        return "impulse_buyer", conversion / 100

    return "deal_hunter", DEFAULT_CONFIDENCE


def activity_level(engagement_level: int) -> str:
    if engagement_level < 30:
        return "low"
    if engagement_level < 70:
        return "medium"
    return "high"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SegmentClassifier:
    """Assigns, caches and reports user segments."""

    def __init__(
        self,
        interactions: InteractionStore,
        segments: SegmentStore,
        scorer: BehaviorScorer,
        resolver: ItemResolver,
        cache: Optional[CacheService] = None,
        ttl_days: Optional[int] = None,
        category_window: Optional[int] = None,
        price_window: Optional[int] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """Initialize the classifier.

        Args:
            interactions: Source of the user's interaction log
            segments: Store of per-user segment records
            scorer: Provides (and computes when missing) behavior scores
            resolver: Catalog lookups for the average price point
            cache: Optional Redis cache for the distribution counts
            ttl_days: Freshness window of a stored segment (default from settings)
            category_window: Interactions inspected for category preferences
            price_window: Most recent interactions inspected for the price point
            clock: Returns the current UTC time
        """
        self.interactions = interactions
        self.segments = segments
        self.scorer = scorer
        self.resolver = resolver
        self.cache = cache
        self.ttl = timedelta(days=ttl_days or settings.SEGMENT_TTL_DAYS)
        self.category_window = category_window or settings.CATEGORY_INTERACTION_WINDOW
        self.price_window = price_window or settings.PRICE_POINT_WINDOW
        self.clock = clock
        self.distribution_stale = False
        self.logger = logger.bind(service="segment_classifier")

    async def get_user_segment(
        self, user_id: str, force_recalculate: bool = False
    ) -> UserSegmentRecord:
        """Return the user's segment, reclassifying when it is missing or stale.

        Args:
            user_id: User to look up
            force_recalculate: Skip the cached segment even if it is fresh

        Returns:
            The cached record unchanged on a cache hit, otherwise a new record
        """
        if not force_recalculate:
            existing = await self.segments.get(user_id)
            if existing is not None:
                age = self.clock() - existing.updated_at
                if age < self.ttl:
                    self.logger.debug(
                        "segment_cache_hit",
                        user_id=user_id,
                        age_days=round(age.total_seconds() / 86400, 2),
                    )
                    return existing

                self.logger.info(
                    "segment_stale",
                    user_id=user_id,
                    age_days=round(age.total_seconds() / 86400, 2),
                )

        return await self.classify_user_segment(user_id)

    async def classify_user_segment(self, user_id: str) -> UserSegmentRecord:
        """Classify the user from scratch and store the result with a bumped version.

        Raises:
            UpstreamUnavailableError: If any store read or write fails. No
                partial segment is stored or returned in that case.
        """
        self.logger.info("classifying_user_segment", user_id=user_id)

        try:
            score_record = await self.scorer.get_or_calculate(user_id)
            scores = score_record.scores
            segment_type, confidence = choose_segment(scores)

            window = max(self.category_window, self.price_window)
            recent = await self.interactions.list_recent(user_id, window)
            categories = top_categories(recent[: self.category_window], MAX_CATEGORY_PREFERENCES)

            priced_items = await self.resolver.resolve_items(recent[: self.price_window])
            avg_price_point = average_price(priced_items)

            previous = await self.segments.get(user_id)
            version = previous.version + 1 if previous is not None else 1

            now = self.clock()
            segment = UserSegmentRecord(
                id=user_id,
                user_id=user_id,
                segment_type=segment_type,
                confidence=confidence,
                characteristics=SegmentCharacteristics(
                    avg_price_point=avg_price_point,
                    category_preferences=categories,
                    deal_preferences=list(DEAL_PREFERENCES[segment_type]),
                    activity_level=activity_level(scores.engagement_level),
                    conversion_rate=scores.conversion_potential / 100,
                ),
                generated_at=now,
                updated_at=now,
                version=version,
            )
            await self.segments.put(segment)
        except Exception as e:
            self.logger.error("segment_classification_failed", user_id=user_id, error=str(e))
            raise

        self.distribution_stale = True

        self.logger.info(
            "user_segment_classified",
            user_id=user_id,
            segment_type=segment_type,
            confidence=confidence,
            version=version,
        )
        return segment

    async def invalidate_distribution_cache(self) -> None:
        """Drop the cached distribution if this classifier wrote any segment.

        Call after the segment writes are committed; otherwise a concurrent
        reader could cache the pre-commit counts again.
        """
        if not self.distribution_stale:
            return
        self.distribution_stale = False
        if self.cache is not None:
            await self.cache.delete(SEGMENT_DISTRIBUTION_KEY)

    async def get_users_by_segment(
        self, segment_type: str, limit: int = 100
    ) -> List[UserSegmentRecord]:
        """List segment records of one type, highest confidence first."""
        if segment_type not in SEGMENT_TYPES:
            raise ValidationError("segment_type", f"'{segment_type}' is not a known segment")
        if limit < 1:
            raise ValidationError("limit", "must be at least 1")
        return await self.segments.list_by_type(segment_type, limit)

    async def get_segment_distribution(self) -> Dict[str, int]:
        """Count users per segment; every segment type is present, possibly as 0."""
        if self.cache is not None:
            cached = await self.cache.get_json(SEGMENT_DISTRIBUTION_KEY)
            if cached is not None:
                return cached

        counts = await self.segments.count_by_type()
        distribution = {segment_type: counts.get(segment_type, 0) for segment_type in SEGMENT_TYPES}

        if self.cache is not None:
            await self.cache.set_json(
                SEGMENT_DISTRIBUTION_KEY,
                distribution,
                ttl=settings.SEGMENT_DISTRIBUTION_CACHE_TTL,
            )
        return distribution

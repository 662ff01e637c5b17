"""Personalized feed recommendations.

Content-based recommendations come from the user's favorite categories;
whatever room is left is filled with the hottest approved deals:

    - content:  top deals of each favorite category, score 0.8
    - trending: top approved deals overall, score 0.6

Generated recommendations are stored and stay valid for 24 hours by default.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

import structlog

from okazje.config import settings
from okazje.core.exceptions import NotFoundError, ValidationError
from okazje.repositories.base import CatalogStore, RecommendationStore
from okazje.schemas.feed import FeedRecommendationRecord, RecommendationMetadata
from okazje.schemas.interaction import CatalogItem, ResolvedDeal
from okazje.services.item_resolver import ItemResolver
from okazje.services.preference_service import PreferenceService

logger = structlog.get_logger(__name__)

CONTENT_SCORE = 0.8
TRENDING_SCORE = 0.6
TRENDING_REASON = "Popularne w tej chwili"
MAX_FEED_SIZE = 100
ACTIVE_RECOMMENDATIONS_LIMIT = 20
MIN_ACTIVE_RECOMMENDATIONS = 5  # Below this the feed regenerates recommendations


def calculate_item_similarity(first, second) -> float:
    """Category overlap of two items in [0, 1].

    Matching main categories and matching sub categories are worth 0.5 each.
    Items that both lack a category count as matching on it.
    """
    similarity = 0.0
    if getattr(first, "main_category_slug", None) == getattr(second, "main_category_slug", None):
        similarity += 0.5
    if getattr(first, "sub_category_slug", None) == getattr(second, "sub_category_slug", None):
        similarity += 0.5
    return similarity


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FeedService:
    """Generates, serves and tracks feed recommendations."""

    def __init__(
        self,
        preferences: PreferenceService,
        catalog: CatalogStore,
        recommendations: RecommendationStore,
        resolver: ItemResolver,
        ttl_hours: Optional[int] = None,
        category_limit: Optional[int] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """Initialize the feed service.

        Args:
            preferences: Source of the user's favorite categories
            catalog: Deal listings ranked by temperature
            recommendations: Store generated recommendations are written to
            resolver: Turns recommendations into catalog items for the feed
            ttl_hours: Lifetime of a generated recommendation (default from settings)
            category_limit: Deals taken per favorite category (default from settings)
            clock: Returns the current UTC time
        """
        self.preferences = preferences
        self.catalog = catalog
        self.recommendations = recommendations
        self.resolver = resolver
        self.ttl = timedelta(hours=ttl_hours or settings.FEED_RECOMMENDATION_TTL_HOURS)
        self.category_limit = category_limit or settings.FEED_CATEGORY_DEAL_LIMIT
        self.clock = clock
        self.logger = logger.bind(service="feed_service")

    def _recommendation(
        self,
        user_id: str,
        deal: ResolvedDeal,
        now: datetime,
        score: float,
        reason: str,
        algorithm: str,
        metadata: Optional[RecommendationMetadata] = None,
    ) -> FeedRecommendationRecord:
        return FeedRecommendationRecord(
            user_id=user_id,
            item_id=deal.item_id,
            item_type="deal",
            score=score,
            reason=reason,
            algorithm=algorithm,
            generated_at=now,
            expires_at=now + self.ttl,
            metadata=metadata,
        )

    async def generate_feed_recommendations(
        self, user_id: str, count: int = 20
    ) -> List[FeedRecommendationRecord]:
        """Build and store up to ``count`` fresh recommendations.

        Favorite categories are visited in the order the user added them.
        Trending deals never repeat a deal already recommended from a category.
        """
        if count < 1 or count > MAX_FEED_SIZE:
            raise ValidationError("count", f"must be between 1 and {MAX_FEED_SIZE}")

        prefs = await self.preferences.get_user_preferences(user_id)
        now = self.clock()
        generated: List[FeedRecommendationRecord] = []

        for category_slug in prefs.favorite_categories:
            deals = await self.catalog.list_top_deals(self.category_limit, category_slug=category_slug)
            for deal in deals:
                generated.append(
                    self._recommendation(
                        user_id,
                        deal,
                        now,
                        score=CONTENT_SCORE,
                        reason=f"Z Twojej ulubionej kategorii: {category_slug}",
                        algorithm="content",
                        metadata=RecommendationMetadata(
                            matching_categories=[category_slug],
                            confidence=CONTENT_SCORE,
                        ),
                    )
                )

        if len(generated) < count:
            seen = {rec.item_id for rec in generated}
            for deal in await self.catalog.list_top_deals(count):
                if len(generated) >= count:
                    break
                if deal.item_id in seen:
                    continue
                generated.append(
                    self._recommendation(
                        user_id,
                        deal,
                        now,
                        score=TRENDING_SCORE,
                        reason=TRENDING_REASON,
                        algorithm="trending",
                    )
                )

        generated = generated[:count]
        await self.recommendations.add_many(generated)

        self.logger.info(
            "feed_recommendations_generated",
            user_id=user_id,
            total=len(generated),
            content=sum(1 for rec in generated if rec.algorithm == "content"),
        )
        return generated

    async def get_feed_recommendations(self, user_id: str) -> List[FeedRecommendationRecord]:
        """Unexpired recommendations not yet shown, soonest expiry first."""
        if not user_id:
            raise ValidationError("user_id", "must not be empty")
        return await self.recommendations.list_active(
            user_id, self.clock(), ACTIVE_RECOMMENDATIONS_LIMIT
        )

    async def mark_recommendation_shown(self, recommendation_id: uuid.UUID) -> None:
        if not await self.recommendations.mark(recommendation_id, "shown"):
            raise NotFoundError("Recommendation", str(recommendation_id))

    async def mark_recommendation_clicked(self, recommendation_id: uuid.UUID) -> None:
        if not await self.recommendations.mark(recommendation_id, "clicked"):
            raise NotFoundError("Recommendation", str(recommendation_id))

    async def get_personalized_feed(
        self, user_id: str, count: int = 20, include_recommendations: bool = True
    ) -> List[CatalogItem]:
        """Catalog items for the user's feed, topped up with trending deals.

        Stored recommendations are reused while at least five are active;
        otherwise a new batch is generated first. Recommended items that no
        longer resolve are skipped.
        """
        if count < 1 or count > MAX_FEED_SIZE:
            raise ValidationError("count", f"must be between 1 and {MAX_FEED_SIZE}")

        items: List[CatalogItem] = []
        if include_recommendations:
            active = await self.get_feed_recommendations(user_id)
            if len(active) < MIN_ACTIVE_RECOMMENDATIONS:
                self.logger.debug("feed_regenerating", user_id=user_id, active=len(active))
                active = await self.generate_feed_recommendations(user_id, count)
            items = await self.resolver.resolve_items(active[:count])

        if len(items) < count:
            seen = {(item.item_type, item.item_id) for item in items}
            for deal in await self.catalog.list_top_deals(count):
                if len(items) >= count:
                    break
                if (deal.item_type, deal.item_id) not in seen:
                    items.append(deal)

        return items

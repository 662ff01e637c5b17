"""Behavior scoring engine.

Turns a window of a user's recent interactions into six normalized 0-100
scores used by the segment classifier:

    - price_sensitivity:    cheaper items interacted with -> higher score
    - brand_loyalty:        fewer distinct merchants -> higher score
    - quality_focus:        share of interactions on products (vs deals)
    - speed_priority:       fixed at 50, no shipping data is tracked
    - engagement_level:     weighted activity volume
    - conversion_potential: click-through rate (clicks per view)

Scores are recomputed from scratch on every run and overwrite the user's
previous record.
"""

import math
from collections import Counter
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

import structlog

from okazje.config import settings
from okazje.repositories.base import BehaviorScoreStore, InteractionStore
from okazje.schemas.interaction import CatalogItem, Interaction
from okazje.schemas.segment import BehaviorScoreRecord, BehaviorScores
from okazje.services.item_resolver import ItemResolver

logger = structlog.get_logger(__name__)

NEUTRAL_SCORE = 50

# Engagement weight per interaction type; favorites are tracked but not weighted
ENGAGEMENT_WEIGHTS: dict[str, int] = {
    "view": 1,
    "click": 3,
    "vote": 2,
    "comment": 4,
    "share": 5,
}
ENGAGEMENT_DIVISOR = 2
QUALITY_FOCUS_MULTIPLIER = 120
CONVERSION_MULTIPLIER = 200
PRICE_SENSITIVITY_DIVISOR = 10


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    """Limit ``value`` to ``[low, high]``. Idempotent."""
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def neutral_scores() -> BehaviorScores:
    """Scores assigned to a user with no recorded interactions."""
    return BehaviorScores(
        price_sensitivity=NEUTRAL_SCORE,
        brand_loyalty=NEUTRAL_SCORE,
        quality_focus=NEUTRAL_SCORE,
        speed_priority=NEUTRAL_SCORE,
        engagement_level=0,
        conversion_potential=NEUTRAL_SCORE,
    )


def average_price(items: Sequence[CatalogItem]) -> Optional[float]:
    """Mean of the positive prices among ``items``, or None if there are none."""
    prices = [item.price for item in items if item.price]
    if not prices:
        return None
    return sum(prices) / len(prices)


def compute_behavior_scores(
    interactions: Sequence[Interaction],
    items: Sequence[CatalogItem],
) -> BehaviorScores:
    """Derive the six behavior scores.

    Args:
        interactions: The user's interaction window
        items: Catalog items resolved from those interactions (misses excluded)

    Returns:
        BehaviorScores with every value an integer in [0, 100]
    """
    if not interactions:
        return neutral_scores()

    counts = Counter(i.interaction_type for i in interactions)
    total = len(interactions)

    avg_price = average_price(items)
    if avg_price is None:
        price_sensitivity = NEUTRAL_SCORE
    else:
        price_sensitivity = clamp(100 - avg_price / PRICE_SENSITIVITY_DIVISOR)

    merchants = {item.merchant for item in items if item.item_type == "deal" and item.merchant}
    if merchants:
        brand_loyalty = clamp((1 / len(merchants)) * 100)
    else:
        brand_loyalty = NEUTRAL_SCORE

    product_interactions = sum(1 for i in interactions if i.item_type == "product")
    quality_focus = clamp((product_interactions / total) * QUALITY_FOCUS_MULTIPLIER)

    speed_priority = NEUTRAL_SCORE

    weighted = sum(weight * counts[kind] for kind, weight in ENGAGEMENT_WEIGHTS.items())
    engagement_level = clamp(weighted / ENGAGEMENT_DIVISOR)

    views = counts["view"]
    if views == 0:
        conversion_potential = NEUTRAL_SCORE
    else:
        conversion_potential = clamp((counts["click"] / views) * CONVERSION_MULTIPLIER)

    return BehaviorScores(
        price_sensitivity=round_half_up(price_sensitivity),
        brand_loyalty=round_half_up(brand_loyalty),
        quality_focus=round_half_up(quality_focus),
        speed_priority=round_half_up(speed_priority),
        engagement_level=round_half_up(engagement_level),
        conversion_potential=round_half_up(conversion_potential),
    )


def top_categories(interactions: Sequence[Interaction], limit: int = 5) -> List[str]:
    """Most frequent category slugs in ``interactions``.

    Interactions arrive newest first, so on equal counts the category seen
    most recently ranks higher.
    """
    frequency: Counter[str] = Counter()
    for interaction in interactions:
        slug = interaction.metadata.category_slug
        if slug:
            frequency[slug] += 1
    ranked = sorted(frequency.items(), key=lambda entry: entry[1], reverse=True)
    return [slug for slug, _ in ranked[:limit]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BehaviorScorer:
    """Computes and stores behavior scores for a user."""

    def __init__(
        self,
        interactions: InteractionStore,
        scores: BehaviorScoreStore,
        resolver: ItemResolver,
        window: Optional[int] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """Initialize the scorer.

        Args:
            interactions: Source of the user's interaction log
            scores: Store the computed record is written to
            resolver: Catalog lookups for price / merchant data
            window: Number of recent interactions to score (default from settings)
            clock: Returns the current UTC time
        """
        self.interactions = interactions
        self.scores = scores
        self.resolver = resolver
        self.window = window or settings.BEHAVIOR_INTERACTION_WINDOW
        self.clock = clock
        self.logger = logger.bind(service="behavior_scorer")

    async def calculate_behavior_scores(self, user_id: str) -> BehaviorScoreRecord:
        """Recompute the user's scores and overwrite the stored record.

        Raises:
            UpstreamUnavailableError: If the interaction list or score store fails
        """
        self.logger.info("calculating_behavior_scores", user_id=user_id)

        try:
            interactions = await self.interactions.list_recent(user_id, self.window)
            items = await self.resolver.resolve_items(interactions) if interactions else []
            scores = compute_behavior_scores(interactions, items)

            now = self.clock()
            record = BehaviorScoreRecord(
                user_id=user_id,
                scores=scores,
                based_on_interactions=len(interactions),
                calculated_at=now,
                updated_at=now,
            )
            await self.scores.put(record)
        except Exception as e:
            self.logger.error("behavior_scores_failed", user_id=user_id, error=str(e))
            raise

        self.logger.info(
            "behavior_scores_calculated",
            user_id=user_id,
            interactions=len(interactions),
            resolved_items=len(items),
            **scores.model_dump(),
        )
        return record

    async def get_or_calculate(self, user_id: str) -> BehaviorScoreRecord:
        """Return the stored scores, computing them first if the user has none."""
        record = await self.scores.get(user_id)
        if record is not None:
            return record
        return await self.calculate_behavior_scores(user_id)

"""SQLAlchemy-backed behavior score store."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from okazje.models.user_behavior_score import UserBehaviorScore
from okazje.repositories.base import ensure_utc, upstream_guard
from okazje.schemas.segment import BehaviorScoreRecord, BehaviorScores


class SqlBehaviorScoreRepository:
    """One row per user in ``user_behavior_scores``; ``put`` overwrites it."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: str) -> Optional[BehaviorScoreRecord]:
        with upstream_guard("behavior score store"):
            row = await self.db.get(UserBehaviorScore, user_id)
        if row is None:
            return None
        return BehaviorScoreRecord(
            user_id=row.user_id,
            scores=BehaviorScores(
                price_sensitivity=row.price_sensitivity,
                brand_loyalty=row.brand_loyalty,
                quality_focus=row.quality_focus,
                speed_priority=row.speed_priority,
                engagement_level=row.engagement_level,
                conversion_potential=row.conversion_potential,
            ),
            based_on_interactions=row.based_on_interactions,
            calculated_at=ensure_utc(row.calculated_at),
            updated_at=ensure_utc(row.updated_at),
        )

    async def put(self, record: BehaviorScoreRecord) -> None:
        row = UserBehaviorScore(
            user_id=record.user_id,
            based_on_interactions=record.based_on_interactions,
            calculated_at=record.calculated_at,
            updated_at=record.updated_at,
            **record.scores.model_dump(),
        )
        with upstream_guard("behavior score store"):
            await self.db.merge(row)
            await self.db.flush()

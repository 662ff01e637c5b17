"""SQLAlchemy-backed feed recommendation store."""

import uuid
from datetime import datetime
from typing import List

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from okazje.models.feed_recommendation import FeedRecommendation
from okazje.repositories.base import ensure_utc, upstream_guard
from okazje.schemas.feed import FeedRecommendationRecord, RecommendationMetadata

MARKABLE_FLAGS = ("shown", "clicked")


def _to_record(row: FeedRecommendation) -> FeedRecommendationRecord:
    metadata = None
    if row.confidence is not None:
        metadata = RecommendationMetadata(
            matching_categories=list(row.matching_categories or []),
            confidence=row.confidence,
        )
    return FeedRecommendationRecord(
        id=row.id,
        user_id=row.user_id,
        item_id=row.item_id,
        item_type=row.item_type,
        score=row.score,
        reason=row.reason,
        algorithm=row.algorithm,
        generated_at=ensure_utc(row.generated_at),
        expires_at=ensure_utc(row.expires_at),
        shown=row.shown,
        clicked=row.clicked,
        metadata=metadata,
    )


class SqlRecommendationRepository:
    """Appends and queries rows of ``feed_recommendations``."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add_many(self, records: List[FeedRecommendationRecord]) -> None:
        rows = [
            FeedRecommendation(
                id=record.id,
                user_id=record.user_id,
                item_id=record.item_id,
                item_type=record.item_type,
                score=record.score,
                reason=record.reason,
                algorithm=record.algorithm,
                generated_at=record.generated_at,
                expires_at=record.expires_at,
                shown=record.shown,
                clicked=record.clicked,
                matching_categories=record.metadata.matching_categories if record.metadata else None,
                confidence=record.metadata.confidence if record.metadata else None,
            )
            for record in records
        ]
        with upstream_guard("recommendation store"):
            self.db.add_all(rows)
            await self.db.flush()

    async def list_active(
        self, user_id: str, now: datetime, limit: int
    ) -> List[FeedRecommendationRecord]:
        stmt = (
            select(FeedRecommendation)
            .where(
                FeedRecommendation.user_id == user_id,
                FeedRecommendation.expires_at > now,
                FeedRecommendation.shown.is_(False),
            )
            .order_by(
                FeedRecommendation.expires_at.asc(),
                FeedRecommendation.score.desc(),
                FeedRecommendation.id,
            )
            .limit(limit)
        )
        with upstream_guard("recommendation store"):
            result = await self.db.execute(stmt)
            rows = result.scalars().all()
        return [_to_record(row) for row in rows]

    async def mark(self, recommendation_id: uuid.UUID, flag: str) -> bool:
        if flag not in MARKABLE_FLAGS:
            raise ValueError(f"Cannot mark recommendation as {flag!r}")

        stmt = (
            update(FeedRecommendation)
            .where(FeedRecommendation.id == recommendation_id)
            .values({flag: True})
        )
        with upstream_guard("recommendation store"):
            result = await self.db.execute(stmt)
        return result.rowcount > 0

"""SQLAlchemy-backed user segment store."""

from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from okazje.models.user_segment import UserSegment
from okazje.repositories.base import ensure_utc, upstream_guard
from okazje.schemas.segment import SegmentCharacteristics, UserSegmentRecord


def _to_record(row: UserSegment) -> UserSegmentRecord:
    return UserSegmentRecord(
        id=row.user_id,
        user_id=row.user_id,
        segment_type=row.segment_type,
        confidence=row.confidence,
        characteristics=SegmentCharacteristics(
            avg_price_point=row.avg_price_point,
            category_preferences=list(row.category_preferences or []),
            deal_preferences=list(row.deal_preferences or []),
            activity_level=row.activity_level,
            conversion_rate=row.conversion_rate,
        ),
        generated_at=ensure_utc(row.generated_at),
        updated_at=ensure_utc(row.updated_at),
        version=row.version,
    )


class SqlSegmentRepository:
    """One row per user in ``user_segments``; ``put`` replaces it wholesale."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: str) -> Optional[UserSegmentRecord]:
        with upstream_guard("segment store"):
            row = await self.db.get(UserSegment, user_id)
        return _to_record(row) if row is not None else None

    async def put(self, record: UserSegmentRecord) -> None:
        traits = record.characteristics
        row = UserSegment(
            user_id=record.user_id,
            segment_type=record.segment_type,
            confidence=record.confidence,
            avg_price_point=traits.avg_price_point,
            category_preferences=list(traits.category_preferences),
            deal_preferences=list(traits.deal_preferences),
            activity_level=traits.activity_level,
            conversion_rate=traits.conversion_rate,
            generated_at=record.generated_at,
            updated_at=record.updated_at,
            version=record.version,
        )
        with upstream_guard("segment store"):
            await self.db.merge(row)
            await self.db.flush()

    async def list_by_type(self, segment_type: str, limit: int) -> List[UserSegmentRecord]:
        stmt = (
            select(UserSegment)
            .where(UserSegment.segment_type == segment_type)
            .order_by(UserSegment.confidence.desc(), UserSegment.user_id)
            .limit(limit)
        )
        with upstream_guard("segment store"):
            result = await self.db.execute(stmt)
            rows = result.scalars().all()
        return [_to_record(row) for row in rows]

    async def count_by_type(self) -> Dict[str, int]:
        stmt = select(UserSegment.segment_type, func.count()).group_by(UserSegment.segment_type)
        with upstream_guard("segment store"):
            result = await self.db.execute(stmt)
            rows = result.all()
        return {segment_type: count for segment_type, count in rows}

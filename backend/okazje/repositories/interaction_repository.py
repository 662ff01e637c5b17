"""SQLAlchemy-backed interaction store."""

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from okazje.models.user_interaction import UserInteraction
from okazje.repositories.base import ensure_utc, upstream_guard
from okazje.schemas.interaction import Interaction, InteractionMetadata


def _to_interaction(row: UserInteraction) -> Interaction:
    return Interaction(
        id=row.id,
        user_id=row.user_id,
        item_id=row.item_id,
        item_type=row.item_type,
        interaction_type=row.interaction_type,
        timestamp=ensure_utc(row.timestamp),
        duration=row.duration,
        metadata=InteractionMetadata(
            source=row.source,
            position=row.position,
            category_slug=row.category_slug,
        ),
    )


class SqlInteractionRepository:
    """Reads and appends rows of ``user_interactions``."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_recent(self, user_id: str, limit: int) -> List[Interaction]:
        stmt = (
            select(UserInteraction)
            .where(UserInteraction.user_id == user_id)
            # id breaks timestamp ties so repeated reads return the same order
            .order_by(UserInteraction.timestamp.desc(), UserInteraction.id.desc())
            .limit(limit)
        )
        with upstream_guard("interaction store"):
            result = await self.db.execute(stmt)
            rows = result.scalars().all()
        return [_to_interaction(row) for row in rows]

    async def add(self, interaction: Interaction) -> Interaction:
        row = UserInteraction(
            user_id=interaction.user_id,
            item_id=interaction.item_id,
            item_type=interaction.item_type,
            interaction_type=interaction.interaction_type,
            timestamp=interaction.timestamp,
            duration=interaction.duration,
            source=interaction.metadata.source,
            position=interaction.metadata.position,
            category_slug=interaction.metadata.category_slug,
        )
        with upstream_guard("interaction store"):
            self.db.add(row)
            await self.db.flush()
        return _to_interaction(row)

"""SQLAlchemy-backed user preference store."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from okazje.models.user_preferences import UserPreferences
from okazje.repositories.base import ensure_utc, upstream_guard
from okazje.schemas.preferences import (
    FeedPreferences,
    NotificationSettings,
    UserPreferencesRecord,
)


class SqlPreferenceRepository:
    """One row per user in ``user_preferences``; ``put`` replaces it."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: str) -> Optional[UserPreferencesRecord]:
        with upstream_guard("preference store"):
            row = await self.db.get(UserPreferences, user_id)
        if row is None:
            return None
        return UserPreferencesRecord(
            user_id=row.user_id,
            favorite_categories=list(row.favorite_categories or []),
            subscribed_topics=list(row.subscribed_topics or []),
            notification_settings=NotificationSettings(**(row.notification_settings or {})),
            feed_preferences=FeedPreferences(**(row.feed_preferences or {})),
            updated_at=ensure_utc(row.updated_at),
        )

    async def put(self, record: UserPreferencesRecord) -> None:
        row = UserPreferences(
            user_id=record.user_id,
            favorite_categories=list(record.favorite_categories),
            subscribed_topics=list(record.subscribed_topics),
            notification_settings=record.notification_settings.model_dump(),
            feed_preferences=record.feed_preferences.model_dump(),
            updated_at=record.updated_at,
        )
        with upstream_guard("preference store"):
            await self.db.merge(row)
            await self.db.flush()

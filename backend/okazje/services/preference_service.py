"""User preference service: favorite categories, notification and feed settings."""

from datetime import datetime, timezone
from typing import Callable

import structlog

from okazje.core.exceptions import ValidationError
from okazje.repositories.base import PreferenceStore
from okazje.schemas.preferences import UserPreferencesRecord, UserPreferencesUpdate

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PreferenceService:
    """Reads and updates a user's explicit preferences."""

    def __init__(self, store: PreferenceStore, clock: Callable[[], datetime] = _utcnow):
        self.store = store
        self.clock = clock
        self.logger = logger.bind(service="preference_service")

    async def get_user_preferences(self, user_id: str) -> UserPreferencesRecord:
        """Return the user's preferences, storing the defaults on first access."""
        if not user_id:
            raise ValidationError("user_id", "must not be empty")

        existing = await self.store.get(user_id)
        if existing is not None:
            return existing

        defaults = UserPreferencesRecord(user_id=user_id, updated_at=self.clock())
        await self.store.put(defaults)
        self.logger.info("preferences_created", user_id=user_id)
        return defaults

    async def update_user_preferences(
        self, user_id: str, updates: UserPreferencesUpdate
    ) -> UserPreferencesRecord:
        """Merge the fields set in ``updates`` into the stored preferences.

        Nested settings objects are replaced as a whole, not merged key by key.
        """
        current = await self.get_user_preferences(user_id)

        data = current.model_dump()
        data.update(updates.model_dump(exclude_unset=True, exclude_none=True))
        data["updated_at"] = self.clock()
        updated = UserPreferencesRecord.model_validate(data)

        await self.store.put(updated)
        self.logger.info(
            "preferences_updated",
            user_id=user_id,
            fields=sorted(updates.model_fields_set),
        )
        return updated

    async def add_favorite_category(self, user_id: str, category_slug: str) -> UserPreferencesRecord:
        """Append a favorite category; adding one twice is a no-op."""
        if not category_slug:
            raise ValidationError("category_slug", "must not be empty")

        prefs = await self.get_user_preferences(user_id)
        if category_slug in prefs.favorite_categories:
            return prefs

        return await self.update_user_preferences(
            user_id,
            UserPreferencesUpdate(favorite_categories=prefs.favorite_categories + [category_slug]),
        )

    async def remove_favorite_category(self, user_id: str, category_slug: str) -> UserPreferencesRecord:
        prefs = await self.get_user_preferences(user_id)
        remaining = [slug for slug in prefs.favorite_categories if slug != category_slug]
        return await self.update_user_preferences(
            user_id, UserPreferencesUpdate(favorite_categories=remaining)
        )

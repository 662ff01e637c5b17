"""Tests for the user preference service."""

import pytest

from okazje.core.exceptions import ValidationError
from okazje.schemas.preferences import FeedPreferences, NotificationSettings, UserPreferencesUpdate

from conftest import NOW


class TestPreferenceService:
    """Tests for PreferenceService."""

    async def test_first_read_stores_defaults(self, preference_service, stores):
        prefs = await preference_service.get_user_preferences("user-1")

        assert prefs.favorite_categories == []
        assert prefs.subscribed_topics == []
        assert prefs.notification_settings == NotificationSettings()
        assert prefs.notification_settings.weekly_digest is True
        assert prefs.feed_preferences.show_personalized is True
        assert prefs.feed_preferences.include_followed_users is False
        assert prefs.feed_preferences.sort_by == "trending"
        assert prefs.updated_at == NOW
        assert stores.preferences.records["user-1"] == prefs

    async def test_second_read_does_not_rewrite(self, preference_service, stores, clock):
        first = await preference_service.get_user_preferences("user-1")
        clock.advance(hours=1)

        second = await preference_service.get_user_preferences("user-1")

        assert second == first
        assert stores.preferences.puts == 1

    async def test_empty_user_id_is_rejected(self, preference_service):
        with pytest.raises(ValidationError):
            await preference_service.get_user_preferences("")

    async def test_update_merges_only_given_fields(self, preference_service, clock):
        await preference_service.add_favorite_category("user-1", "gry")
        clock.advance(minutes=5)

        updated = await preference_service.update_user_preferences(
            "user-1",
            UserPreferencesUpdate(feed_preferences=FeedPreferences(sort_by="newest")),
        )

        assert updated.favorite_categories == ["gry"]
        assert updated.feed_preferences.sort_by == "newest"
        assert updated.updated_at == clock.now

    async def test_update_creates_missing_preferences(self, preference_service, stores):
        updated = await preference_service.update_user_preferences(
            "user-2",
            UserPreferencesUpdate(notification_settings=NotificationSettings(weekly_digest=False)),
        )

        assert updated.notification_settings.weekly_digest is False
        assert updated.notification_settings.price_alerts is True
        assert stores.preferences.records["user-2"] == updated


class TestFavoriteCategories:
    """Tests for adding and removing favorite categories."""

    async def test_add_keeps_insertion_order(self, preference_service):
        await preference_service.add_favorite_category("user-1", "gry")
        prefs = await preference_service.add_favorite_category("user-1", "audio")

        assert prefs.favorite_categories == ["gry", "audio"]

    async def test_adding_twice_is_noop(self, preference_service, stores):
        await preference_service.add_favorite_category("user-1", "gry")
        puts = stores.preferences.puts

        prefs = await preference_service.add_favorite_category("user-1", "gry")

        assert prefs.favorite_categories == ["gry"]
        assert stores.preferences.puts == puts

    async def test_empty_slug_is_rejected(self, preference_service):
        with pytest.raises(ValidationError):
            await preference_service.add_favorite_category("user-1", "")

    async def test_remove(self, preference_service):
        await preference_service.add_favorite_category("user-1", "gry")
        await preference_service.add_favorite_category("user-1", "audio")

        prefs = await preference_service.remove_favorite_category("user-1", "gry")

        assert prefs.favorite_categories == ["audio"]

    async def test_remove_unknown_category_leaves_list(self, preference_service):
        await preference_service.add_favorite_category("user-1", "gry")

        prefs = await preference_service.remove_favorite_category("user-1", "agd")

        assert prefs.favorite_categories == ["gry"]

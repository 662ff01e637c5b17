"""Tests for the user segmentation engine."""

from unittest.mock import AsyncMock

import pytest

from okazje.core.exceptions import UpstreamUnavailableError, ValidationError
from okazje.schemas.interaction import ResolvedDeal, ResolvedProduct
from okazje.schemas.segment import SEGMENT_TYPES, BehaviorScoreRecord, BehaviorScores
from okazje.services.cache_service import SEGMENT_DISTRIBUTION_KEY
from okazje.services.segmentation import (
    DEAL_PREFERENCES,
    activity_level,
    choose_segment,
)

from conftest import NOW


def _scores(**overrides) -> BehaviorScores:
    values = {
        "price_sensitivity": 40,
        "brand_loyalty": 40,
        "quality_focus": 40,
        "speed_priority": 40,
        "engagement_level": 40,
        "conversion_potential": 40,
    }
    values.update(overrides)
    return BehaviorScores(**values)


def _seed_scores(stores, user_id: str = "user-1", **overrides) -> None:
    stores.scores.records[user_id] = BehaviorScoreRecord(
        user_id=user_id,
        scores=_scores(**overrides),
        based_on_interactions=10,
        calculated_at=NOW,
        updated_at=NOW,
    )


# ============================================================================
# TESTS: DECISION RULE
# ============================================================================

class TestChooseSegment:
    """Tests for the ordered segment decision rule."""

    @pytest.mark.parametrize(
        "overrides, expected_type, expected_confidence",
        [
            ({"price_sensitivity": 85}, "price_sensitive", 0.85),
            ({"speed_priority": 70}, "fast_delivery", 0.70),
            ({"brand_loyalty": 100}, "brand_lover", 1.0),
            ({"quality_focus": 72}, "quality_seeker", 0.72),
            ({"engagement_level": 80, "conversion_potential": 80}, "deal_hunter", 0.8),
            ({"engagement_level": 90, "conversion_potential": 76}, "deal_hunter", 0.83),
            ({"conversion_potential": 85}, "impulse_buyer", 0.85),
            ({}, "deal_hunter", 0.5),
        ],
    )
    def test_decision_table(self, overrides, expected_type, expected_confidence):
        segment_type, confidence = choose_segment(_scores(**overrides))

        assert segment_type == expected_type
        assert confidence == pytest.approx(expected_confidence)

    def test_dominant_score_below_threshold_falls_through(self):
        assert choose_segment(_scores(price_sensitivity=69)) == ("deal_hunter", 0.5)

    def test_tie_goes_to_first_declared_score(self):
        segment_type, _ = choose_segment(_scores(price_sensitivity=90, brand_loyalty=90))

        assert segment_type == "price_sensitive"

    def test_high_score_that_is_not_top_does_not_qualify(self):
        # Conversion outranks price sensitivity, so the price branch is skipped
        segment_type, confidence = choose_segment(
            _scores(price_sensitivity=80, conversion_potential=95)
        )

        assert segment_type == "impulse_buyer"
        assert confidence == pytest.approx(0.95)

    def test_engagement_top_without_conversion_is_default(self):
        assert choose_segment(_scores(engagement_level=95, conversion_potential=60)) == (
            "deal_hunter",
            0.5,
        )

    @pytest.mark.parametrize(
        "engagement, expected",
        [(0, "low"), (29, "low"), (30, "medium"), (69, "medium"), (70, "high"), (100, "high")],
    )
    def test_activity_level_thresholds(self, engagement, expected):
        assert activity_level(engagement) == expected


# ============================================================================
# TESTS: SEGMENT CLASSIFIER
# ============================================================================

class TestSegmentClassifier:
    """Tests for classification, caching and versioning."""

    async def test_new_user_is_classified_with_version_one(self, classifier, stores):
        segment = await classifier.get_user_segment("user-1")

        assert segment.id == "user-1"
        assert segment.segment_type == "deal_hunter"
        assert segment.confidence == 0.5
        assert segment.version == 1
        assert segment.characteristics.activity_level == "low"
        assert segment.characteristics.avg_price_point is None
        assert segment.characteristics.category_preferences == []
        assert stores.segments.records["user-1"] == segment
        assert "user-1" in stores.scores.records

    async def test_cached_segment_is_returned_unchanged(self, classifier, stores, clock):
        first = await classifier.get_user_segment("user-1")
        clock.advance(days=6, hours=23)

        second = await classifier.get_user_segment("user-1")

        assert second.model_dump_json() == first.model_dump_json()
        assert second.version == 1

    async def test_stale_segment_is_recomputed(self, classifier, clock):
        await classifier.get_user_segment("user-1")
        clock.advance(days=7)

        refreshed = await classifier.get_user_segment("user-1")

        assert refreshed.version == 2
        assert refreshed.updated_at == clock.now

    async def test_force_recalculate_always_bumps_version(self, classifier):
        versions = []
        for _ in range(3):
            segment = await classifier.get_user_segment("user-1", force_recalculate=True)
            versions.append(segment.version)

        assert versions == [1, 2, 3]

    @pytest.mark.parametrize("segment_type", SEGMENT_TYPES)
    async def test_deal_preferences_follow_segment_type(self, classifier, stores, segment_type):
        overrides = {
            "price_sensitive": {"price_sensitivity": 90},
            "fast_delivery": {"speed_priority": 90},
            "brand_lover": {"brand_loyalty": 90},
            "quality_seeker": {"quality_focus": 90},
            "deal_hunter": {"engagement_level": 80, "conversion_potential": 80},
            "impulse_buyer": {"conversion_potential": 90},
        }[segment_type]
        _seed_scores(stores, **overrides)

        segment = await classifier.classify_user_segment("user-1")

        assert segment.segment_type == segment_type
        assert segment.characteristics.deal_preferences == DEAL_PREFERENCES[segment_type]

    async def test_views_only_user_has_low_activity(self, classifier, make_interaction):
        for n in range(10):
            make_interaction(item_id=f"d{n}", minutes_ago=n)

        segment = await classifier.get_user_segment("user-1")

        assert segment.characteristics.activity_level == "low"
        assert segment.characteristics.conversion_rate == 0.0

    async def test_engagement_and_conversion_make_deal_hunter(self, classifier, stores):
        _seed_scores(stores, engagement_level=80, conversion_potential=80)

        segment = await classifier.get_user_segment("user-1")

        assert segment.segment_type == "deal_hunter"
        assert segment.confidence == pytest.approx(0.8)
        assert segment.characteristics.activity_level == "high"
        assert segment.characteristics.conversion_rate == pytest.approx(0.8)

    async def test_stored_scores_are_reused(self, classifier, stores, make_interaction):
        _seed_scores(stores, price_sensitivity=75)
        make_interaction(interaction_type="share")

        segment = await classifier.classify_user_segment("user-1")

        assert segment.segment_type == "price_sensitive"
        assert stores.scores.puts == 0

    async def test_category_preferences_top_five(self, classifier, make_interaction):
        slugs = ["elektronika"] * 4 + ["gry"] * 3 + ["dom", "moda", "sport", "auto", "zdrowie"]
        for n, slug in enumerate(slugs):
            make_interaction(item_id=f"d{n}", minutes_ago=n, category_slug=slug)

        segment = await classifier.classify_user_segment("user-1")

        assert segment.characteristics.category_preferences == [
            "elektronika",
            "gry",
            "dom",
            "moda",
            "sport",
        ]

    async def test_avg_price_point_uses_latest_twenty(self, classifier, stores, make_interaction):
        for n in range(25):
            item_id = f"d{n}"
            stores.catalog.add(ResolvedDeal(item_id=item_id, price=100.0 if n < 20 else 9000.0))
            make_interaction(item_id=item_id, minutes_ago=n)
        stores.catalog.add(ResolvedProduct(item_id="p1", price=400.0))

        segment = await classifier.classify_user_segment("user-1")

        assert segment.characteristics.avg_price_point == pytest.approx(100.0)

    async def test_segment_store_failure_propagates(self, classifier, stores):
        stores.segments.fail_writes = True

        with pytest.raises(UpstreamUnavailableError):
            await classifier.get_user_segment("user-1")

        assert stores.segments.records == {}

    async def test_interaction_store_failure_returns_no_segment(self, classifier, stores):
        _seed_scores(stores)
        stores.interactions.fail = True

        with pytest.raises(UpstreamUnavailableError):
            await classifier.classify_user_segment("user-1")

        assert "user-1" not in stores.segments.records


# ============================================================================
# TESTS: ADMIN QUERIES
# ============================================================================

class TestSegmentReporting:
    """Tests for users-by-segment and the distribution counts."""

    async def test_users_by_segment_orders_by_confidence(self, classifier, stores):
        _seed_scores(stores, "anna", price_sensitivity=75)
        _seed_scores(stores, "bartek", price_sensitivity=95)
        _seed_scores(stores, "celina", brand_loyalty=90)
        for user_id in ("anna", "bartek", "celina"):
            await classifier.classify_user_segment(user_id)

        result = await classifier.get_users_by_segment("price_sensitive", limit=10)

        assert [s.user_id for s in result] == ["bartek", "anna"]

    async def test_users_by_unknown_segment_is_rejected(self, classifier):
        with pytest.raises(ValidationError):
            await classifier.get_users_by_segment("bargain_king")

    async def test_distribution_includes_every_segment(self, classifier, stores):
        _seed_scores(stores, "anna", quality_focus=88)
        await classifier.classify_user_segment("anna")
        await classifier.classify_user_segment("bartek")

        distribution = await classifier.get_segment_distribution()

        assert set(distribution) == set(SEGMENT_TYPES)
        assert distribution["quality_seeker"] == 1
        assert distribution["deal_hunter"] == 1
        assert sum(distribution.values()) == 2

    async def test_distribution_served_from_cache(self, classifier, stores):
        cached = {segment_type: 3 for segment_type in SEGMENT_TYPES}
        classifier.cache = AsyncMock()
        classifier.cache.get_json.return_value = cached

        distribution = await classifier.get_segment_distribution()

        assert distribution == cached
        assert stores.segments.counted == 0
        classifier.cache.set_json.assert_not_awaited()

    async def test_distribution_cache_miss_populates_cache(self, classifier, stores):
        classifier.cache = AsyncMock()
        classifier.cache.get_json.return_value = None

        distribution = await classifier.get_segment_distribution()

        assert stores.segments.counted == 1
        classifier.cache.set_json.assert_awaited_once()
        key, value = classifier.cache.set_json.await_args.args
        assert key == SEGMENT_DISTRIBUTION_KEY
        assert value == distribution

    async def test_classification_defers_cache_invalidation(self, classifier):
        classifier.cache = AsyncMock()

        await classifier.classify_user_segment("user-1")

        classifier.cache.delete.assert_not_awaited()
        assert classifier.distribution_stale is True

        await classifier.invalidate_distribution_cache()

        classifier.cache.delete.assert_awaited_once_with(SEGMENT_DISTRIBUTION_KEY)
        assert classifier.distribution_stale is False

    async def test_invalidation_without_writes_is_noop(self, classifier):
        classifier.cache = AsyncMock()
        classifier.cache.get_json.return_value = None

        await classifier.get_segment_distribution()
        await classifier.invalidate_distribution_cache()

        classifier.cache.delete.assert_not_awaited()

    async def test_failed_write_leaves_cache_alone(self, classifier, stores):
        classifier.cache = AsyncMock()
        stores.segments.fail_writes = True

        with pytest.raises(UpstreamUnavailableError):
            await classifier.classify_user_segment("user-1")
        await classifier.invalidate_distribution_cache()

        classifier.cache.delete.assert_not_awaited()

"""Tests for interaction tracking."""

import pytest

from okazje.core.exceptions import UpstreamUnavailableError, ValidationError
from okazje.services.interaction_service import InteractionService


@pytest.fixture
def service(stores, clock) -> InteractionService:
    return InteractionService(stores.interactions, clock=clock)


class TestInteractionService:
    """Tests for InteractionService."""

    async def test_record_interaction_sets_timestamp_and_metadata(self, service, stores, clock):
        interaction = await service.record_interaction(
            user_id="user-1",
            item_id="deal-42",
            item_type="deal",
            interaction_type="click",
            duration=12,
            source="homepage",
            position=3,
            category_slug="elektronika",
        )

        assert interaction.timestamp == clock.now
        assert interaction.metadata.source == "homepage"
        assert interaction.metadata.position == 3
        assert interaction.metadata.category_slug == "elektronika"
        assert stores.interactions.rows == [interaction]

    async def test_interactions_listed_newest_first(self, service, clock):
        await service.record_interaction("user-1", "d1", "deal", "view")
        clock.advance(minutes=1)
        await service.record_interaction("user-1", "p1", "product", "favorite")
        clock.advance(minutes=1)
        await service.record_interaction("user-2", "d1", "deal", "view")

        interactions = await service.get_user_interactions("user-1", limit=10)

        assert [i.item_id for i in interactions] == ["p1", "d1"]

    @pytest.mark.parametrize(
        "kwargs, field",
        [
            ({"user_id": ""}, "user_id"),
            ({"item_id": ""}, "item_id"),
            ({"item_type": "coupon"}, "item_type"),
            ({"interaction_type": "purchase"}, "interaction_type"),
        ],
    )
    async def test_invalid_input_is_rejected(self, service, stores, kwargs, field):
        params = {
            "user_id": "user-1",
            "item_id": "deal-1",
            "item_type": "deal",
            "interaction_type": "view",
        }
        params.update(kwargs)

        with pytest.raises(ValidationError) as exc_info:
            await service.record_interaction(**params)

        assert exc_info.value.field == field
        assert stores.interactions.rows == []

    async def test_limit_out_of_range_is_rejected(self, service):
        with pytest.raises(ValidationError):
            await service.get_user_interactions("user-1", limit=0)

    async def test_store_failure_propagates(self, service, stores):
        stores.interactions.fail = True

        with pytest.raises(UpstreamUnavailableError):
            await service.record_interaction("user-1", "d1", "deal", "view")

"""Pytest configuration and shared fixtures."""

import asyncio
import os

# Must be set before okazje.config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEBUG", "false")

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
from types import SimpleNamespace

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from okazje.core.exceptions import ItemResolutionError, UpstreamUnavailableError
from okazje.models import Base
from okazje.schemas.feed import FeedRecommendationRecord
from okazje.schemas.interaction import Interaction, InteractionMetadata, ResolvedDeal
from okazje.schemas.preferences import UserPreferencesRecord
from okazje.schemas.segment import BehaviorScoreRecord, UserSegmentRecord
from okazje.services.behavior_scoring import BehaviorScorer
from okazje.services.feed_service import FeedService
from okazje.services.item_resolver import ItemResolver
from okazje.services.preference_service import PreferenceService
from okazje.services.segmentation import SegmentClassifier

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# IN-MEMORY STORES
# ============================================================================

class FakeInteractionStore:
    def __init__(self):
        self.rows: List[Interaction] = []
        self.fail = False

    async def list_recent(self, user_id: str, limit: int) -> List[Interaction]:
        if self.fail:
            raise UpstreamUnavailableError("interaction store", "connection refused")
        rows = sorted(
            (r for r in self.rows if r.user_id == user_id),
            key=lambda r: r.timestamp,
            reverse=True,
        )
        return rows[:limit]

    async def add(self, interaction: Interaction) -> Interaction:
        if self.fail:
            raise UpstreamUnavailableError("interaction store", "connection refused")
        self.rows.append(interaction)
        return interaction


class FakeCatalogStore:
    def __init__(self):
        self.items: Dict[tuple, object] = {}
        self.broken: set = set()
        self.lookups: List[tuple] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.listings: List[tuple] = []

    def add(self, item) -> None:
        self.items[(item.item_type, item.item_id)] = item

    def add_deal(
        self,
        item_id: str,
        temperature: int,
        category_slug: Optional[str] = None,
        status: str = "approved",
        price: Optional[float] = None,
    ) -> ResolvedDeal:
        deal = ResolvedDeal(item_id=item_id, title=f"Deal {item_id}", price=price)
        self.add(deal)
        self.listings.append((temperature, category_slug, status, deal))
        return deal

    async def list_top_deals(self, limit: int, category_slug: Optional[str] = None) -> List[ResolvedDeal]:
        matching = [
            (temperature, deal)
            for temperature, slug, status, deal in self.listings
            if status == "approved" and (category_slug is None or slug == category_slug)
        ]
        matching.sort(key=lambda entry: entry[0], reverse=True)
        return [deal for _, deal in matching[:limit]]

    async def get_item(self, item_type: str, item_id: str):
        self.lookups.append((item_type, item_id))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if item_id in self.broken:
                raise ItemResolutionError(item_type, item_id, "timeout")
            return self.items.get((item_type, item_id))
        finally:
            self.in_flight -= 1


class FakeScoreStore:
    def __init__(self):
        self.records: Dict[str, BehaviorScoreRecord] = {}
        self.puts = 0

    async def get(self, user_id: str) -> Optional[BehaviorScoreRecord]:
        return self.records.get(user_id)

    async def put(self, record: BehaviorScoreRecord) -> None:
        self.puts += 1
        self.records[record.user_id] = record


class FakeSegmentStore:
    def __init__(self):
        self.records: Dict[str, UserSegmentRecord] = {}
        self.fail_writes = False
        self.counted = 0

    async def get(self, user_id: str) -> Optional[UserSegmentRecord]:
        return self.records.get(user_id)

    async def put(self, record: UserSegmentRecord) -> None:
        if self.fail_writes:
            raise UpstreamUnavailableError("segment store", "read-only replica")
        self.records[record.user_id] = record

    async def list_by_type(self, segment_type: str, limit: int) -> List[UserSegmentRecord]:
        matching = [r for r in self.records.values() if r.segment_type == segment_type]
        matching.sort(key=lambda r: r.confidence, reverse=True)
        return matching[:limit]

    async def count_by_type(self) -> Dict[str, int]:
        self.counted += 1
        counts: Dict[str, int] = {}
        for record in self.records.values():
            counts[record.segment_type] = counts.get(record.segment_type, 0) + 1
        return counts


class FakePreferenceStore:
    def __init__(self):
        self.records: Dict[str, UserPreferencesRecord] = {}
        self.puts = 0

    async def get(self, user_id: str) -> Optional[UserPreferencesRecord]:
        return self.records.get(user_id)

    async def put(self, record: UserPreferencesRecord) -> None:
        self.puts += 1
        self.records[record.user_id] = record


class FakeRecommendationStore:
    def __init__(self):
        self.records: Dict[object, FeedRecommendationRecord] = {}
        self.fail = False

    async def add_many(self, records: List[FeedRecommendationRecord]) -> None:
        if self.fail:
            raise UpstreamUnavailableError("recommendation store", "connection refused")
        for record in records:
            self.records[record.id] = record

    async def list_active(self, user_id: str, now: datetime, limit: int) -> List[FeedRecommendationRecord]:
        active = [
            r for r in self.records.values()
            if r.user_id == user_id and r.expires_at > now and not r.shown
        ]
        active.sort(key=lambda r: (r.expires_at, -r.score))
        return active[:limit]

    async def mark(self, recommendation_id, flag: str) -> bool:
        record = self.records.get(recommendation_id)
        if record is None:
            return False
        self.records[recommendation_id] = record.model_copy(update={flag: True})
        return True


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def stores() -> SimpleNamespace:
    return SimpleNamespace(
        interactions=FakeInteractionStore(),
        catalog=FakeCatalogStore(),
        scores=FakeScoreStore(),
        segments=FakeSegmentStore(),
        preferences=FakePreferenceStore(),
        recommendations=FakeRecommendationStore(),
    )


@pytest.fixture
def make_interaction(stores):
    """Add an interaction to the fake store; later ``minutes_ago`` means older."""

    def _make(
        item_id: str = "deal-1",
        item_type: str = "deal",
        interaction_type: str = "view",
        user_id: str = "user-1",
        minutes_ago: int = 0,
        category_slug: Optional[str] = None,
    ) -> Interaction:
        interaction = Interaction(
            user_id=user_id,
            item_id=item_id,
            item_type=item_type,
            interaction_type=interaction_type,
            timestamp=NOW - timedelta(minutes=minutes_ago),
            metadata=InteractionMetadata(category_slug=category_slug),
        )
        stores.interactions.rows.append(interaction)
        return interaction

    return _make


@pytest.fixture
def scorer(stores, clock) -> BehaviorScorer:
    return BehaviorScorer(
        interactions=stores.interactions,
        scores=stores.scores,
        resolver=ItemResolver(stores.catalog, concurrency=4),
        window=100,
        clock=clock,
    )


@pytest.fixture
def classifier(stores, scorer, clock) -> SegmentClassifier:
    return SegmentClassifier(
        interactions=stores.interactions,
        segments=stores.segments,
        scorer=scorer,
        resolver=ItemResolver(stores.catalog, concurrency=4),
        ttl_days=7,
        category_window=50,
        price_window=20,
        clock=clock,
    )


@pytest.fixture
def preference_service(stores, clock) -> PreferenceService:
    return PreferenceService(stores.preferences, clock=clock)


@pytest.fixture
def feed_service(stores, preference_service, clock) -> FeedService:
    return FeedService(
        preferences=preference_service,
        catalog=stores.catalog,
        recommendations=stores.recommendations,
        resolver=ItemResolver(stores.catalog, concurrency=4),
        ttl_hours=24,
        category_limit=5,
        clock=clock,
    )


@pytest_asyncio.fixture
async def test_db():
    """Create an in-memory SQLite database for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    SessionLocal = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with SessionLocal() as session:
        yield session

    await engine.dispose()

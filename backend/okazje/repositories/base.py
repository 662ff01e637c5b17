"""Store contracts consumed by the personalization services.

Services receive these through their constructors. The SQLAlchemy
implementations live next to this module; tests substitute in-memory fakes.
"""

import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from okazje.core.exceptions import UpstreamUnavailableError
from okazje.schemas.feed import FeedRecommendationRecord
from okazje.schemas.interaction import CatalogItem, Interaction, ResolvedDeal
from okazje.schemas.preferences import UserPreferencesRecord
from okazje.schemas.segment import BehaviorScoreRecord, UserSegmentRecord


class InteractionStore(Protocol):
    async def list_recent(self, user_id: str, limit: int) -> List[Interaction]:
        """Return up to ``limit`` interactions of the user, newest first."""
        ...

    async def add(self, interaction: Interaction) -> Interaction:
        ...


class CatalogStore(Protocol):
    async def get_item(self, item_type: str, item_id: str) -> Optional[CatalogItem]:
        """Return the resolved item, or None when it does not exist."""
        ...

    async def list_top_deals(
        self, limit: int, category_slug: Optional[str] = None
    ) -> List[ResolvedDeal]:
        """Return approved deals, hottest first, optionally from one main category."""
        ...


class BehaviorScoreStore(Protocol):
    async def get(self, user_id: str) -> Optional[BehaviorScoreRecord]:
        ...

    async def put(self, record: BehaviorScoreRecord) -> None:
        ...


class SegmentStore(Protocol):
    async def get(self, user_id: str) -> Optional[UserSegmentRecord]:
        ...

    async def put(self, record: UserSegmentRecord) -> None:
        ...

    async def list_by_type(self, segment_type: str, limit: int) -> List[UserSegmentRecord]:
        """Return segments of one type, highest confidence first."""
        ...

    async def count_by_type(self) -> Dict[str, int]:
        ...


class PreferenceStore(Protocol):
    async def get(self, user_id: str) -> Optional[UserPreferencesRecord]:
        ...

    async def put(self, record: UserPreferencesRecord) -> None:
        ...


class RecommendationStore(Protocol):
    async def add_many(self, records: List[FeedRecommendationRecord]) -> None:
        ...

    async def list_active(
        self, user_id: str, now: datetime, limit: int
    ) -> List[FeedRecommendationRecord]:
        """Return unexpired, unshown recommendations: soonest expiry first, then highest score."""
        ...

    async def mark(self, recommendation_id: uuid.UUID, flag: str) -> bool:
        """Set ``flag`` ("shown" or "clicked") to True. Returns False if the id is unknown."""
        ...


@contextmanager
def upstream_guard(store: str) -> Iterator[None]:
    """Translate database driver failures into UpstreamUnavailableError."""
    try:
        yield
    except SQLAlchemyError as e:
        raise UpstreamUnavailableError(store, str(e)) from e


def ensure_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything we store is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

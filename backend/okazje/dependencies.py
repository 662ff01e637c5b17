"""FastAPI dependency injection providers."""

from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from okazje.db.session import async_session_factory
from okazje.repositories import (
    SqlBehaviorScoreRepository,
    SqlCatalogRepository,
    SqlInteractionRepository,
    SqlPreferenceRepository,
    SqlRecommendationRepository,
    SqlSegmentRepository,
)
from okazje.services.behavior_scoring import BehaviorScorer
from okazje.services.cache_service import CacheService, get_cache
from okazje.services.feed_service import FeedService
from okazje.services.interaction_service import InteractionService
from okazje.services.item_resolver import ItemResolver
from okazje.services.preference_service import PreferenceService
from okazje.services.segmentation import SegmentClassifier


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session for request-scoped usage.

    The session is automatically committed on success or rolled back on error.
    Always closed after the request completes.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def build_behavior_scorer(db: AsyncSession) -> BehaviorScorer:
    """Wire a BehaviorScorer to the SQLAlchemy stores of one session."""
    return BehaviorScorer(
        interactions=SqlInteractionRepository(db),
        scores=SqlBehaviorScoreRepository(db),
        resolver=ItemResolver(SqlCatalogRepository(db)),
    )


def build_segment_classifier(db: AsyncSession, cache: CacheService | None = None) -> SegmentClassifier:
    """Wire a SegmentClassifier (and its scorer) to the stores of one session."""
    resolver = ItemResolver(SqlCatalogRepository(db))
    interactions = SqlInteractionRepository(db)
    scorer = BehaviorScorer(
        interactions=interactions,
        scores=SqlBehaviorScoreRepository(db),
        resolver=resolver,
    )
    return SegmentClassifier(
        interactions=interactions,
        segments=SqlSegmentRepository(db),
        scorer=scorer,
        resolver=resolver,
        cache=cache,
    )


async def get_interaction_service(db: AsyncSession = Depends(get_db)) -> InteractionService:
    return InteractionService(SqlInteractionRepository(db))


async def get_behavior_scorer(db: AsyncSession = Depends(get_db)) -> BehaviorScorer:
    return build_behavior_scorer(db)


def build_feed_service(db: AsyncSession) -> FeedService:
    """Wire a FeedService to the stores of one session."""
    catalog = SqlCatalogRepository(db)
    return FeedService(
        preferences=PreferenceService(SqlPreferenceRepository(db)),
        catalog=catalog,
        recommendations=SqlRecommendationRepository(db),
        resolver=ItemResolver(catalog),
    )


async def get_segment_classifier(
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
) -> AsyncGenerator[SegmentClassifier, None]:
    """Yield a classifier; the distribution cache is dropped only after segment writes commit."""
    classifier = build_segment_classifier(db, cache)
    yield classifier
    if classifier.distribution_stale:
        await db.commit()
        await classifier.invalidate_distribution_cache()


async def get_preference_service(db: AsyncSession = Depends(get_db)) -> PreferenceService:
    return PreferenceService(SqlPreferenceRepository(db))


async def get_feed_service(db: AsyncSession = Depends(get_db)) -> FeedService:
    return build_feed_service(db)

"""Recompute behavior scores and segments for a set of users.

Useful after changing scoring thresholds or backfilling interactions.

Usage:
    python scripts/reclassify_segments.py user-1 user-2
    python scripts/reclassify_segments.py --segment deal_hunter --limit 200
"""

import asyncio
import argparse
import sys
import os

# Add backend to path so we can import okazje modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from okazje.core.exceptions import OkazjeException
from okazje.core.logging import configure_logging
from okazje.db.session import async_session_factory
from okazje.dependencies import build_behavior_scorer, build_segment_classifier
from okazje.schemas.segment import SEGMENT_TYPES
from okazje.services.cache_service import get_cache_service


async def reclassify(user_ids: list[str], segment: str | None, limit: int) -> int:
    """Rescore and reclassify users; returns the number of failures."""
    failures = 0
    cache = get_cache_service()
    async with async_session_factory() as session:
        classifier = build_segment_classifier(session, cache)
        scorer = build_behavior_scorer(session)

        if segment:
            members = await classifier.get_users_by_segment(segment, limit=limit)
            user_ids = user_ids + [m.user_id for m in members]

        for user_id in dict.fromkeys(user_ids):
            try:
                await scorer.calculate_behavior_scores(user_id)
                result = await classifier.classify_user_segment(user_id)
                await session.commit()
                await classifier.invalidate_distribution_cache()
            except OkazjeException as e:
                await session.rollback()
                failures += 1
                print(f"  FAILED {user_id}: {e.message}")
                continue
            print(f"  {user_id:<24} {result.segment_type:<15} v{result.version}")

    await cache.close()

    return failures


def main():
    """Parse arguments and run the reclassification."""
    parser = argparse.ArgumentParser(
        description="Recompute behavior scores and segments",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("user_ids", nargs="*", help="User ids to reclassify")
    parser.add_argument(
        "--segment",
        choices=SEGMENT_TYPES,
        help="Also reclassify users currently in this segment",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=100,
        help="Maximum users taken from --segment (default: 100)",
    )
    args = parser.parse_args()

    if not args.user_ids and not args.segment:
        parser.error("give at least one user id or --segment")

    configure_logging("WARNING")
    failures = asyncio.run(reclassify(args.user_ids, args.segment, args.limit))
    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()

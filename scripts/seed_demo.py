"""Seed demo catalog items and interactions, then classify the demo users.

Creates a handful of deals and products plus three users with distinct
browsing patterns, so the segment dashboard has something to show. One
user also gets a favorite category and a generated feed.

Usage:
    python scripts/seed_demo.py
"""

import asyncio
import sys
import os
from decimal import Decimal

# Add backend to path so we can import okazje modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from okazje.db.session import async_session_factory, engine
from okazje.dependencies import build_feed_service, build_segment_classifier
from okazje.models import Base, Deal, Product
from okazje.repositories import SqlInteractionRepository
from okazje.services.interaction_service import InteractionService

DEALS = [
    {"title": "Kabel USB-C 2m -60%", "price": Decimal("19.99"), "merchant": "Allegro", "main_category_slug": "akcesoria", "sub_category_slug": "kable", "temperature": 120},
    {"title": "Powerbank 10000 mAh", "price": Decimal("49.00"), "merchant": "Allegro", "main_category_slug": "akcesoria", "sub_category_slug": "zasilanie", "temperature": 85},
    {"title": "Słuchawki JBL Tune 520BT", "price": Decimal("149.00"), "merchant": "Media Expert", "main_category_slug": "audio", "sub_category_slug": "sluchawki", "temperature": 240},
    {"title": "Gra Elden Ring PS5", "price": Decimal("129.00"), "merchant": "x-kom", "main_category_slug": "gry", "sub_category_slug": "ps5", "temperature": 310},
]

PRODUCTS = [
    {"name": "Ekspres DeLonghi Magnifica S", "brand": "DeLonghi", "price": Decimal("1299.99"), "category_slug": "agd"},
    {"name": "Odkurzacz Dyson V15", "brand": "Dyson", "price": Decimal("2899.00"), "category_slug": "agd"},
]


async def seed_demo():
    """Create tables, insert demo data and classify the demo users."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as session:
        deals = [Deal(**data) for data in DEALS]
        products = [Product(**data) for data in PRODUCTS]
        session.add_all(deals + products)
        await session.flush()

        tracking = InteractionService(SqlInteractionRepository(session))

        # Bargain hunter: cheap accessories from a single shop
        for deal in deals[:2]:
            for kind in ("view", "click", "click"):
                await tracking.record_interaction(
                    "demo-bargain", str(deal.id), "deal", kind, category_slug=deal.main_category_slug
                )

        # Quality seeker: browses premium appliances
        for product in products:
            for kind in ("view", "favorite", "comment"):
                await tracking.record_interaction(
                    "demo-quality", str(product.id), "product", kind, category_slug=product.category_slug
                )

        # Window shopper: lots of views, no clicks
        for deal in deals:
            await tracking.record_interaction(
                "demo-browser", str(deal.id), "deal", "view", category_slug=deal.main_category_slug
            )

        classifier = build_segment_classifier(session)
        for user_id in ("demo-bargain", "demo-quality", "demo-browser"):
            segment = await classifier.classify_user_segment(user_id)
            print(
                f"  {user_id:<14} -> {segment.segment_type:<15} "
                f"confidence={segment.confidence:.2f} activity={segment.characteristics.activity_level}"
            )

        distribution = await classifier.get_segment_distribution()

        feeds = build_feed_service(session)
        await feeds.preferences.add_favorite_category("demo-bargain", "akcesoria")
        recommendations = await feeds.generate_feed_recommendations("demo-bargain", count=4)
        await session.commit()

    print("\nSegment distribution:")
    for segment_type, count in distribution.items():
        print(f"  {segment_type:<15} {count}")

    print("\nFeed for demo-bargain:")
    for rec in recommendations:
        print(f"  {rec.algorithm:<9} score={rec.score:.1f}  {rec.reason}")


if __name__ == "__main__":
    asyncio.run(seed_demo())

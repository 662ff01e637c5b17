"""SQLAlchemy-backed catalog lookups for deals and products."""

import asyncio
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from okazje.core.exceptions import ItemResolutionError
from okazje.models.deal import Deal
from okazje.models.product import Product
from okazje.repositories.base import upstream_guard
from okazje.schemas.interaction import CatalogItem, ResolvedDeal, ResolvedProduct


def _price(value) -> Optional[float]:
    return float(value) if value is not None else None


class SqlCatalogRepository:
    """Resolves interaction item references to price / merchant data.

    An AsyncSession cannot run two statements at once, so lookups issued
    concurrently by the item resolver are serialized on a lock here.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self._lock = asyncio.Lock()

    async def get_item(self, item_type: str, item_id: str) -> Optional[CatalogItem]:
        try:
            key = uuid.UUID(item_id)
        except ValueError:
            raise ItemResolutionError(item_type, item_id, "malformed identifier")

        if item_type == "deal":
            stmt = select(Deal.title, Deal.price, Deal.merchant).where(Deal.id == key)
        elif item_type == "product":
            stmt = select(Product.name.label("title"), Product.price).where(Product.id == key)
        else:
            raise ItemResolutionError(item_type, item_id, "unknown item type")

        try:
            async with self._lock:
                result = await self.db.execute(stmt)
                row = result.one_or_none()
        except SQLAlchemyError as e:
            raise ItemResolutionError(item_type, item_id, str(e)) from e

        if row is None:
            return None

        if item_type == "deal":
            return ResolvedDeal(
                item_id=item_id, title=row.title, price=_price(row.price), merchant=row.merchant
            )
        return ResolvedProduct(item_id=item_id, title=row.title, price=_price(row.price))

    async def list_top_deals(
        self, limit: int, category_slug: Optional[str] = None
    ) -> List[ResolvedDeal]:
        """Approved deals ordered by temperature, hottest first."""
        stmt = (
            select(Deal.id, Deal.title, Deal.price, Deal.merchant)
            .where(Deal.status == "approved")
            .order_by(Deal.temperature.desc(), Deal.id)
            .limit(limit)
        )
        if category_slug is not None:
            stmt = stmt.where(Deal.main_category_slug == category_slug)

        with upstream_guard("catalog store"):
            async with self._lock:
                result = await self.db.execute(stmt)
                rows = result.all()

        return [
            ResolvedDeal(
                item_id=str(row.id),
                title=row.title,
                price=_price(row.price),
                merchant=row.merchant,
            )
            for row in rows
        ]

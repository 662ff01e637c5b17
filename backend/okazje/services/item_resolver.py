"""Best-effort catalog lookups for the items a user interacted with."""

import asyncio
from typing import List, Optional, Protocol, Sequence

import structlog

from okazje.config import settings
from okazje.repositories.base import CatalogStore
from okazje.schemas.interaction import CatalogItem

logger = structlog.get_logger(__name__)


class ItemReference(Protocol):
    """Anything pointing at a catalog item: interactions, feed recommendations."""

    item_type: str
    item_id: str


class ItemResolver:
    """Fans catalog lookups out with bounded concurrency.

    A lookup that raises or finds nothing is logged and dropped; it never
    aborts the batch or affects the other lookups.
    """

    def __init__(self, catalog: CatalogStore, concurrency: Optional[int] = None):
        self.catalog = catalog
        self.concurrency = max(1, concurrency or settings.ITEM_LOOKUP_CONCURRENCY)
        self.logger = logger.bind(service="item_resolver")

    async def resolve_items(self, interactions: Sequence[ItemReference]) -> List[CatalogItem]:
        """Resolve each interaction's item, preserving interaction order.

        Args:
            interactions: Interactions whose referenced items should be looked up

        Returns:
            Resolved items for the lookups that succeeded. Repeated references
            resolve once per interaction.
        """
        semaphore = asyncio.Semaphore(self.concurrency)

        async def _lookup(interaction: ItemReference) -> Optional[CatalogItem]:
            async with semaphore:
                try:
                    item = await self.catalog.get_item(interaction.item_type, interaction.item_id)
                except Exception as e:
                    self.logger.debug(
                        "item_lookup_failed",
                        item_type=interaction.item_type,
                        item_id=interaction.item_id,
                        error=str(e),
                    )
                    return None
            if item is None:
                self.logger.debug(
                    "item_not_found",
                    item_type=interaction.item_type,
                    item_id=interaction.item_id,
                )
            return item

        results = await asyncio.gather(*(_lookup(i) for i in interactions))
        return [item for item in results if item is not None]

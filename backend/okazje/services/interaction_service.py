"""Interaction tracking service."""

from datetime import datetime, timezone
from typing import Callable, List, Optional

import structlog

from okazje.core.exceptions import ValidationError
from okazje.repositories.base import InteractionStore
from okazje.schemas.interaction import (
    INTERACTION_TYPES,
    ITEM_TYPES,
    Interaction,
    InteractionMetadata,
)

logger = structlog.get_logger(__name__)

MAX_INTERACTIONS_PAGE = 500


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InteractionService:
    """Records and lists user interactions with deals and products."""

    def __init__(self, store: InteractionStore, clock: Callable[[], datetime] = _utcnow):
        self.store = store
        self.clock = clock
        self.logger = logger.bind(service="interaction_service")

    async def record_interaction(
        self,
        user_id: str,
        item_id: str,
        item_type: str,
        interaction_type: str,
        duration: Optional[int] = None,
        source: Optional[str] = None,
        position: Optional[int] = None,
        category_slug: Optional[str] = None,
    ) -> Interaction:
        """Append an interaction timestamped now.

        Raises:
            ValidationError: On an empty id or an unknown item / interaction type
        """
        if not user_id:
            raise ValidationError("user_id", "must not be empty")
        if not item_id:
            raise ValidationError("item_id", "must not be empty")
        if item_type not in ITEM_TYPES:
            raise ValidationError("item_type", f"must be one of {', '.join(ITEM_TYPES)}")
        if interaction_type not in INTERACTION_TYPES:
            raise ValidationError(
                "interaction_type", f"must be one of {', '.join(INTERACTION_TYPES)}"
            )

        interaction = Interaction(
            user_id=user_id,
            item_id=item_id,
            item_type=item_type,
            interaction_type=interaction_type,
            timestamp=self.clock(),
            duration=duration,
            metadata=InteractionMetadata(
                source=source,
                position=position,
                category_slug=category_slug,
            ),
        )
        saved = await self.store.add(interaction)

        self.logger.debug(
            "interaction_recorded",
            user_id=user_id,
            item_type=item_type,
            item_id=item_id,
            interaction_type=interaction_type,
        )
        return saved

    async def get_user_interactions(self, user_id: str, limit: int = 100) -> List[Interaction]:
        """Return the user's most recent interactions, newest first."""
        if not user_id:
            raise ValidationError("user_id", "must not be empty")
        if limit < 1 or limit > MAX_INTERACTIONS_PAGE:
            raise ValidationError("limit", f"must be between 1 and {MAX_INTERACTIONS_PAGE}")
        return await self.store.list_recent(user_id, limit)

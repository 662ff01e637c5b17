"""UserInteraction model: one tracked action of a user on a catalog item."""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Integer, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column

from okazje.models.base import Base, UUIDPrimaryKeyMixin


class UserInteraction(UUIDPrimaryKeyMixin, Base):
    """Immutable interaction log entry written by client-side tracking."""

    __tablename__ = "user_interactions"

    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    item_id: Mapped[str] = mapped_column(String(128), nullable=False)
    item_type: Mapped[str] = mapped_column(
        String(10), nullable=False,
        comment="'deal' or 'product'"
    )
    interaction_type: Mapped[str] = mapped_column(
        String(10), nullable=False,
        comment="'view', 'click', 'favorite', 'vote', 'comment' or 'share'"
    )
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True,
        comment="Time spent on the item in seconds"
    )

    # Tracking metadata
    source: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    position: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    category_slug: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        Index("idx_user_interactions_user_timestamp", "user_id", "timestamp"),
    )

    def __repr__(self) -> str:
        return f"<UserInteraction(user={self.user_id}, item={self.item_type}:{self.item_id}, type={self.interaction_type})>"

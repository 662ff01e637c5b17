"""FeedRecommendation model: a generated, expiring feed entry for a user."""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Float, Boolean, DateTime, Index
from sqlalchemy import JSON as JSONB
from sqlalchemy.orm import Mapped, mapped_column

from okazje.models.base import Base, UUIDPrimaryKeyMixin


class FeedRecommendation(UUIDPrimaryKeyMixin, Base):
    """A recommended catalog item, valid until ``expires_at``."""

    __tablename__ = "feed_recommendations"

    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    item_id: Mapped[str] = mapped_column(String(128), nullable=False)
    item_type: Mapped[str] = mapped_column(String(10), nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False, comment="0-1")
    reason: Mapped[str] = mapped_column(String(200), nullable=False, comment="User-facing explanation")
    algorithm: Mapped[str] = mapped_column(
        String(20), nullable=False,
        comment="'content' or 'trending'"
    )
    generated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Engagement tracking
    shown: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    clicked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Content-based metadata
    matching_categories: Mapped[Optional[list]] = mapped_column(JSONB, nullable=True)
    confidence: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    __table_args__ = (
        Index("idx_feed_recommendations_user_active", "user_id", "shown", "expires_at"),
    )

    def __repr__(self) -> str:
        return f"<FeedRecommendation(user={self.user_id}, item={self.item_type}:{self.item_id}, score={self.score})>"

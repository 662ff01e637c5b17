"""UserSegment model: the cached behavioral segment of a user."""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Integer, Float, DateTime, Index
from sqlalchemy import JSON as JSONB
from sqlalchemy.orm import Mapped, mapped_column

from okazje.models.base import Base


class UserSegment(Base):
    """One row per user; replaced wholesale with a bumped version on reclassification."""

    __tablename__ = "user_segments"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    segment_type: Mapped[str] = mapped_column(
        String(20), nullable=False,
        comment="price_sensitive, fast_delivery, brand_lover, deal_hunter, quality_seeker, impulse_buyer"
    )
    confidence: Mapped[float] = mapped_column(Float, nullable=False, comment="0-1")

    # Characteristics
    avg_price_point: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    category_preferences: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    deal_preferences: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    activity_level: Mapped[str] = mapped_column(String(10), nullable=False)
    conversion_rate: Mapped[float] = mapped_column(Float, nullable=False)

    generated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        Index("idx_user_segments_type_confidence", "segment_type", "confidence"),
    )

    def __repr__(self) -> str:
        return f"<UserSegment(user={self.user_id}, type={self.segment_type}, version={self.version})>"

"""UserBehaviorScore model: the latest six behavior scores for a user."""

from datetime import datetime

from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from okazje.models.base import Base


class UserBehaviorScore(Base):
    """One row per user, overwritten on every scoring run."""

    __tablename__ = "user_behavior_scores"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)

    # Scores (0-100)
    price_sensitivity: Mapped[int] = mapped_column(Integer, nullable=False)
    brand_loyalty: Mapped[int] = mapped_column(Integer, nullable=False)
    quality_focus: Mapped[int] = mapped_column(Integer, nullable=False)
    speed_priority: Mapped[int] = mapped_column(Integer, nullable=False)
    engagement_level: Mapped[int] = mapped_column(Integer, nullable=False)
    conversion_potential: Mapped[int] = mapped_column(Integer, nullable=False)

    based_on_interactions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    calculated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<UserBehaviorScore(user={self.user_id}, interactions={self.based_on_interactions})>"

"""UserPreferences model: explicit personalization settings of a user."""

from datetime import datetime

from sqlalchemy import String, DateTime
from sqlalchemy import JSON as JSONB
from sqlalchemy.orm import Mapped, mapped_column

from okazje.models.base import Base


class UserPreferences(Base):
    """One row per user, created with defaults on first read."""

    __tablename__ = "user_preferences"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    favorite_categories: Mapped[list] = mapped_column(
        JSONB, nullable=False, default=list,
        comment="Category slugs, in the order the user added them"
    )
    subscribed_topics: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    notification_settings: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    feed_preferences: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<UserPreferences(user={self.user_id}, favorites={self.favorite_categories})>"

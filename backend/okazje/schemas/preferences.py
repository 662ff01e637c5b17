"""User preference schemas."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

FeedSort = Literal["trending", "newest", "personalized"]


class NotificationSettings(BaseModel):
    """Which notifications the user has opted into. Everything is on by default."""

    price_alerts: bool = True
    new_deals_in_categories: bool = True
    review_responses: bool = True
    badges_and_achievements: bool = True
    weekly_digest: bool = True


class FeedPreferences(BaseModel):
    """How the user's home feed is assembled."""

    show_personalized: bool = True
    include_followed_users: bool = False
    sort_by: FeedSort = "trending"


class UserPreferencesRecord(BaseModel):
    """A user's explicit preferences."""

    user_id: str
    favorite_categories: List[str] = Field(default_factory=list)
    subscribed_topics: List[str] = Field(default_factory=list)
    notification_settings: NotificationSettings = Field(default_factory=NotificationSettings)
    feed_preferences: FeedPreferences = Field(default_factory=FeedPreferences)
    updated_at: datetime


class UserPreferencesUpdate(BaseModel):
    """Partial update; omitted fields keep their stored value."""

    model_config = ConfigDict(extra="forbid")

    favorite_categories: Optional[List[str]] = None
    subscribed_topics: Optional[List[str]] = None
    notification_settings: Optional[NotificationSettings] = None
    feed_preferences: Optional[FeedPreferences] = None


class FavoriteCategoryRequest(BaseModel):
    """Request body for adding a favorite category."""

    category_slug: str = Field(..., min_length=1, max_length=100)

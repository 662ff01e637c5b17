"""Behavior score and user segment schemas."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

SegmentType = Literal[
    "price_sensitive",
    "fast_delivery",
    "brand_lover",
    "deal_hunter",
    "quality_seeker",
    "impulse_buyer",
]
ActivityLevel = Literal["low", "medium", "high"]

SEGMENT_TYPES: tuple[str, ...] = (
    "price_sensitive",
    "fast_delivery",
    "brand_lover",
    "deal_hunter",
    "quality_seeker",
    "impulse_buyer",
)


class BehaviorScores(BaseModel):
    """Six normalized behavior indicators.

    Field order matters: when two scores tie for the top spot the one
    declared first wins.
    """

    price_sensitivity: int = Field(..., ge=0, le=100)
    brand_loyalty: int = Field(..., ge=0, le=100)
    quality_focus: int = Field(..., ge=0, le=100)
    speed_priority: int = Field(..., ge=0, le=100)
    engagement_level: int = Field(..., ge=0, le=100)
    conversion_potential: int = Field(..., ge=0, le=100)


class BehaviorScoreRecord(BaseModel):
    """Latest behavior scores of a user."""

    user_id: str
    scores: BehaviorScores
    based_on_interactions: int = Field(..., ge=0)
    calculated_at: datetime
    updated_at: datetime


class SegmentCharacteristics(BaseModel):
    """Descriptive attributes attached to a segment assignment."""

    avg_price_point: Optional[float] = None
    category_preferences: List[str] = Field(default_factory=list, max_length=5)
    deal_preferences: List[str] = Field(default_factory=list)
    activity_level: ActivityLevel
    conversion_rate: float = Field(..., ge=0, le=1)


class UserSegmentRecord(BaseModel):
    """A user's behavioral segment. ``id`` always equals ``user_id``."""

    id: str
    user_id: str
    segment_type: SegmentType
    confidence: float = Field(..., ge=0, le=1)
    characteristics: SegmentCharacteristics
    generated_at: datetime
    updated_at: datetime
    version: int = Field(..., ge=1)

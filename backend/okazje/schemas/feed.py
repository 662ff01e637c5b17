"""Feed recommendation schemas."""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from okazje.schemas.interaction import ItemType

RecommendationAlgorithm = Literal["content", "trending"]


class RecommendationMetadata(BaseModel):
    """Why a content-based recommendation matched."""

    matching_categories: List[str] = Field(default_factory=list)
    confidence: float = Field(..., ge=0, le=1)


class FeedRecommendationRecord(BaseModel):
    """A recommended item for a user's feed. Expires after ``expires_at``."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    user_id: str
    item_id: str
    item_type: ItemType
    score: float = Field(..., ge=0, le=1)
    reason: str
    algorithm: RecommendationAlgorithm
    generated_at: datetime
    expires_at: datetime
    shown: bool = False
    clicked: bool = False
    metadata: Optional[RecommendationMetadata] = None

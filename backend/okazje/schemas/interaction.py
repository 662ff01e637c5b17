"""Interaction and resolved catalog item schemas."""

from datetime import datetime
from typing import Annotated, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

ItemType = Literal["deal", "product"]
InteractionType = Literal["view", "click", "favorite", "vote", "comment", "share"]

ITEM_TYPES: tuple[str, ...] = ("deal", "product")
INTERACTION_TYPES: tuple[str, ...] = ("view", "click", "favorite", "vote", "comment", "share")


class InteractionMetadata(BaseModel):
    """Tracking context captured alongside an interaction."""

    source: Optional[str] = None
    position: Optional[int] = None
    category_slug: Optional[str] = None


class Interaction(BaseModel):
    """A recorded user interaction. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: Optional[UUID] = None
    user_id: str
    item_id: str
    item_type: ItemType
    interaction_type: InteractionType
    timestamp: datetime
    duration: Optional[int] = None
    metadata: InteractionMetadata = Field(default_factory=InteractionMetadata)


class InteractionCreateRequest(BaseModel):
    """Request body for tracking an interaction."""

    user_id: str = Field(..., min_length=1, max_length=128)
    item_id: str = Field(..., min_length=1, max_length=128)
    item_type: ItemType
    interaction_type: InteractionType
    duration: Optional[int] = Field(None, ge=0)
    source: Optional[str] = Field(None, max_length=50)
    position: Optional[int] = Field(None, ge=0)
    category_slug: Optional[str] = Field(None, max_length=100)


class ResolvedDeal(BaseModel):
    """The catalog fields of a deal that scoring and feeds need."""

    item_type: Literal["deal"] = "deal"
    item_id: str
    title: Optional[str] = None
    price: Optional[float] = None
    merchant: Optional[str] = None


class ResolvedProduct(BaseModel):
    """The catalog fields of a product that scoring needs. Products have no merchant."""

    item_type: Literal["product"] = "product"
    item_id: str
    title: Optional[str] = None
    price: Optional[float] = None


CatalogItem = Annotated[Union[ResolvedDeal, ResolvedProduct], Field(discriminator="item_type")]

"""Deal model: a user-submitted or imported offer for a single item."""

from decimal import Decimal
from typing import Optional

from sqlalchemy import String, Numeric, Integer, Index
from sqlalchemy.orm import Mapped, mapped_column

from okazje.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Deal(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A deal listed on the marketplace.

    Only the columns the personalization engine reads are mapped here; the
    rest of the deal document is owned by the catalog application.
    """

    __tablename__ = "deals"

    title: Mapped[str] = mapped_column(String(500), nullable=False, comment="Deal title")
    price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2),
        nullable=True,
        comment="Deal price in PLN"
    )
    merchant: Mapped[Optional[str]] = mapped_column(
        String(200),
        nullable=True,
        index=True,
        comment="Merchant / shop name the deal is offered by"
    )
    main_category_slug: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    sub_category_slug: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    temperature: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Community vote balance; hotter deals rank higher in feeds"
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="approved",
        comment="'draft', 'approved' or 'rejected'"
    )

    __table_args__ = (
        Index("idx_deals_status_category", "status", "main_category_slug"),
        Index("idx_deals_status_temperature", "status", "temperature"),
    )

    def __repr__(self) -> str:
        return f"<Deal(id={self.id}, title='{self.title[:50]}', price={self.price}, merchant={self.merchant})>"

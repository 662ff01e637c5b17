"""Product model representing catalog items from marketplaces."""

from decimal import Decimal
from typing import Optional

from sqlalchemy import String, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from okazje.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Product(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Catalog product. Unlike deals, products carry no merchant."""

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(500), nullable=False, comment="Product name")
    brand: Mapped[Optional[str]] = mapped_column(String(200), nullable=True, index=True)
    price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2),
        nullable=True,
        comment="Lowest current price in PLN"
    )
    category_slug: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name[:50]}', price={self.price})>"

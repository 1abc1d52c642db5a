from __future__ import annotations

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from marketplace_api.db.base import Base, TimestampMixin, UUIDPkMixin


class Product(UUIDPkMixin, TimestampMixin, Base):
    """Marketplace product listing; product_name is unique."""
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="quantity_non_negative"),
    )

    product_name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    company_name: Mapped[str] = mapped_column(String(100), nullable=False)  # company that owns the product
    country: Mapped[str] = mapped_column(String(100), nullable=False)  # country of origin
    # USD amount prefixed with "$", e.g. "$1000"
    price: Mapped[str] = mapped_column(String(32), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

"""
Catalog Models: Category, Product.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import ID_LENGTH, Base, TimestampMixin, id_column

if TYPE_CHECKING:
    from .tenant import Tenant


class Category(TimestampMixin, Base):
    """
    Menu category (e.g., "Starters", "Drinks").
    Names are unique per tenant.
    """

    __tablename__ = "category"

    id: Mapped[str] = id_column()
    tenant_id: Mapped[str] = mapped_column(
        String(ID_LENGTH), ForeignKey("tenant.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_category_tenant_name"),
    )

    # Relationships
    tenant: Mapped["Tenant"] = relationship(back_populates="categories")
    products: Mapped[list["Product"]] = relationship(
        back_populates="category", order_by="Product.name"
    )


class Product(TimestampMixin, Base):
    """
    Menu item. Price is an integer amount of minor currency units.
    """

    __tablename__ = "product"

    id: Mapped[str] = id_column()
    tenant_id: Mapped[str] = mapped_column(
        String(ID_LENGTH), ForeignKey("tenant.id"), nullable=False, index=True
    )
    category_id: Mapped[str] = mapped_column(
        String(ID_LENGTH), ForeignKey("category.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        CheckConstraint("price >= 0", name="chk_product_price_non_negative"),
    )

    # Relationships
    tenant: Mapped["Tenant"] = relationship(back_populates="products")
    category: Mapped["Category"] = relationship(back_populates="products")

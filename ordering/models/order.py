"""
Order Models: Order, OrderItem.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import OrderStatus

from .base import ID_LENGTH, Base, TimestampMixin, id_column

if TYPE_CHECKING:
    from .tenant import Tenant


class Order(TimestampMixin, Base):
    """
    An order placed from a table.
    Status flow: PENDING -> CONFIRMED -> DONE, with CANCELLED reachable
    from PENDING and CONFIRMED.
    """

    # "order" is a reserved SQL keyword
    __tablename__ = "customer_order"

    id: Mapped[str] = id_column()
    tenant_id: Mapped[str] = mapped_column(
        String(ID_LENGTH), ForeignKey("tenant.id"), nullable=False, index=True
    )
    # Free text as entered on the guest device, not a FK to restaurant_table
    table_name: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), default=OrderStatus.PENDING, nullable=False
    )
    total: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        Index("ix_order_tenant_created", "tenant_id", "created_at"),
        CheckConstraint("total >= 0", name="chk_order_total_non_negative"),
    )

    # Relationships
    tenant: Mapped["Tenant"] = relationship(back_populates="orders")
    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        order_by="OrderItem.position",
        cascade="all, delete-orphan",
    )


class OrderItem(Base):
    """
    A line of an order. Name and unit price are copied from the product
    when the line is added; later catalog edits do not affect it.
    """

    __tablename__ = "order_item"

    id: Mapped[str] = id_column()
    order_id: Mapped[str] = mapped_column(
        String(ID_LENGTH), ForeignKey("customer_order.id"), nullable=False, index=True
    )
    # Insertion order within the order
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    product_name: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    note: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_order_item_quantity_positive"),
        CheckConstraint("price >= 0", name="chk_order_item_price_non_negative"),
    )

    # Relationships
    order: Mapped["Order"] = relationship(back_populates="items")

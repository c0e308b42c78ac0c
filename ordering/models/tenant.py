"""
Multi-Tenancy Model: Tenant.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, id_column

if TYPE_CHECKING:
    from .catalog import Category, Product
    from .table import Table
    from .order import Order


class Tenant(TimestampMixin, Base):
    """
    A restaurant (top-level tenant).
    All other entities belong to a tenant for complete data isolation.

    Branding columns are optional; readers fall back to the defaults in
    shared.config.constants.Branding.
    """

    __tablename__ = "tenant"

    id: Mapped[str] = id_column()
    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    # Opaque to this service; hashing and login live elsewhere
    password_hash: Mapped[Optional[str]] = mapped_column(Text)
    logo_url: Mapped[Optional[str]] = mapped_column(Text)
    primary_color: Mapped[Optional[str]] = mapped_column(String(7))
    secondary_color: Mapped[Optional[str]] = mapped_column(String(7))

    # Relationships
    categories: Mapped[list["Category"]] = relationship(back_populates="tenant")
    products: Mapped[list["Product"]] = relationship(back_populates="tenant")
    tables: Mapped[list["Table"]] = relationship(back_populates="tenant")
    orders: Mapped[list["Order"]] = relationship(back_populates="tenant")

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name='{self.name}', slug='{self.slug}')>"

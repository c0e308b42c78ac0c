"""
Table Model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import TableStatus

from .base import ID_LENGTH, Base, TimestampMixin, id_column

if TYPE_CHECKING:
    from .tenant import Tenant


class Table(TimestampMixin, Base):
    """
    Physical table in a restaurant.
    ACTIVE tables accept orders; markPaid locks them until staff reset them.
    """

    # "table" is a reserved SQL keyword
    __tablename__ = "restaurant_table"

    id: Mapped[str] = id_column()
    tenant_id: Mapped[str] = mapped_column(
        String(ID_LENGTH), ForeignKey("tenant.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)  # "Table 4", "Terrace-2"
    status: Mapped[str] = mapped_column(
        String(16), default=TableStatus.ACTIVE, nullable=False
    )  # ACTIVE, LOCKED

    __table_args__ = (
        Index("ix_table_tenant_status", "tenant_id", "status"),
    )

    # Relationships
    tenant: Mapped["Tenant"] = relationship(back_populates="tables")

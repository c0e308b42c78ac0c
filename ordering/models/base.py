"""
Base class and TimestampMixin for all SQLAlchemy ORM models.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, MappedColumn, mapped_column

# Ids are UUID4 strings; tenant ids double as dashboard room names.
ID_LENGTH = 36


def new_id() -> str:
    """Generate a new entity id."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class TimestampMixin:
    """
    Mixin providing audit timestamps.

    created_at is set client-side so rows inserted within the same second
    still order deterministically.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=utcnow, nullable=True
    )


def id_column() -> MappedColumn[str]:
    """Primary key column holding a UUID4 string."""
    return mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)

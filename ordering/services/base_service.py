"""
Base Service Class for domain services.

Provides the session, the event publisher, and the commit/validation
helpers every domain service shares.

Usage:
    from ordering.services.base_service import BaseService

    class TableService(BaseService):
        def create_table(self, tenant_id: str, name: str) -> Table:
            name = self._validate(validate_name, name, "name")
            table = Table(tenant_id=tenant_id, name=name)
            self.db.add(table)
            self._commit("create table")
            return table
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import DatabaseError, ValidationError

from ordering.services.events import EventPublisher

logger = get_logger(__name__)

T = TypeVar("T")


class BaseService:
    """
    Common infrastructure for domain services.

    Services are request-scoped: one instance per Session.
    """

    def __init__(self, db: Session, publisher: EventPublisher | None = None):
        self._db = db
        self._publisher = publisher or EventPublisher()

    @property
    def db(self) -> Session:
        """Database session."""
        return self._db

    @property
    def publisher(self) -> EventPublisher:
        """Publisher for post-commit events."""
        return self._publisher

    def _commit(self, operation: str, **log_context: Any) -> None:
        """
        Commit the current transaction.

        Raises:
            DatabaseError: If the commit fails (the session is rolled back)
        """
        try:
            safe_commit(self._db)
        except SQLAlchemyError as e:
            raise DatabaseError(operation, error=str(e), **log_context) from e

    def _rollback(self) -> None:
        self._db.rollback()

    def _validate(self, validator: Callable[..., T], value: Any, field: str) -> T:
        """Run a shared validator, translating ValueError into ValidationError."""
        try:
            return validator(value)
        except ValueError as e:
            raise ValidationError(str(e), field=field) from e

"""
Table Domain Service.

Table status is a plain ACTIVE/LOCKED flag that staff overwrite freely.
Payment locks the table and tells guest devices to clear their state.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from shared.config.constants import EventType, TableStatus, validate_table_status
from shared.config.logging import get_logger
from shared.utils.exceptions import DatabaseError, NotFoundError, ValidationError
from shared.utils.schemas import TableEventPayload
from shared.utils.validators import validate_name

from ordering.models import Table, Tenant
from ordering.services.base_service import BaseService

logger = get_logger(__name__)


class TableService(BaseService):
    """
    Table management and status changes.

    Usage:
        service = TableService(db, publisher)
        table = service.create_table(tenant_id, "Table 4")
        service.mark_paid(table.id, tenant_id)
    """

    # =========================================================================
    # Queries
    # =========================================================================

    def list_tables(self, tenant_id: str) -> Sequence[Table]:
        """Tables of a tenant ordered by name."""
        return self._db.scalars(
            select(Table).where(Table.tenant_id == tenant_id).order_by(Table.name)
        ).all()

    def get_table(self, table_id: str) -> Table:
        """
        Raises:
            NotFoundError: If the table does not exist
        """
        table = self._db.get(Table, table_id)
        if not table:
            raise NotFoundError("Table", table_id)
        return table

    @staticmethod
    def event_payload(table: Table) -> dict[str, Any]:
        """Payload of table_status_changed and table_paid."""
        return TableEventPayload(
            table_id=table.id,
            table_name=table.name,
            tenant_id=table.tenant_id,
            status=table.status,
        ).to_wire()

    # =========================================================================
    # Commands
    # =========================================================================

    def create_table(self, tenant_id: str, name: str) -> Table:
        """
        Create an ACTIVE table.

        Raises:
            ValidationError: If the name is blank or too long
            NotFoundError: If the tenant does not exist
        """
        name = self._validate(validate_name, name, "name")
        if self._db.get(Tenant, tenant_id) is None:
            raise NotFoundError("Tenant", tenant_id)

        table = Table(tenant_id=tenant_id, name=name, status=TableStatus.ACTIVE)
        self._db.add(table)
        self._commit("create table", tenant_id=tenant_id)

        logger.info("Table created", table_id=table.id, tenant_id=tenant_id, name=name)
        return table

    def set_status(self, table_id: str, tenant_id: str, new_status: str) -> Table:
        """
        Overwrite a table's status.

        Raises:
            ValidationError: If new_status is not ACTIVE or LOCKED
            NotFoundError: If the table does not exist or belongs to another tenant
        """
        if not validate_table_status(new_status):
            raise ValidationError(
                f"Invalid status '{new_status}'. Must be one of {TableStatus.ALL}",
                field="status",
            )

        table = self._lock_owned(table_id, tenant_id)
        old_status = table.status
        table.status = new_status
        self._commit("update table status", table_id=table_id)

        logger.info(
            "Table status updated",
            table_id=table_id,
            tenant_id=tenant_id,
            from_status=old_status,
            to_status=new_status,
        )

        self._publisher.publish(
            EventType.TABLE_STATUS_CHANGED, tenant_id, self.event_payload(table)
        )
        return table

    def mark_paid(self, table_id: str, tenant_id: str) -> Table:
        """
        Lock a table after payment until staff reset it.

        Publishes table_paid, then table_status_changed.

        Raises:
            NotFoundError: If the table does not exist or belongs to another tenant
        """
        table = self._lock_owned(table_id, tenant_id)
        table.status = TableStatus.LOCKED
        self._commit("mark table paid", table_id=table_id)

        logger.info("Table marked paid", table_id=table_id, tenant_id=tenant_id)

        payload = self.event_payload(table)
        self._publisher.publish(EventType.TABLE_PAID, tenant_id, payload)
        self._publisher.publish(EventType.TABLE_STATUS_CHANGED, tenant_id, payload)
        return table

    # =========================================================================
    # Helpers
    # =========================================================================

    def _lock_owned(self, table_id: str, tenant_id: str) -> Table:
        try:
            table = self._db.scalar(
                select(Table)
                .where(Table.id == table_id, Table.tenant_id == tenant_id)
                .with_for_update()
            )
        except SQLAlchemyError as e:
            self._rollback()
            raise DatabaseError("load table", error=str(e)) from e

        if not table:
            self._rollback()
            raise NotFoundError("Table", table_id, tenant_id=tenant_id)
        return table

"""
Tests for TableService domain service.
"""

import pytest

from ordering.services.domain.table_service import TableService
from shared.config.constants import EventType, TableStatus
from shared.utils.exceptions import NotFoundError, ValidationError


class TestMarkPaid:
    """Payment locks the table and notifies dashboards and guests."""

    def test_mark_paid_locks_table(self, db_session, publisher, seed_table):
        table = TableService(db_session, publisher).mark_paid(seed_table.id, seed_table.tenant_id)

        assert table.status == TableStatus.LOCKED

    def test_mark_paid_events_reach_only_tenant_and_guest_rooms(
        self, db_session, publisher, broadcaster, seed_table, seed_tenant
    ):
        TableService(db_session, publisher).mark_paid(seed_table.id, seed_tenant.id)

        expected_payload = {
            "tableId": seed_table.id,
            "tableName": "Table 4",
            "tenantId": seed_tenant.id,
            "status": "LOCKED",
        }
        assert broadcaster.events == [
            (seed_tenant.id, EventType.TABLE_PAID, expected_payload),
            (f"guest:{seed_tenant.id}", EventType.TABLE_PAID, expected_payload),
            (seed_tenant.id, EventType.TABLE_STATUS_CHANGED, expected_payload),
            (f"guest:{seed_tenant.id}", EventType.TABLE_STATUS_CHANGED, expected_payload),
        ]

    def test_mark_paid_other_tenant(self, db_session, publisher, broadcaster, seed_table, seed_other_tenant):
        service = TableService(db_session, publisher)

        with pytest.raises(NotFoundError):
            service.mark_paid(seed_table.id, seed_other_tenant.id)

        assert service.get_table(seed_table.id).status == TableStatus.ACTIVE
        assert broadcaster.events == []


class TestSetStatus:
    """Staff overwrite table status freely."""

    @pytest.mark.parametrize("first,second", [("LOCKED", "ACTIVE"), ("ACTIVE", "ACTIVE"), ("LOCKED", "LOCKED")])
    def test_overwrite(self, db_session, publisher, seed_table, first, second):
        service = TableService(db_session, publisher)

        service.set_status(seed_table.id, seed_table.tenant_id, first)
        table = service.set_status(seed_table.id, seed_table.tenant_id, second)

        assert table.status == second

    def test_set_status_event(self, db_session, publisher, broadcaster, seed_table, seed_tenant):
        TableService(db_session, publisher).set_status(seed_table.id, seed_tenant.id, TableStatus.LOCKED)

        assert broadcaster.names() == [EventType.TABLE_STATUS_CHANGED] * 2
        assert broadcaster.rooms_for(EventType.TABLE_STATUS_CHANGED) == [
            seed_tenant.id,
            f"guest:{seed_tenant.id}",
        ]

    def test_invalid_status(self, db_session, publisher, seed_table):
        with pytest.raises(ValidationError):
            TableService(db_session, publisher).set_status(seed_table.id, seed_table.tenant_id, "FREE")

    def test_missing_table(self, db_session, publisher, seed_tenant):
        with pytest.raises(NotFoundError):
            TableService(db_session, publisher).set_status("missing", seed_tenant.id, TableStatus.ACTIVE)


class TestTableManagement:
    """Creating and listing tables."""

    def test_create_table_is_active(self, db_session, publisher, seed_tenant):
        table = TableService(db_session, publisher).create_table(seed_tenant.id, "  Terrace 2  ")

        assert table.name == "Terrace 2"
        assert table.status == TableStatus.ACTIVE

    def test_create_table_blank_name(self, db_session, publisher, seed_tenant):
        with pytest.raises(ValidationError):
            TableService(db_session, publisher).create_table(seed_tenant.id, "")

    def test_create_table_unknown_tenant(self, db_session, publisher):
        with pytest.raises(NotFoundError):
            TableService(db_session, publisher).create_table("missing", "Table 1")

    def test_list_tables_sorted_and_scoped(self, db_session, publisher, seed_tenant, seed_other_tenant):
        service = TableService(db_session, publisher)
        service.create_table(seed_tenant.id, "B")
        service.create_table(seed_tenant.id, "A")
        service.create_table(seed_other_tenant.id, "C")

        assert [t.name for t in service.list_tables(seed_tenant.id)] == ["A", "B"]

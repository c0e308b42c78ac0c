"""
Room Naming.

A tenant's dashboard room is named after the tenant id itself; the room
that guest devices of that tenant listen on is "guest:<tenantId>".
"""

from __future__ import annotations

GUEST_ROOM_PREFIX = "guest:"


def _validate_tenant_id(tenant_id: str) -> None:
    """Reject ids that cannot name a room."""
    if not isinstance(tenant_id, str) or not tenant_id.strip():
        raise ValueError(f"tenant_id must be a non-empty string, got {tenant_id!r}")
    if tenant_id.startswith(GUEST_ROOM_PREFIX):
        raise ValueError(f"tenant_id must not start with '{GUEST_ROOM_PREFIX}'")


def tenant_room(tenant_id: str) -> str:
    """Dashboard room for a tenant's staff."""
    _validate_tenant_id(tenant_id)
    return tenant_id


def guest_room(tenant_id: str) -> str:
    """Room for guest devices tracking a tenant's orders and tables."""
    _validate_tenant_id(tenant_id)
    return f"{GUEST_ROOM_PREFIX}{tenant_id}"


def is_guest_room(room: str) -> bool:
    """Whether a room name is a guest room."""
    return room.startswith(GUEST_ROOM_PREFIX)

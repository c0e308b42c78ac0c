"""
Centralized constants for the backend application.

Usage:
    from shared.config.constants import OrderStatus, EventType

    if status == OrderStatus.PENDING:
        ...
"""

from typing import Final


# =============================================================================
# Entity Status Constants
# =============================================================================


class OrderStatus:
    """Order status constants."""

    PENDING: Final[str] = "PENDING"
    CONFIRMED: Final[str] = "CONFIRMED"  # Staff accepted the order
    DONE: Final[str] = "DONE"
    CANCELLED: Final[str] = "CANCELLED"

    ALL: Final[list[str]] = [PENDING, CONFIRMED, DONE, CANCELLED]
    TERMINAL: Final[list[str]] = [DONE, CANCELLED]


class TableStatus:
    """Table status constants."""

    ACTIVE: Final[str] = "ACTIVE"  # Open for guests to order
    LOCKED: Final[str] = "LOCKED"  # Paid, waiting for staff reset

    ALL: Final[list[str]] = [ACTIVE, LOCKED]


# =============================================================================
# Status Transitions
# =============================================================================

# Valid order status transitions (from -> [allowed to states])
ORDER_TRANSITIONS: Final[dict[str, list[str]]] = {
    OrderStatus.PENDING: [OrderStatus.CONFIRMED, OrderStatus.CANCELLED],
    OrderStatus.CONFIRMED: [OrderStatus.DONE, OrderStatus.CANCELLED],
    OrderStatus.DONE: [],  # Terminal state
    OrderStatus.CANCELLED: [],  # Terminal state
}


def validate_order_status(status: str) -> bool:
    """Validate that an order status is valid."""
    return status in OrderStatus.ALL


def validate_table_status(status: str) -> bool:
    """Validate that a table status is valid."""
    return status in TableStatus.ALL


def validate_order_transition(current_status: str, new_status: str) -> bool:
    """
    Validate that an order status transition is allowed.

    Returns True if transition is valid, False otherwise.
    """
    allowed = ORDER_TRANSITIONS.get(current_status, [])
    return new_status in allowed


# =============================================================================
# Validation Constants
# =============================================================================


class Limits:
    """Validation limits."""

    # Quantity limits
    MIN_QUANTITY: Final[int] = 1
    MAX_QUANTITY: Final[int] = 99

    # Price limits (minor currency units)
    MIN_PRICE: Final[int] = 0
    MAX_PRICE: Final[int] = 100_000_000

    # String lengths
    MAX_NAME_LENGTH: Final[int] = 200
    MAX_NOTE_LENGTH: Final[int] = 500
    MAX_URL_LENGTH: Final[int] = 2048


class Branding:
    """Default branding applied when a tenant has not configured colors."""

    DEFAULT_PRIMARY_COLOR: Final[str] = "#9333ea"  # Purple
    DEFAULT_SECONDARY_COLOR: Final[str] = "#f97316"  # Orange


# =============================================================================
# Event Types (WebSocket wire names)
# =============================================================================


class EventType:
    """Server -> client event names."""

    NEW_ORDER: Final[str] = "new_order"
    ORDER_UPDATED: Final[str] = "order_updated"
    TABLE_STATUS_CHANGED: Final[str] = "table_status_changed"
    TABLE_PAID: Final[str] = "table_paid"
    ROOM_JOINED: Final[str] = "room_joined"
    ERROR: Final[str] = "error"
    PONG: Final[str] = "pong"


class ClientEvent:
    """Client -> server event names."""

    JOIN_ROOM: Final[str] = "join_room"
    JOIN_GUEST_ROOM: Final[str] = "join_guest_room"
    PING: Final[str] = "ping"

    ALL: Final[list[str]] = [JOIN_ROOM, JOIN_GUEST_ROOM]

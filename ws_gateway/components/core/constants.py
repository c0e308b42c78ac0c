"""
WebSocket Gateway Constants.

Close codes, operational defaults, and the plain-text heartbeat frames.
Runtime limits (frame size, outbox size, connection cap) come from
shared.config.settings and override nothing here.
"""

from enum import IntEnum
from typing import Final

__all__ = [
    "WSCloseCode",
    "WSConstants",
    "MSG_PING_PLAIN",
]


class WSCloseCode(IntEnum):
    """
    WebSocket close codes used by the gateway.

    Standard codes (1000-1999) from RFC 6455.
    Custom codes (4000-4999) for application-specific errors.
    """

    # Standard codes (RFC 6455)
    NORMAL = 1000  # Normal closure
    GOING_AWAY = 1001  # Server shutting down
    POLICY_VIOLATION = 1008  # Slow consumer evicted
    SERVER_ERROR = 1011  # Unexpected server error (e.g. database unavailable)
    SERVER_OVERLOADED = 1013  # Connection cap reached, try again later

    # Custom application codes (4000-4999)
    AUTH_FAILED = 4001  # Token invalid, expired, or tenant no longer exists


class WSConstants:
    """WebSocket Gateway operational constants."""

    # DB_LOOKUP_TIMEOUT: 2 seconds
    # Tenant existence checks are a primary-key lookup; anything slower is
    # treated as a failed join rather than stalling the connection.
    DB_LOOKUP_TIMEOUT: Final[float] = 2.0

    # WS_SEND_TIMEOUT: 5 seconds
    # Upper bound for a single socket write before the writer gives up.
    WS_SEND_TIMEOUT: Final[float] = 5.0


# Heartbeat: clients send the bare string "ping", the gateway answers with
# a "pong" event.
MSG_PING_PLAIN: Final[str] = "ping"

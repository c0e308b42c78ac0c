"""
Core WebSocket Gateway components.
"""

from ws_gateway.components.core.constants import MSG_PING_PLAIN, WSCloseCode, WSConstants

__all__ = [
    "MSG_PING_PLAIN",
    "WSCloseCode",
    "WSConstants",
]

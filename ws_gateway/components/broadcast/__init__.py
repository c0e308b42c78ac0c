"""
Broadcasting components.

Room membership and fan-out with per-room ordering.
"""

from ws_gateway.components.broadcast.router import RoomRouter

__all__ = ["RoomRouter"]

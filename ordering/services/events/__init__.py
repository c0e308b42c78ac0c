"""
Domain event publishing to tenant and guest rooms.
"""

from .publisher import Audience, EventPublisher, RoomBroadcaster

__all__ = ["Audience", "EventPublisher", "RoomBroadcaster"]

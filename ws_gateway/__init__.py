"""
WebSocket Gateway: connection registry, room routing, and the /ws endpoint.
"""

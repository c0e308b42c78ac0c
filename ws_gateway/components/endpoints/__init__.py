"""
WebSocket endpoint components.
"""

from ws_gateway.components.endpoints.gateway import GatewayEndpoint

__all__ = ["GatewayEndpoint"]

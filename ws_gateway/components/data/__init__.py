"""
Data access components for the gateway.
"""

from ws_gateway.components.data.tenant_lookup import TenantLookup

__all__ = ["TenantLookup"]

"""
Authentication components.

Guest connections and tenant dashboard JWTs.
"""

from ws_gateway.components.auth.strategies import (
    AuthResult,
    AuthStrategy,
    TenantTokenAuthStrategy,
)

__all__ = [
    "AuthResult",
    "AuthStrategy",
    "TenantTokenAuthStrategy",
]

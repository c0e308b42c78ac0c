"""
Authentication Strategies for WebSocket connections.

A connection without a token is a guest. A connection with a token must
present a valid dashboard JWT for a tenant that still exists; otherwise
it is rejected with close code 4001 before any room operation.

Strategies are synchronous: the tenant check hits the database, so the
endpoint runs them on a worker thread.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

from shared.config.logging import get_logger, mask_token
from shared.security.auth import CredentialVerifier, JWTCredentialVerifier

from ws_gateway.components.connection.connection import Identity
from ws_gateway.components.core.constants import WSCloseCode

logger = get_logger(__name__)


# =============================================================================
# Result Types
# =============================================================================


@dataclass(frozen=True, slots=True)
class AuthResult:
    """
    Result of authentication attempt.

    Attributes:
        success: Whether authentication succeeded.
        identity: Identity for the connection if successful.
        error_message: Human-readable error message if failed.
        close_code: WebSocket close code to use if failed.
        audit_reason: Short reason code for audit logging.
    """

    success: bool
    identity: Identity | None = None
    error_message: str | None = None
    close_code: int = WSCloseCode.AUTH_FAILED
    audit_reason: str | None = None

    @classmethod
    def ok(cls, identity: Identity) -> "AuthResult":
        """Create successful authentication result."""
        return cls(success=True, identity=identity)

    @classmethod
    def fail(cls, message: str, audit_reason: str = "auth_failed") -> "AuthResult":
        """Create failed authentication result."""
        return cls(
            success=False,
            error_message=message,
            close_code=WSCloseCode.AUTH_FAILED,
            audit_reason=audit_reason,
        )


# =============================================================================
# Strategy Interface
# =============================================================================


class AuthStrategy(ABC):
    """
    Abstract base class for authentication strategies.

    Usage:
        strategy = TenantTokenAuthStrategy(verifier, tenant_exists)
        result = strategy.authenticate(token)
        if result.success:
            identity = result.identity
    """

    @abstractmethod
    def authenticate(self, token: str | None) -> AuthResult:
        """
        Authenticate a connection from its credential token.

        Args:
            token: Credential token, or None for an anonymous connection.

        Returns:
            AuthResult indicating success/failure with identity or error.
        """
        pass


# =============================================================================
# Strategy Implementations
# =============================================================================


class TenantTokenAuthStrategy(AuthStrategy):
    """
    Guests without a token, tenant dashboards with a JWT.

    The tenant named in the token must still exist, so tokens of deleted
    tenants stop working before they expire.
    """

    def __init__(
        self,
        tenant_exists: Callable[[str], bool],
        verifier: CredentialVerifier | None = None,
    ):
        self._tenant_exists = tenant_exists
        self._verifier = verifier or JWTCredentialVerifier()

    def authenticate(self, token: str | None) -> AuthResult:
        if not token:
            return AuthResult.ok(Identity.guest())

        claims = self._verifier.verify(token)
        if claims is None:
            return AuthResult.fail("Invalid or expired token", audit_reason="invalid_token")

        if not self._tenant_exists(claims.tenant_id):
            logger.warning(
                "Token for unknown tenant",
                tenant_id=claims.tenant_id,
                token=mask_token(token),
            )
            return AuthResult.fail("Tenant not found", audit_reason="unknown_tenant")

        return AuthResult.ok(Identity(tenant_id=claims.tenant_id, slug=claims.slug))

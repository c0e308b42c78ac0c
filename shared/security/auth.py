"""
Credential verification for tenant dashboard sessions.

Tokens are HS256 JWTs carrying the tenant id and slug. Login and password
hashing live outside this service; sign_tenant_token() exists for that
collaborator and for tests.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from typing import Any, Protocol

import jwt

from shared.config.logging import get_logger, mask_token
from shared.config.settings import (
    JWT_AUDIENCE,
    JWT_ISSUER,
    JWT_SECRET,
    settings,
)

logger = get_logger(__name__)

JWT_ALGORITHM = "HS256"


@dataclass(frozen=True, slots=True)
class TenantClaims:
    """Verified identity carried by a dashboard token."""

    tenant_id: str
    slug: str


class CredentialVerifier(Protocol):
    """Anything that turns a token into tenant claims, or None when invalid."""

    def verify(self, token: str) -> TenantClaims | None: ...


def sign_tenant_token(
    tenant_id: str,
    slug: str,
    ttl_seconds: int | None = None,
    secret: str = JWT_SECRET,
) -> str:
    """
    Sign a dashboard token for a tenant.

    Args:
        tenant_id: Tenant id, becomes the tenant_id claim.
        slug: Tenant slug, becomes the slug claim.
        ttl_seconds: Token lifetime. Defaults to the configured access expiry.
        secret: Signing secret.

    Returns:
        Signed JWT token string.
    """
    if ttl_seconds is None:
        ttl_seconds = settings.jwt_access_token_expire_minutes * 60

    now = int(time.time())
    data: dict[str, Any] = {
        "sub": tenant_id,
        "tenant_id": tenant_id,
        "slug": slug,
        "iss": JWT_ISSUER,
        "aud": JWT_AUDIENCE,
        "iat": now,
        "exp": now + ttl_seconds,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(data, secret, algorithm=JWT_ALGORITHM)


class JWTCredentialVerifier:
    """
    Verifies dashboard JWTs.

    Invalid, expired, or malformed tokens yield None; the caller decides how
    to reject the connection.
    """

    def __init__(
        self,
        secret: str = JWT_SECRET,
        issuer: str = JWT_ISSUER,
        audience: str = JWT_AUDIENCE,
    ) -> None:
        self._secret = secret
        self._issuer = issuer
        self._audience = audience

    def verify(self, token: str) -> TenantClaims | None:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                audience=self._audience,
                issuer=self._issuer,
            )
        except jwt.ExpiredSignatureError:
            logger.info("Token expired", token=mask_token(token))
            return None
        except jwt.InvalidTokenError as e:
            logger.warning("JWT validation failed", token=mask_token(token), error=str(e))
            return None

        tenant_id = payload.get("tenant_id")
        slug = payload.get("slug")
        if not isinstance(tenant_id, str) or not tenant_id:
            logger.warning("Invalid token: missing tenant_id claim", token=mask_token(token))
            return None
        if not isinstance(slug, str) or not slug:
            logger.warning("Invalid token: missing slug claim", token=mask_token(token))
            return None

        return TenantClaims(tenant_id=tenant_id, slug=slug)

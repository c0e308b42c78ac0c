"""
Tenant existence lookups for the gateway.

Authentication and guest-room joins both need to know whether a tenant
exists. Each lookup opens its own short-lived session; callers on the
event loop run it in a worker thread.
"""

from __future__ import annotations

from sqlalchemy.orm import Session, sessionmaker

from shared.infrastructure.db import get_db_context

from ordering.services.domain.tenant_service import TenantService


class TenantLookup:
    """
    Callable tenant existence check.

    Usage:
        tenant_exists = TenantLookup()
        if tenant_exists(tenant_id):
            ...
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        self._session_factory = session_factory

    def __call__(self, tenant_id: str) -> bool:
        with get_db_context(self._session_factory) as db:
            return TenantService(db).exists(tenant_id)

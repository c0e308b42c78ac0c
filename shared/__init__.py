"""
Shared module for common utilities used by the ordering services and the
WebSocket gateway.

STRUCTURE:
- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging, security audit logger
  - constants.py: Statuses, transitions, wire event names, limits

- shared.infrastructure: Persistence and messaging plumbing
  - db.py: SQLAlchemy engine/session factory, safe_commit()
  - rooms.py: Dashboard and guest room naming

- shared.security: Authentication
  - auth.py: JWT credential verifier for tenant dashboards

- shared.utils: Utilities
  - exceptions.py: Error taxonomy with auto-logging
  - validators.py: Input validation
  - schemas.py: Pydantic wire schemas

IMPORT EXAMPLES:
    from shared.config.settings import settings
    from shared.config.constants import OrderStatus, EventType
    from shared.infrastructure.db import get_db_context, safe_commit
    from shared.infrastructure.rooms import tenant_room, guest_room
    from shared.security.auth import JWTCredentialVerifier
    from shared.utils.exceptions import NotFoundError, StateConflictError
"""

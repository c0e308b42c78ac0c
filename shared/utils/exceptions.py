"""
Centralized exceptions for consistent error handling.

Every business error is an HTTPException subclass, so REST callers get a
structured response for free, and exposes to_payload() for the WebSocket
"error" event.

Usage:
    from shared.utils.exceptions import NotFoundError, StateConflictError

    raise NotFoundError("Order", order_id)
    raise InvalidTransitionError("Order", "DONE", "PENDING")
"""

from typing import Any

from fastapi import HTTPException, status

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    error_code: str = "error"

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)

    def to_payload(self) -> dict[str, Any]:
        """Payload for the client-facing "error" event."""
        return {"message": self.detail, "code": self.error_code}


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("Items are required")
        raise ValidationError("Invalid quantity", field="quantity", value=-1)
    """

    error_code = "validation_error"

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class DuplicateEntityError(ValidationError):
    """Entity already exists."""

    def __init__(self, entity: str, identifier: str | None = None, **log_context: Any):
        if identifier:
            detail = f"{entity} with name '{identifier}' already exists"
        else:
            detail = f"{entity} already exists"

        super().__init__(detail, entity=entity, identifier=identifier, **log_context)


class ProductNotAvailableError(ValidationError):
    """A referenced product is missing, owned by another tenant, or unavailable."""

    def __init__(self, product_id: str, **log_context: Any):
        self.product_id = product_id
        super().__init__(
            f"Product {product_id} not found or not available",
            product_id=product_id,
            **log_context,
        )


class TotalMismatchError(ValidationError):
    """Client-supplied total differs from the catalog-derived total."""

    def __init__(self, expected: int, received: int, **log_context: Any):
        super().__init__(
            f"Order total {received} does not match item prices ({expected})",
            expected=expected,
            received=received,
            **log_context,
        )


# =============================================================================
# 401/403 Authentication and Authorization Errors
# =============================================================================


class AuthError(AppException):
    """
    Missing or invalid credential (401).

    Usage:
        raise AuthError("Invalid or expired token")
    """

    error_code = "auth_error"

    def __init__(
        self,
        detail: str = "Authentication required",
        status_code: int = status.HTTP_401_UNAUTHORIZED,
        **log_context: Any,
    ):
        super().__init__(
            status_code=status_code,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class RoomAccessError(AuthError):
    """Authenticated connection tried to join a room it does not own (403)."""

    error_code = "forbidden"

    def __init__(self, room: str, **log_context: Any):
        super().__init__(
            "Not authorized to join this room",
            status_code=status.HTTP_403_FORBIDDEN,
            room=room,
            **log_context,
        )


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found, or owned by another tenant (404).

    Ownership failures use this same error so the existence of other
    tenants' data is never revealed.

    Usage:
        raise NotFoundError("Order", order_id)
        raise NotFoundError("Table", table_id, tenant_id=tenant_id)
    """

    error_code = "not_found"

    def __init__(self, entity: str, entity_id: str | None = None, **log_context: Any):
        detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class StateConflictError(AppException):
    """
    Operation is illegal in the entity's current state (409).

    Usage:
        raise StateConflictError("Cannot add items to order. Order status is not PENDING")
    """

    error_code = "state_conflict"

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class InvalidTransitionError(StateConflictError):
    """Invalid status transition."""

    def __init__(self, entity: str, from_status: str, to_status: str, **log_context: Any):
        detail = f"Invalid transition from '{from_status}' to '{to_status}' for {entity}"
        super().__init__(detail, entity=entity, from_status=from_status, to_status=to_status, **log_context)


# =============================================================================
# 500 Internal Server Errors
# =============================================================================


class InternalError(AppException):
    """
    Internal server error (500). The detail shown to callers is generic.

    Usage:
        raise InternalError(order_id=order_id)
    """

    error_code = "internal_error"

    def __init__(self, detail: str = "Internal server error", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )


class DatabaseError(InternalError):
    """Database operation failed."""

    def __init__(self, operation: str, **log_context: Any):
        detail = f"Database error during {operation}. Please try again."
        super().__init__(detail, operation=operation, **log_context)


# =============================================================================
# 503 Service Unavailable Errors
# =============================================================================


class CapacityError(AppException):
    """
    The gateway is at its connection limit (503).

    Usage:
        raise CapacityError(limit=settings.ws_max_total_connections)
    """

    error_code = "capacity"

    def __init__(self, detail: str = "Server is at connection capacity", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
            log_level="warning",
            **log_context,
        )

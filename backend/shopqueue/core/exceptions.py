"""
Custom exceptions for the scheduling and queue engine.

Every failure the engine reports to its callers is one of these typed
errors. The request layer maps them to HTTP status codes through
``ShopQueueError.status_code``; nothing here is ever downgraded to a no-op.
"""

from typing import Any, Dict, Optional


class ShopQueueError(Exception):
    """Base class for all engine errors."""

    code = "error"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class NotFoundError(ShopQueueError):
    """An entity id does not resolve within the tenant's scope."""

    code = "not_found"
    status_code = 404

    def __init__(self, resource: str, resource_id: Any, tenant_id: Optional[str] = None):
        super().__init__(
            f"{resource} {resource_id} not found",
            {"resource": resource, "id": resource_id, "tenant_id": tenant_id},
        )
        self.resource = resource
        self.resource_id = resource_id


class TenantNotFoundError(NotFoundError):
    """The tenant itself is unknown."""

    code = "tenant_not_found"

    def __init__(self, tenant_id: str):
        super().__init__("Tenant", tenant_id, tenant_id)


class InvalidTransitionError(ShopQueueError):
    """Requested status change is not an edge of the state machine."""

    code = "invalid_transition"
    status_code = 409

    def __init__(self, entity: str, current: str, requested: str):
        super().__init__(
            f"Cannot move {entity} from '{current}' to '{requested}'",
            {"entity": entity, "current": current, "requested": requested},
        )
        self.current = current
        self.requested = requested


class InvalidPositionError(ShopQueueError):
    """Reposition target is outside ``[1, count]``."""

    code = "invalid_position"
    status_code = 422

    def __init__(self, position: Any, count: int):
        super().__init__(
            f"Position {position} is outside the queue range [1, {count}]",
            {"position": position, "count": count},
        )
        self.position = position
        self.count = count


class ValidationError(ShopQueueError, ValueError):
    """Malformed input (missing field, non-positive amount, unknown enum value)."""

    code = "validation_error"
    status_code = 400


class ConcurrencyConflictError(ShopQueueError):
    """The store detected a lost update during a multi-row write."""

    code = "concurrency_conflict"
    status_code = 409

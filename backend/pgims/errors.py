# Overview: Typed business errors shared by services and routes.

"""
Every failure a caller can act on is one of these.

ValidationError is raised before any transaction opens, except for approving an
empty requisition, which is only known under the row lock. All others are raised
inside a transaction and the session is rolled back before the error leaves
the service layer.
"""
from __future__ import annotations


class PosError(Exception):
    """Base class: carries an HTTP status, a stable code and JSON details."""
    status_code = 400
    code = "error"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"error": self.code, "message": str(self), **self.details}


class ValidationError(PosError, ValueError):
    """400-level input problem."""
    status_code = 400
    code = "validation_error"

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message, details)
        self.field = field


class PermissionDenied(PosError):
    status_code = 403
    code = "permission_denied"

    def __init__(self, operation: str, role: str | None):
        super().__init__(
            f"Role {role!r} may not perform {operation}",
            {"operation": operation, "role": role},
        )
        self.operation = operation
        self.role = role


class NotFound(PosError):
    status_code = 404
    code = "not_found"

    def __init__(self, entity_type: str, entity_id):
        super().__init__(
            f"{entity_type} {entity_id} not found",
            {"entity_type": entity_type, "id": entity_id},
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class InsufficientStock(PosError):
    status_code = 409
    code = "insufficient_stock"

    def __init__(self, product: str, requested: int, available: int, product_id: int | None = None):
        super().__init__(
            f"Insufficient stock for product: {product}",
            {
                "product": product,
                "product_id": product_id,
                "requested": requested,
                "available": available,
            },
        )
        self.product = product
        self.product_id = product_id
        self.requested = requested
        self.available = available


class InvalidStateTransition(PosError):
    status_code = 409
    code = "invalid_state_transition"

    def __init__(self, from_status: str, to_status: str):
        super().__init__(
            f"Cannot move from {from_status} to {to_status}",
            {"from": from_status, "to": to_status},
        )
        self.from_status = from_status
        self.to_status = to_status


class UniquenessConflict(PosError, ValueError):
    """409-level duplicate value (SKU, account number, email, order number)."""
    status_code = 409
    code = "uniqueness_conflict"

    def __init__(self, field: str | None, value=None):
        message = f"{field} already exists: {value}" if field else "Duplicate value"
        super().__init__(message, {"field": field, "value": value})
        self.field = field
        self.value = value


class CreditLimitExceeded(PosError):
    status_code = 409
    code = "credit_limit_exceeded"

    def __init__(self, customer_id: int, balance_cents: int, requested_cents: int, credit_limit_cents: int):
        super().__init__(
            f"Withdrawal would exceed credit limit for customer {customer_id}",
            {
                "customer_id": customer_id,
                "balance_cents": balance_cents,
                "requested_cents": requested_cents,
                "credit_limit_cents": credit_limit_cents,
            },
        )


class ConcurrencyConflict(PosError):
    """Lock timeout, deadlock or stale version; the whole operation may be retried."""
    status_code = 503
    code = "concurrency_conflict"

    def __init__(self, message: str = "Concurrent update conflict, retry the operation"):
        super().__init__(message, {"retryable": True})


class InUse(PosError):
    """Delete refused because other rows still reference the entity."""
    status_code = 409
    code = "in_use"

    def __init__(self, entity_type: str, entity_id):
        super().__init__(
            f"{entity_type} {entity_id} is still referenced and cannot be deleted",
            {"entity_type": entity_type, "id": entity_id},
        )

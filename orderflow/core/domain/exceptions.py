"""
Domain error hierarchy.

Each class fixes its HTTP `status_code` and a stable `code`; the API layer
renders `to_dict()` unchanged, so the classes here define the error contract.
"""

from typing import Any


class DomainException(Exception):
    """Base of every error a client is expected to handle."""

    status_code: int = 400

    def __init__(self, message: str, code: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": True,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "status_code": self.status_code,
        }


class ValidationException(DomainException):
    """Input that can never succeed as sent (bad address, out-of-range paging)."""

    status_code = 400

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, "VALIDATION_ERROR", details)
        self.field = field


class EntityNotFoundException(DomainException):
    """Missing, or not visible to the caller."""

    status_code = 404

    def __init__(
        self,
        entity_type: str,
        entity_id: Any,
        message: str | None = None,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        msg = message or f"{entity_type} with ID {entity_id} not found"
        super().__init__(
            msg,
            "ENTITY_NOT_FOUND",
            {"entity_type": entity_type, "entity_id": str(entity_id)},
        )


class BusinessRuleViolationException(DomainException):
    """An aggregate invariant would break (totals equation, double payment)."""

    status_code = 422

    def __init__(self, rule: str, message: str | None = None, details: dict[str, Any] | None = None):
        self.rule = rule
        msg = message or f"Business rule violated: {rule}"
        details = details or {}
        details["rule"] = rule
        super().__init__(msg, "BUSINESS_RULE_VIOLATION", details)


class ForbiddenException(DomainException):
    """Raised when the caller is not allowed to act on a resource."""

    status_code = 403

    def __init__(self, operation: str, resource: str | None = None, reason: str | None = None):
        self.operation = operation
        self.resource = resource
        self.reason = reason
        msg = f"Not allowed to perform '{operation}'"
        if resource:
            msg += f" on '{resource}'"
        if reason:
            msg += f": {reason}"
        super().__init__(
            msg,
            "FORBIDDEN",
            {
                "operation": operation,
                "resource": resource,
                "reason": reason,
            },
        )


class ConflictingUpdateException(DomainException):
    """Raised when an optimistic-concurrency write loses to another writer."""

    status_code = 409

    def __init__(self, entity_type: str, entity_id: Any, expected_version: int | None = None, message: str | None = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected_version = expected_version
        msg = message or f"{entity_type} {entity_id} was modified concurrently, re-fetch and retry"
        super().__init__(
            msg,
            "CONFLICTING_UPDATE",
            {
                "entity_type": entity_type,
                "entity_id": str(entity_id),
                "expected_version": expected_version,
            },
        )


class IntegrationException(DomainException):
    """An upstream service failed or answered something unusable."""

    status_code = 502

    def __init__(
        self,
        service: str,
        message: str,
        original_error: Exception | None = None,
        code: str = "INTEGRATION_ERROR",
    ):
        self.service = service
        self.original_error = original_error
        details: dict[str, Any] = {"service": service}
        if original_error:
            details["original_error"] = str(original_error)
        super().__init__(message, code, details)

"""
Order Domain Exceptions

Errors raised by pricing, order creation, payments and the status machine.
Each one carries the HTTP status the API layer answers with.
"""

from typing import Any

from orderflow.core.domain import ConflictingUpdateException, DomainException, IntegrationException


class OutOfStockException(DomainException):
    """Raised when the requested quantity exceeds available stock."""

    status_code = 409

    def __init__(self, product_id: str, requested: int, available: int | None = None):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        msg = f"Insufficient stock for product {product_id}. Requested: {requested}"
        if available is not None:
            msg += f", Available: {available}"
        super().__init__(
            msg,
            "OUT_OF_STOCK",
            {
                "product_id": product_id,
                "requested": requested,
                "available": available,
            },
        )


class BelowMinOrderQtyException(DomainException):
    """Raised when a line is below the product's minimum order quantity."""

    status_code = 422

    def __init__(self, product_id: str, requested: int, min_order_qty: int):
        self.product_id = product_id
        self.requested = requested
        self.min_order_qty = min_order_qty
        super().__init__(
            f"Product {product_id} requires at least {min_order_qty} units, got {requested}",
            "BELOW_MIN_ORDER_QTY",
            {
                "product_id": product_id,
                "requested": requested,
                "min_order_qty": min_order_qty,
            },
        )


class ProductUnavailableException(DomainException):
    """Raised when a cart references a product that is gone or inactive."""

    status_code = 422

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(
            f"Product {product_id} is no longer available",
            "PRODUCT_UNAVAILABLE",
            {"product_id": product_id},
        )


class OrderCreationFailedException(DomainException):
    """
    Raised when an order cannot be materialized from the cart.

    `reason` is the code of the underlying failure (e.g. "OUT_OF_STOCK") and the
    HTTP status follows that failure.
    """

    def __init__(self, reason: str, message: str, status_code: int = 422, details: dict[str, Any] | None = None):
        self.reason = reason
        self.status_code = status_code
        details = dict(details or {})
        details["reason"] = reason
        super().__init__(f"Order could not be created: {message}", "ORDER_CREATION_FAILED", details)

    @classmethod
    def from_error(cls, error: DomainException) -> "OrderCreationFailedException":
        return cls(reason=error.code, message=error.message, status_code=error.status_code, details=error.details)


class InvalidTransitionException(DomainException):
    """Raised when the status machine has no edge for the requested move."""

    status_code = 409

    def __init__(self, from_status: str, to_status: str, actor_role: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.actor_role = actor_role
        msg = f"Cannot move order from '{from_status}' to '{to_status}'"
        if actor_role:
            msg += f" as {actor_role}"
        super().__init__(
            msg,
            "INVALID_TRANSITION",
            {"from": from_status, "to": to_status, "actor_role": actor_role},
        )


class SignatureInvalidException(DomainException):
    """Raised when a payment signature does not verify. The order is left unpaid."""

    status_code = 400

    def __init__(self, message: str = "Payment signature verification failed", order_id: str | None = None):
        self.order_id = order_id
        details: dict[str, Any] = {}
        if order_id:
            details["order_id"] = order_id
        super().__init__(message, "SIGNATURE_INVALID", details)


class OrderNotPayableException(DomainException):
    """Raised when a payment is attempted on an order that cannot take one."""

    status_code = 409

    def __init__(self, order_id: str, status: str, payment_status: str):
        super().__init__(
            f"Order {order_id} cannot accept a payment (status={status}, payment_status={payment_status})",
            "ORDER_NOT_PAYABLE",
            {"order_id": order_id, "status": status, "payment_status": payment_status},
        )


class GatewayUnavailableException(IntegrationException):
    """Network failure or timeout talking to the payment gateway. Safe to retry."""

    def __init__(self, message: str, original_error: Exception | None = None, timed_out: bool = False):
        super().__init__("razorpay", message, original_error, code="GATEWAY_UNAVAILABLE")
        self.timed_out = timed_out
        self.status_code = 504 if timed_out else 502
        self.details["retryable"] = True


class DuplicateOrderNumberException(DomainException):
    """Raised by persistence when a generated order number is already taken."""

    status_code = 409

    def __init__(self, order_number: str):
        self.order_number = order_number
        super().__init__(f"Order number {order_number} already exists", "DUPLICATE_ORDER_NUMBER")


class DuplicateIdempotencyKeyException(ConflictingUpdateException):
    """Raised by persistence when the same customer reuses a checkout idempotency key concurrently."""

    def __init__(self, customer_id: str, idempotency_key: str):
        self.customer_id = customer_id
        self.idempotency_key = idempotency_key
        super().__init__(
            "Order",
            idempotency_key,
            message=f"An order for idempotency key {idempotency_key} is already being created",
        )

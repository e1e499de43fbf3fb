"""
Orders Application DTOs

Data transfer objects passed between the API layer, use cases and repositories.
"""

from dataclasses import dataclass, field
from typing import Any

from orderflow.domains.orders.domain.entities.order import Order
from orderflow.domains.orders.domain.value_objects import GatewayOrder, OrderStatus


@dataclass
class OrderSearchCriteria:
    """
    Filters for order listings; all set filters apply together (AND).

    `customer_id` and `vendor_id` are set from the caller's context, never
    from query parameters.
    """

    customer_id: str | None = None
    vendor_id: str | None = None
    admin_only: bool = False
    status: OrderStatus | None = None
    search: str | None = None
    skip: int = 0
    limit: int = 20


@dataclass
class OrderPage:
    """One page of orders plus the total match count."""

    orders: list[Order]
    total: int
    skip: int = 0
    limit: int = 20


@dataclass
class CheckoutResult:
    """Outcome of placing an order."""

    order: Order
    gateway_order: GatewayOrder | None = None
    payment_retryable: bool = False
    replayed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "order": self.order.to_dict(),
            "gateway_order": self.gateway_order.to_dict() if self.gateway_order else None,
            "payment_retryable": self.payment_retryable,
        }


@dataclass
class WebhookResult:
    """What the webhook handler did with an event."""

    status: str
    event: str | None = None
    order_id: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


__all__ = [
    "OrderSearchCriteria",
    "OrderPage",
    "CheckoutResult",
    "WebhookResult",
]

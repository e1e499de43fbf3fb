"""
Order Status Value Objects

Lifecycle states of an order and of its payment. Which status may follow
which, and for whom, lives in the OrderStatusMachine.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from orderflow.core.domain import StatusEnum


class OrderStatus(StatusEnum):
    """
    Order lifecycle states.

    Forward path:
    CREATED -> VENDOR_SHIPPED_TO_WAREHOUSE -> RECEIVED_IN_WAREHOUSE -> PACKED -> SHIPPED -> DELIVERED

    CANCELLED is a side exit. DELIVERED and CANCELLED are terminal.
    """

    CREATED = "created"
    VENDOR_SHIPPED_TO_WAREHOUSE = "vendor_shipped_to_warehouse"
    RECEIVED_IN_WAREHOUSE = "received_in_warehouse"
    PACKED = "packed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    def is_terminal(self) -> bool:
        """Check if this is a terminal (final) state."""
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)


class PaymentStatus(StatusEnum):
    """Payment status for orders."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"

    def accepts_payment(self) -> bool:
        """Check if a (new) payment attempt may be made."""
        return self in (PaymentStatus.PENDING, PaymentStatus.FAILED)


class PaymentMethod(StatusEnum):
    """How the order is paid."""

    RAZORPAY = "razorpay"


@dataclass(frozen=True)
class OrderStatusTransition:
    """
    A status change that happened, with who did it and when.

    Kept on the order as its status history.
    """

    from_status: OrderStatus
    to_status: OrderStatus
    actor_role: str
    actor_id: str
    at: datetime

    def __str__(self) -> str:
        return f"{self.from_status.value} -> {self.to_status.value}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "from_status": self.from_status.value,
            "to_status": self.to_status.value,
            "actor_role": self.actor_role,
            "actor_id": self.actor_id,
            "at": self.at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OrderStatusTransition":
        return cls(
            from_status=OrderStatus(data["from_status"]),
            to_status=OrderStatus(data["to_status"]),
            actor_role=data["actor_role"],
            actor_id=data["actor_id"],
            at=datetime.fromisoformat(data["at"]),
        )

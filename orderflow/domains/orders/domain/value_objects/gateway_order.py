"""
Gateway Order Value Object

The payment intent registered with the gateway for one order.
"""

from dataclasses import dataclass
from typing import Any

from orderflow.core.domain import ValueObject


@dataclass(frozen=True)
class GatewayOrder(ValueObject):
    """
    Gateway-side order.

    `amount` is in the currency's minor unit (paise for INR) and always equals
    the order total.
    """

    id: str
    amount: int
    currency: str
    receipt: str
    status: str = "created"

    def _validate(self) -> None:
        if not self.id:
            raise ValueError("Gateway order id is required")
        if self.amount <= 0:
            raise ValueError("Gateway order amount must be positive")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "amount": self.amount,
            "currency": self.currency,
            "receipt": self.receipt,
            "status": self.status,
        }

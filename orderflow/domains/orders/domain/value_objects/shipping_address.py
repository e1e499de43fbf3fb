"""
Shipping Address Value Object

Immutable copy of the delivery address taken at checkout. Later edits to
the customer's address book never reach an existing order.
"""

from dataclasses import asdict, dataclass
from typing import Any

from orderflow.core.domain import ValidationException, ValueObject


@dataclass(frozen=True)
class ShippingAddress(ValueObject):
    """
    Delivery address snapshot.
    """

    name: str
    phone: str
    line1: str
    city: str
    state: str
    postal_code: str
    line2: str | None = None
    country: str = "India"

    def _validate(self) -> None:
        for field_name in ("name", "phone", "line1", "city", "state", "postal_code"):
            value = getattr(self, field_name)
            if not value or not str(value).strip():
                raise ValidationException(f"Shipping address {field_name} is required", field=field_name)

    def get_full_address(self) -> str:
        """Get full formatted address."""
        parts = [self.line1, self.line2, self.city, self.state, self.postal_code, self.country]
        return ", ".join(p for p in parts if p)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShippingAddress":
        return cls(
            name=data["name"],
            phone=data["phone"],
            line1=data["line1"],
            line2=data.get("line2"),
            city=data["city"],
            state=data["state"],
            postal_code=data["postal_code"],
            country=data.get("country") or "India",
        )

    def __str__(self) -> str:
        return self.get_full_address()

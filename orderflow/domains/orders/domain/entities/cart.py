"""
Cart Entity

The customer's pending selection. Lines carry only product and quantity;
prices are resolved by the pricing engine every time they are needed.
"""

from dataclasses import dataclass, field

from orderflow.core.domain import Entity, ValidationException


@dataclass
class CartLine:
    """One product in the cart."""

    product_id: str
    quantity: int

    def __post_init__(self):
        if self.quantity < 1:
            raise ValidationException("Quantity must be at least 1", field="quantity")


@dataclass
class Cart(Entity[str]):
    """
    Cart owned by a customer.

    Line order is insertion order and is kept through checkout.
    """

    customer_id: str = ""
    lines: list[CartLine] = field(default_factory=list)

    def add(self, product_id: str, quantity: int) -> CartLine:
        """Add a product, or increase its quantity if already present."""
        if quantity < 1:
            raise ValidationException("Quantity must be at least 1", field="quantity")
        for line in self.lines:
            if line.product_id == product_id:
                line.quantity += quantity
                self.touch()
                return line
        line = CartLine(product_id=product_id, quantity=quantity)
        self.lines.append(line)
        self.touch()
        return line

    def update(self, product_id: str, quantity: int) -> CartLine | None:
        """Set a line's quantity. Zero removes the line."""
        if quantity == 0:
            self.remove(product_id)
            return None
        if quantity < 0:
            raise ValidationException("Quantity cannot be negative", field="quantity")
        for line in self.lines:
            if line.product_id == product_id:
                line.quantity = quantity
                self.touch()
                return line
        raise ValidationException(f"Product {product_id} is not in the cart", field="product_id")

    def remove(self, product_id: str) -> bool:
        """Remove a line; returns False if it was not there."""
        for line in self.lines:
            if line.product_id == product_id:
                self.lines.remove(line)
                self.touch()
                return True
        return False

    def clear(self) -> None:
        self.lines.clear()
        self.touch()

    def is_empty(self) -> bool:
        return not self.lines

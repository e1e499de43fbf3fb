"""
Pricing Service for the Orders Domain

Turns cart lines plus a catalog snapshot into authoritative order totals.
Pure: it never reads or writes storage, so it runs again at checkout
against fresh catalog data.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from orderflow.core.domain import ValidationException

from ..entities.cart import CartLine
from ..entities.catalog import ProductSnapshot
from ..exceptions import BelowMinOrderQtyException, OutOfStockException, ProductUnavailableException
from .shipping_policy import FlatRateShippingPolicy, ShippingPolicy


@dataclass(frozen=True)
class PricedLine:
    """A cart line with its resolved price and tax."""

    product: ProductSnapshot
    quantity: int
    unit_price: int
    line_total: int
    tax_amount: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_id": self.product.product_id,
            "title": self.product.title,
            "sku": self.product.sku,
            "vendor_id": self.product.vendor_id,
            "vendor_name": self.product.vendor_name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "line_total": self.line_total,
            "tax_code": self.product.tax_code,
            "tax_percentage": str(self.product.tax_percentage),
            "tax_amount": self.tax_amount,
        }


@dataclass(frozen=True)
class OrderCalculation:
    """Quote for a cart. Never persisted and never accepted from a client."""

    lines: tuple[PricedLine, ...]
    subtotal: int
    shipping_cost: int
    tax: int
    currency: str = "INR"
    total_weight_kg: Decimal = field(default=Decimal("0"))

    @property
    def total(self) -> int:
        return self.subtotal + self.shipping_cost + self.tax

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [line.to_dict() for line in self.lines],
            "subtotal": self.subtotal,
            "shipping_cost": self.shipping_cost,
            "tax": self.tax,
            "total": self.total,
            "currency": self.currency,
        }


class PricingService:
    """
    Domain service for order pricing.

    Handles:
    - Quantity-tier unit price resolution
    - Minimum order quantity and stock checks
    - Per-line tax at each product's own rate
    - One shipping charge for the whole cart

    Example:
        ```python
        service = PricingService()
        calculation = service.quote(cart.lines, catalog, shipping_config.to_policy())
        print(calculation.total)
        ```
    """

    def __init__(self, currency: str = "INR", default_shipping_policy: ShippingPolicy | None = None):
        """
        Initialize pricing service.

        Args:
            currency: Store currency, reported on every quote
            default_shipping_policy: Policy used when `quote` is not given one
        """
        self.currency = currency
        self.default_shipping_policy = default_shipping_policy or FlatRateShippingPolicy(flat_rate=0)

    def quote(
        self,
        cart_lines: Sequence[CartLine],
        catalog: Mapping[str, ProductSnapshot],
        shipping_policy: ShippingPolicy | None = None,
    ) -> OrderCalculation:
        """
        Price a cart.

        Args:
            cart_lines: Lines in cart order
            catalog: Mapping of product id to ProductSnapshot
            shipping_policy: Policy for the shipping charge

        Returns:
            OrderCalculation with priced lines and totals

        Raises:
            ValidationException: Empty cart or a quantity below 1
            ProductUnavailableException: Product missing or inactive
            BelowMinOrderQtyException: Quantity below the product's minimum
            OutOfStockException: Quantity (summed per product) above stock
        """
        if not cart_lines:
            raise ValidationException("Cart is empty", field="items")

        policy = shipping_policy or self.default_shipping_policy
        requested: dict[str, int] = {}
        priced: list[PricedLine] = []
        total_weight = Decimal("0")

        for line in cart_lines:
            if line.quantity < 1:
                raise ValidationException("Quantity must be at least 1", field="quantity")

            product = catalog.get(line.product_id)
            if product is None or not product.is_active:
                raise ProductUnavailableException(line.product_id)

            if line.quantity < product.min_order_qty:
                raise BelowMinOrderQtyException(product.product_id, line.quantity, product.min_order_qty)

            requested[product.product_id] = requested.get(product.product_id, 0) + line.quantity
            if requested[product.product_id] > product.stock:
                raise OutOfStockException(product.product_id, requested[product.product_id], product.stock)

            unit_price = product.unit_price_for(line.quantity)
            line_total = unit_price * line.quantity
            priced.append(
                PricedLine(
                    product=product,
                    quantity=line.quantity,
                    unit_price=unit_price,
                    line_total=line_total,
                    tax_amount=product.tax_for(line_total),
                )
            )
            total_weight += product.weight_kg * line.quantity

        subtotal = sum(line.line_total for line in priced)
        tax = sum(line.tax_amount for line in priced)

        return OrderCalculation(
            lines=tuple(priced),
            subtotal=subtotal,
            shipping_cost=policy.cost_for(subtotal, total_weight),
            tax=tax,
            currency=self.currency,
            total_weight_kg=total_weight,
        )

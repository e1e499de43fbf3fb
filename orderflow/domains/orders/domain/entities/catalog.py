"""
Catalog Snapshot for the Orders Domain

Read-only view of the product catalog as of one quote. The catalog itself
(products, vendors, categories) is owned elsewhere; orders only read it.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from orderflow.core.domain import Percentage, ValueObject


@dataclass(frozen=True)
class PricingTier(ValueObject):
    """Quantity break: from `min_qty` units on, each unit costs `price_per_unit` (minor units)."""

    min_qty: int
    price_per_unit: int

    def _validate(self) -> None:
        if self.min_qty < 1:
            raise ValueError("Tier min_qty must be at least 1")
        if self.price_per_unit < 0:
            raise ValueError("Tier price cannot be negative")


@dataclass(frozen=True)
class ProductSnapshot:
    """
    A product as the pricing engine sees it.

    Money is in minor units. `vendor_is_platform` marks items sold by the
    store itself rather than by a marketplace vendor.
    """

    product_id: str
    title: str
    sku: str | None
    vendor_id: str
    vendor_name: str
    vendor_phone: str | None
    price: int
    stock: int
    pricing_tiers: tuple[PricingTier, ...] = field(default_factory=tuple)
    min_order_qty: int = 1
    tax_code: str | None = None
    tax_percentage: Decimal = Decimal("0")
    weight_kg: Decimal = Decimal("0")
    is_active: bool = True
    vendor_is_platform: bool = False

    def unit_price_for(self, quantity: int) -> int:
        """
        Resolve the unit price for a quantity.

        The tier with the greatest min_qty not exceeding the quantity wins;
        the base price applies when no tier qualifies.
        """
        applicable = [tier for tier in self.pricing_tiers if tier.min_qty <= quantity]
        if not applicable:
            return self.price
        return max(applicable, key=lambda tier: tier.min_qty).price_per_unit

    def tax_for(self, line_total: int) -> int:
        """Tax on a line using this product's own rate."""
        return Percentage(self.tax_percentage).of_minor_units(line_total)


class CatalogSnapshot(Mapping[str, ProductSnapshot]):
    """Products keyed by id, captured once per quote."""

    def __init__(self, products: Iterable[ProductSnapshot] = ()):
        self._products = {product.product_id: product for product in products}

    def __getitem__(self, product_id: str) -> ProductSnapshot:
        return self._products[product_id]

    def __iter__(self):
        return iter(self._products)

    def __len__(self) -> int:
        return len(self._products)

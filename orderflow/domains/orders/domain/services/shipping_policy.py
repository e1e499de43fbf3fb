"""
Shipping Policies

One shipping charge per cart, computed from the whole cart rather than per
vendor. Policies are interchangeable; the admin-editable ShippingConfig
picks one.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol, runtime_checkable

from orderflow.core.domain import StatusEnum, ValidationException


@runtime_checkable
class ShippingPolicy(Protocol):
    """Computes the shipping charge for a cart."""

    def cost_for(self, subtotal: int, total_weight_kg: Decimal) -> int:
        """Shipping cost in minor units."""
        ...


@dataclass(frozen=True)
class FlatRateShippingPolicy:
    """
    Flat charge below a free-shipping threshold.

    Shipping becomes 0 when the subtotal is at or above the threshold,
    or when shipping charges are disabled.
    """

    flat_rate: int
    free_shipping_threshold: int | None = None
    is_enabled: bool = True

    def cost_for(self, subtotal: int, total_weight_kg: Decimal) -> int:
        if not self.is_enabled:
            return 0
        if self.free_shipping_threshold is not None and subtotal >= self.free_shipping_threshold:
            return 0
        return self.flat_rate


@dataclass(frozen=True)
class WeightBasedShippingPolicy:
    """Base charge plus a per-kilogram rate, optionally free above a threshold."""

    base_rate: int
    per_kg_rate: int
    free_shipping_threshold: int | None = None
    is_enabled: bool = True

    def cost_for(self, subtotal: int, total_weight_kg: Decimal) -> int:
        if not self.is_enabled:
            return 0
        if self.free_shipping_threshold is not None and subtotal >= self.free_shipping_threshold:
            return 0
        weight_charge = (Decimal(self.per_kg_rate) * total_weight_kg).quantize(Decimal("1"), ROUND_HALF_UP)
        return self.base_rate + int(weight_charge)


class ShippingStrategy(StatusEnum):
    """Which policy a ShippingConfig builds."""

    FLAT_RATE = "flat_rate"
    WEIGHT_BASED = "weight_based"


@dataclass(frozen=True)
class ShippingConfig:
    """
    Store-wide shipping settings, editable by admins.

    Amounts are minor units.
    """

    is_enabled: bool = True
    flat_rate: int = 0
    free_shipping_threshold: int | None = None
    strategy: ShippingStrategy = ShippingStrategy.FLAT_RATE
    per_kg_rate: int = 0

    def __post_init__(self):
        if self.flat_rate < 0 or self.per_kg_rate < 0:
            raise ValidationException("Shipping rates must be 0 or greater")
        if self.free_shipping_threshold is not None and self.free_shipping_threshold < 0:
            raise ValidationException("Free shipping threshold must be 0 or greater", field="free_shipping_threshold")

    def to_policy(self) -> ShippingPolicy:
        if self.strategy == ShippingStrategy.WEIGHT_BASED:
            return WeightBasedShippingPolicy(
                base_rate=self.flat_rate,
                per_kg_rate=self.per_kg_rate,
                free_shipping_threshold=self.free_shipping_threshold,
                is_enabled=self.is_enabled,
            )
        return FlatRateShippingPolicy(
            flat_rate=self.flat_rate,
            free_shipping_threshold=self.free_shipping_threshold,
            is_enabled=self.is_enabled,
        )

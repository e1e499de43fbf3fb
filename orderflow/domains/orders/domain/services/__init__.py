"""
Orders Domain Services
"""

from .order_factory import OrderFactory, generate_order_number
from .pricing_service import OrderCalculation, PricedLine, PricingService
from .shipping_policy import (
    FlatRateShippingPolicy,
    ShippingConfig,
    ShippingPolicy,
    ShippingStrategy,
    WeightBasedShippingPolicy,
)
from .status_machine import TRANSITIONS, OrderStatusMachine

__all__ = [
    "OrderFactory",
    "generate_order_number",
    "OrderCalculation",
    "PricedLine",
    "PricingService",
    "FlatRateShippingPolicy",
    "ShippingConfig",
    "ShippingPolicy",
    "ShippingStrategy",
    "WeightBasedShippingPolicy",
    "TRANSITIONS",
    "OrderStatusMachine",
]

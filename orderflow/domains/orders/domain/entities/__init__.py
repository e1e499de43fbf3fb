"""
Orders Domain Entities
"""

from .cart import Cart, CartLine
from .catalog import CatalogSnapshot, PricingTier, ProductSnapshot
from .order import Order, OrderItem, VendorSnapshot

__all__ = [
    "Cart",
    "CartLine",
    "CatalogSnapshot",
    "PricingTier",
    "ProductSnapshot",
    "Order",
    "OrderItem",
    "VendorSnapshot",
]

"""
Database models.

Importing this package registers every table on `Base.metadata`.
"""

from .base import Base, TimestampMixin
from .cart import CartItem
from .catalog import Product, Vendor
from .orders import Order, OrderItem
from .shipping import ShippingConfigModel

__all__ = [
    "Base",
    "TimestampMixin",
    "CartItem",
    "Product",
    "Vendor",
    "Order",
    "OrderItem",
    "ShippingConfigModel",
]

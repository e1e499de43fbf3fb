"""
Orders Infrastructure Repositories

SQLAlchemy implementations of the orders ports.
"""

from .cart_repository import SQLAlchemyCartRepository
from .catalog_repository import SQLAlchemyCatalogRepository
from .order_repository import SQLAlchemyOrderRepository
from .shipping_config_repository import SQLAlchemyShippingConfigRepository, default_shipping_config

__all__ = [
    "SQLAlchemyCartRepository",
    "SQLAlchemyCatalogRepository",
    "SQLAlchemyOrderRepository",
    "SQLAlchemyShippingConfigRepository",
    "default_shipping_config",
]

"""
Dependency Injection Container.
"""

from .orders import OrdersContainer, get_orders_container

__all__ = ["OrdersContainer", "get_orders_container"]

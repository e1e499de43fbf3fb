"""
Orders API
"""

from .routes import cart_router
from .routes import router as orders_router

__all__ = ["orders_router", "cart_router"]

"""
Orders Domain Value Objects
"""

from .actor import ActorRole, RequestContext
from .gateway_order import GatewayOrder
from .order_status import OrderStatus, OrderStatusTransition, PaymentMethod, PaymentStatus
from .shipping_address import ShippingAddress

__all__ = [
    "ActorRole",
    "RequestContext",
    "GatewayOrder",
    "OrderStatus",
    "OrderStatusTransition",
    "PaymentMethod",
    "PaymentStatus",
    "ShippingAddress",
]

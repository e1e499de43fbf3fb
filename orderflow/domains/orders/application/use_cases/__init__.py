"""
Orders Use Cases
"""

from .calculate_order import CalculateOrderUseCase
from .create_order import CreateOrderRequest, CreateOrderUseCase
from .create_payment_intent import CreatePaymentIntentUseCase
from .handle_payment_webhook import HandlePaymentWebhookUseCase, PaymentEvent
from .manage_cart import ManageCartUseCase
from .query_orders import OrderQueryService
from .settle_payment import SettlePaymentUseCase
from .shipping_config import ShippingConfigUseCase
from .update_delivery_date import UpdateDeliveryDateUseCase
from .update_order_status import UpdateOrderStatusUseCase
from .verify_payment import VerifyPaymentRequest, VerifyPaymentUseCase

__all__ = [
    "CalculateOrderUseCase",
    "CreateOrderRequest",
    "CreateOrderUseCase",
    "CreatePaymentIntentUseCase",
    "HandlePaymentWebhookUseCase",
    "PaymentEvent",
    "ManageCartUseCase",
    "OrderQueryService",
    "SettlePaymentUseCase",
    "ShippingConfigUseCase",
    "UpdateDeliveryDateUseCase",
    "UpdateOrderStatusUseCase",
    "VerifyPaymentRequest",
    "VerifyPaymentUseCase",
]

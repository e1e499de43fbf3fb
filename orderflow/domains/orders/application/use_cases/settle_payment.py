"""
Settle Payment Use Case

The single place an order becomes paid. Checkout verification and the
gateway webhook both end here.
"""

import logging

from orderflow.core.domain import ConflictingUpdateException
from orderflow.domains.orders.application.ports import IOrderRepository
from orderflow.domains.orders.domain.entities import Order
from orderflow.domains.orders.domain.exceptions import OrderNotPayableException, SignatureInvalidException
from orderflow.domains.orders.domain.value_objects import OrderStatus, PaymentStatus

from .order_access import get_order_or_404

logger = logging.getLogger(__name__)


class SettlePaymentUseCase:
    """
    Use Case: Settle Payment

    Idempotent:
    - Already paid with the same payment id: returns the order unchanged
    - Already paid with another payment id: ConflictingUpdateException
    - Losing a concurrent write: re-reads once and applies the rules above
    """

    def __init__(self, order_repository: IOrderRepository, max_attempts: int = 2):
        self.order_repository = order_repository
        self.max_attempts = max_attempts

    async def execute(self, order_id: str, gateway_order_id: str, gateway_payment_id: str) -> Order:
        """Mark the order paid with an authenticated (gateway order, payment) pair."""
        for attempt in range(1, self.max_attempts + 1):
            order = await get_order_or_404(self.order_repository, order_id)

            if order.payment_status == PaymentStatus.PAID:
                if order.razorpay_payment_id == gateway_payment_id:
                    logger.info(f"[PAYMENT] {order.order_number} already settled by {gateway_payment_id}")
                    return order
                logger.error(
                    f"[PAYMENT] {order.order_number} already paid by {order.razorpay_payment_id}, "
                    f"rejecting second payment {gateway_payment_id}"
                )
                raise ConflictingUpdateException(
                    "Order", order_id, order.version, message=f"Order {order.order_number} is already paid"
                )

            if order.razorpay_order_id != gateway_order_id:
                logger.warning(
                    f"[PAYMENT] Gateway order mismatch for {order.order_number}: "
                    f"stored={order.razorpay_order_id} received={gateway_order_id}"
                )
                raise SignatureInvalidException("Payment does not belong to this order", order_id=order_id)

            if order.status == OrderStatus.CANCELLED or not order.payment_status.accepts_payment():
                logger.error(
                    f"[PAYMENT] Payment {gateway_payment_id} received for {order.order_number} "
                    f"in {order.status.value}/{order.payment_status.value}"
                )
                raise OrderNotPayableException(order_id, order.status.value, order.payment_status.value)

            order.mark_paid(gateway_order_id, gateway_payment_id)
            try:
                saved = await self.order_repository.save(order)
            except ConflictingUpdateException:
                if attempt == self.max_attempts:
                    raise
                logger.info(f"[PAYMENT] Concurrent write on {order.order_number}, re-reading")
                continue

            logger.info(f"[PAYMENT] {saved.order_number} paid: payment={gateway_payment_id} amount={saved.total}")
            return saved

        raise ConflictingUpdateException("Order", order_id)

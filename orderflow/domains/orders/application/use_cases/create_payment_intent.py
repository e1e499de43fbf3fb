"""
Create Payment Intent Use Case

Registers an order's total with the payment gateway.
"""

import logging

from orderflow.core.domain import ConflictingUpdateException, ForbiddenException
from orderflow.domains.orders.application.ports import IOrderRepository, IPaymentGateway
from orderflow.domains.orders.domain.entities import Order
from orderflow.domains.orders.domain.exceptions import OrderNotPayableException
from orderflow.domains.orders.domain.value_objects import ActorRole, GatewayOrder, RequestContext

from .order_access import get_order_or_404

logger = logging.getLogger(__name__)


def gateway_order_for(order: Order) -> GatewayOrder:
    """The gateway order already attached to an order, rebuilt from stored fields."""
    return GatewayOrder(
        id=order.razorpay_order_id or "",
        amount=order.total,
        currency=order.currency,
        receipt=order.order_number,
    )


class CreatePaymentIntentUseCase:
    """
    Use Case: Create Payment Intent

    - Amount sent is exactly `order.total` in minor units
    - An order keeps one gateway order; retries reuse it without calling the gateway
    - The gateway call carries an idempotency key derived from the order id
    - Timeouts and network errors surface as GatewayUnavailableException, never retried here
    """

    def __init__(self, order_repository: IOrderRepository, payment_gateway: IPaymentGateway):
        """
        Initialize use case with dependencies.

        Args:
            order_repository: Repository for order data access
            payment_gateway: External payment gateway
        """
        self.order_repository = order_repository
        self.payment_gateway = payment_gateway

    async def execute(self, order_id: str, actor: RequestContext) -> tuple[Order, GatewayOrder]:
        order = await get_order_or_404(self.order_repository, order_id)

        if actor.role != ActorRole.ADMIN and order.customer_id != actor.user_id:
            raise ForbiddenException("create_payment_intent", f"order {order_id}", "only the buyer can pay")
        if not order.is_payable():
            raise OrderNotPayableException(order.id or order_id, order.status.value, order.payment_status.value)

        if order.razorpay_order_id:
            logger.info(f"[PAYMENT] Reusing gateway order {order.razorpay_order_id} for {order.order_number}")
            return order, gateway_order_for(order)

        gateway_order = await self.payment_gateway.create_order(
            amount=order.total,
            currency=order.currency,
            receipt=order.order_number,
            idempotency_key=f"order-{order.id}",
        )
        logger.info(
            f"[PAYMENT] Gateway order {gateway_order.id} created for {order.order_number} "
            f"amount={gateway_order.amount} {gateway_order.currency}"
        )

        order.attach_gateway_order(gateway_order.id)
        try:
            order = await self.order_repository.save(order)
        except ConflictingUpdateException:
            # Another request attached first; the winner's gateway order is the one to use
            current = await get_order_or_404(self.order_repository, order_id)
            if current.razorpay_order_id:
                logger.info(f"[PAYMENT] Lost attach race for {current.order_number}, using {current.razorpay_order_id}")
                return current, gateway_order_for(current)
            raise

        return order, gateway_order

"""
Verify Payment Use Case

Checks the checkout callback signature and settles the order.
"""

import logging
from dataclasses import dataclass

from orderflow.core.domain import ForbiddenException
from orderflow.domains.orders.application.ports import IOrderRepository, IPaymentGateway
from orderflow.domains.orders.domain.entities import Order
from orderflow.domains.orders.domain.exceptions import SignatureInvalidException
from orderflow.domains.orders.domain.value_objects import ActorRole, RequestContext

from .order_access import get_order_or_404
from .settle_payment import SettlePaymentUseCase

logger = logging.getLogger(__name__)


@dataclass
class VerifyPaymentRequest:
    """Fields returned by the gateway checkout on success."""

    order_id: str
    gateway_order_id: str
    gateway_payment_id: str
    signature: str


class VerifyPaymentUseCase:
    """
    Use Case: Verify Payment

    The signature is HMAC-SHA256 over "gateway_order_id|gateway_payment_id"
    with the server-held key secret. A mismatch leaves the order untouched.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        payment_gateway: IPaymentGateway,
        settle_payment: SettlePaymentUseCase,
    ):
        self.order_repository = order_repository
        self.payment_gateway = payment_gateway
        self.settle_payment = settle_payment

    async def execute(self, request: VerifyPaymentRequest, actor: RequestContext) -> Order:
        order = await get_order_or_404(self.order_repository, request.order_id)

        if actor.role != ActorRole.ADMIN and order.customer_id != actor.user_id:
            raise ForbiddenException("verify_payment", f"order {request.order_id}", "only the buyer can verify")

        if order.razorpay_order_id != request.gateway_order_id:
            logger.warning(
                f"[PAYMENT] Verify for {order.order_number} with foreign gateway order {request.gateway_order_id}"
            )
            raise SignatureInvalidException("Payment does not belong to this order", order_id=request.order_id)

        if not self.payment_gateway.verify_payment_signature(
            request.gateway_order_id, request.gateway_payment_id, request.signature
        ):
            logger.warning(
                f"[PAYMENT] Invalid signature for {order.order_number} payment {request.gateway_payment_id}"
            )
            raise SignatureInvalidException(order_id=request.order_id)

        return await self.settle_payment.execute(
            order_id=request.order_id,
            gateway_order_id=request.gateway_order_id,
            gateway_payment_id=request.gateway_payment_id,
        )

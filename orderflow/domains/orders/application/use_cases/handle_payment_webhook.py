"""
Handle Payment Webhook Use Case

Applies gateway payment events. Captured or authorized payments go
through the same settlement path as checkout verification, so a webhook
and a client callback racing on one payment converge on one result.
"""

import logging
from dataclasses import dataclass

from orderflow.core.domain import DomainException
from orderflow.domains.orders.application.dto import WebhookResult
from orderflow.domains.orders.application.ports import (
    IOrderRepository,
    IPaymentGateway,
    IWebhookDeduplicator,
)
from orderflow.domains.orders.domain.exceptions import SignatureInvalidException

from .settle_payment import SettlePaymentUseCase

logger = logging.getLogger(__name__)

SETTLING_EVENTS = frozenset({"payment.captured", "payment.authorized"})
FAILED_EVENT = "payment.failed"


@dataclass
class PaymentEvent:
    """The parts of a gateway payment event the engine uses."""

    event_id: str
    event: str
    payment_id: str
    gateway_order_id: str | None
    amount: int
    currency: str
    status: str | None = None


class HandlePaymentWebhookUseCase:
    """
    Use Case: Handle Payment Webhook

    - Body signature checked with the webhook secret before anything else
    - Events are processed once; replays get the recorded outcome
    - Processing errors release the event so the gateway's retry is handled
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        payment_gateway: IPaymentGateway,
        settle_payment: SettlePaymentUseCase,
        deduplicator: IWebhookDeduplicator,
    ):
        self.order_repository = order_repository
        self.payment_gateway = payment_gateway
        self.settle_payment = settle_payment
        self.deduplicator = deduplicator

    def authenticate(self, body: bytes, signature: str | None) -> None:
        """Raise SignatureInvalidException unless the body was signed by the gateway."""
        if not signature or not self.payment_gateway.verify_webhook_signature(body, signature):
            logger.warning("[RAZORPAY-WEBHOOK] Rejected webhook with invalid signature")
            raise SignatureInvalidException("Webhook signature verification failed")

    async def execute(self, event: PaymentEvent) -> WebhookResult:
        is_duplicate, previous = await self.deduplicator.check_and_lock(event.event_id)
        if is_duplicate:
            logger.info(f"[RAZORPAY-WEBHOOK] Duplicate event {event.event_id} ({previous or 'in progress'})")
            return WebhookResult(status="duplicate", event=event.event, details={"previous": previous})

        try:
            result = await self._dispatch(event)
        except Exception as e:
            await self.deduplicator.mark_failed(event.event_id, str(e))
            raise

        await self.deduplicator.mark_complete(event.event_id, result.status)
        return result

    async def _dispatch(self, event: PaymentEvent) -> WebhookResult:
        if event.event not in SETTLING_EVENTS and event.event != FAILED_EVENT:
            logger.debug(f"[RAZORPAY-WEBHOOK] Ignoring event {event.event}")
            return WebhookResult(status="ignored", event=event.event)

        if not event.gateway_order_id:
            logger.warning(f"[RAZORPAY-WEBHOOK] Payment {event.payment_id} has no order id")
            return WebhookResult(status="ignored", event=event.event)

        order = await self.order_repository.get_by_gateway_order_id(event.gateway_order_id)
        if order is None or order.id is None:
            logger.warning(f"[RAZORPAY-WEBHOOK] No order for gateway order {event.gateway_order_id}")
            return WebhookResult(status="unknown_order", event=event.event)

        if event.event == FAILED_EVENT:
            if order.mark_payment_failed():
                await self.order_repository.save(order)
                logger.info(f"[RAZORPAY-WEBHOOK] {order.order_number} payment {event.payment_id} failed")
                return WebhookResult(status="payment_failed", event=event.event, order_id=order.id)
            return WebhookResult(status="ignored", event=event.event, order_id=order.id)

        if event.amount != order.total or event.currency != order.currency:
            logger.error(
                f"[RAZORPAY-WEBHOOK] Amount mismatch for {order.order_number}: "
                f"expected {order.total} {order.currency}, got {event.amount} {event.currency}"
            )
            return WebhookResult(
                status="rejected",
                event=event.event,
                order_id=order.id,
                details={"reason": "AMOUNT_MISMATCH"},
            )

        try:
            settled = await self.settle_payment.execute(
                order_id=order.id,
                gateway_order_id=event.gateway_order_id,
                gateway_payment_id=event.payment_id,
            )
        except DomainException as e:
            # Definitive business outcome; a retry would get the same answer
            logger.error(f"[RAZORPAY-WEBHOOK] Could not settle {order.order_number}: {e.code} {e.message}")
            return WebhookResult(status="rejected", event=event.event, order_id=order.id, details={"reason": e.code})

        return WebhookResult(status="settled", event=event.event, order_id=settled.id)

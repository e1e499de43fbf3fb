"""
Razorpay Webhook Endpoint

Receives payment events from Razorpay. The body signature is checked against
the raw bytes before the payload is parsed.

Razorpay retries on any non-2xx answer, so only authentication failures and
malformed payloads answer with an error; business outcomes answer 200.
"""

import hashlib
import logging
from typing import Any

from fastapi import APIRouter, Depends, Header, Request
from pydantic import BaseModel, Field, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from orderflow.api.dependencies import get_container
from orderflow.config.settings import Settings, get_settings
from orderflow.core.cache import get_redis_client
from orderflow.core.container import OrdersContainer
from orderflow.core.domain import ValidationException
from orderflow.database.async_db import get_async_db
from orderflow.domains.orders.application.ports import IWebhookDeduplicator
from orderflow.domains.orders.application.use_cases import PaymentEvent
from orderflow.domains.orders.infrastructure.services import RedisWebhookDeduplicator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


class RazorpayPaymentEntity(BaseModel):
    id: str
    amount: int
    currency: str
    status: str | None = None
    order_id: str | None = None


class RazorpayPaymentWrapper(BaseModel):
    entity: RazorpayPaymentEntity


class RazorpayEventPayload(BaseModel):
    payment: RazorpayPaymentWrapper | None = None


class RazorpayWebhookPayload(BaseModel):
    """Razorpay event envelope; only the payment entity is read."""

    event: str
    account_id: str | None = None
    contains: list[str] = Field(default_factory=list)
    payload: RazorpayEventPayload = Field(default_factory=RazorpayEventPayload)
    created_at: int | None = None


async def get_webhook_deduplicator(settings: Settings = Depends(get_settings)) -> IWebhookDeduplicator:  # noqa: B008
    redis = await get_redis_client()
    return RedisWebhookDeduplicator(redis, completed_ttl_seconds=settings.WEBHOOK_DEDUP_TTL_SECONDS)


def _to_payment_event(event_id: str, payload: RazorpayWebhookPayload) -> PaymentEvent | None:
    if payload.payload.payment is None:
        return None
    payment = payload.payload.payment.entity
    return PaymentEvent(
        event_id=event_id,
        event=payload.event,
        payment_id=payment.id,
        gateway_order_id=payment.order_id,
        amount=payment.amount,
        currency=payment.currency,
        status=payment.status,
    )


@router.post("/razorpay")
async def razorpay_webhook(
    request: Request,
    x_razorpay_signature: str | None = Header(None),
    x_razorpay_event_id: str | None = Header(None),
    db: AsyncSession = Depends(get_async_db),  # noqa: B008
    container: OrdersContainer = Depends(get_container),  # noqa: B008
    deduplicator: IWebhookDeduplicator = Depends(get_webhook_deduplicator),  # noqa: B008
) -> dict[str, Any]:
    """
    Handle a Razorpay webhook.

    Returns:
        {"status": settled | payment_failed | duplicate | ignored | unknown_order | rejected, ...}
    """
    body = await request.body()
    use_case = container.create_handle_payment_webhook_use_case(db, deduplicator)

    use_case.authenticate(body, x_razorpay_signature)

    try:
        payload = RazorpayWebhookPayload.model_validate_json(body)
    except ValidationError as e:
        logger.warning(f"[RAZORPAY-WEBHOOK] Malformed payload: {e.error_count()} errors")
        raise ValidationException("Malformed webhook payload") from e

    # Redeliveries keep the same event id header; fall back to the body digest
    event_id = x_razorpay_event_id or hashlib.sha256(body).hexdigest()
    logger.info(f"[RAZORPAY-WEBHOOK] Received {payload.event} ({event_id})")

    event = _to_payment_event(event_id, payload)
    if event is None:
        logger.debug(f"[RAZORPAY-WEBHOOK] Event {payload.event} carries no payment, ignoring")
        return {"status": "ignored", "event": payload.event}

    result = await use_case.execute(event)
    response: dict[str, Any] = {"status": result.status, "event": result.event}
    if result.order_id:
        response["order_id"] = result.order_id
    if result.details:
        response.update(result.details)
    return response

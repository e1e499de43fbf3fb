"""
Razorpay Payment Gateway Adapter

Implements IPaymentGateway on top of RazorpayClient plus HMAC-SHA256
signature checks for checkout callbacks and webhooks.
"""

import hashlib
import hmac
import logging

from orderflow.clients.razorpay_client import (
    RazorpayClient,
    RazorpayConnectionError,
    RazorpayError,
    RazorpayTimeoutError,
)
from orderflow.config.settings import Settings, get_settings
from orderflow.core.domain import IntegrationException
from orderflow.domains.orders.application.ports import IPaymentGateway
from orderflow.domains.orders.domain.exceptions import GatewayUnavailableException
from orderflow.domains.orders.domain.value_objects import GatewayOrder

logger = logging.getLogger(__name__)


def hmac_sha256_hex(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


class RazorpayGateway(IPaymentGateway):
    """
    Razorpay adapter.

    Checkout signature: HMAC-SHA256 over "<order_id>|<payment_id>" keyed
    with the API key secret. Webhook signature: HMAC-SHA256 over the raw
    request body keyed with the webhook secret. Both are compared in
    constant time.
    """

    def __init__(self, settings: Settings | None = None, client: RazorpayClient | None = None):
        self.settings = settings or get_settings()
        self._client = client or RazorpayClient(self.settings)

    async def create_order(self, amount: int, currency: str, receipt: str, idempotency_key: str) -> GatewayOrder:
        try:
            async with self._client as client:
                data = await client.create_order(
                    amount=amount,
                    currency=currency,
                    receipt=receipt,
                    idempotency_key=idempotency_key,
                    notes={"receipt": receipt},
                )
        except RazorpayTimeoutError as e:
            raise GatewayUnavailableException("Payment gateway timed out", e, timed_out=True) from e
        except RazorpayConnectionError as e:
            raise GatewayUnavailableException("Payment gateway unreachable", e) from e
        except RazorpayError as e:
            raise IntegrationException("razorpay", e.error_message, e) from e

        try:
            gateway_order = GatewayOrder(
                id=data["id"],
                amount=int(data["amount"]),
                currency=data.get("currency", currency),
                receipt=data.get("receipt") or receipt,
                status=data.get("status", "created"),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"[RAZORPAY] Malformed order response for receipt {receipt}: {data!r}")
            raise IntegrationException("razorpay", "Malformed gateway order response", e) from e
        if gateway_order.amount != amount:
            logger.error(f"[RAZORPAY] Order {gateway_order.id} amount {gateway_order.amount} != requested {amount}")
            raise IntegrationException("razorpay", "Gateway order amount does not match the requested amount")
        return gateway_order

    def verify_payment_signature(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
        if not signature:
            return False
        expected = hmac_sha256_hex(self.settings.RAZORPAY_KEY_SECRET, f"{gateway_order_id}|{gateway_payment_id}".encode())
        valid = hmac.compare_digest(expected.encode(), signature.encode())
        if not valid:
            logger.warning(f"[RAZORPAY] Invalid checkout signature for {gateway_order_id}/{gateway_payment_id}")
        return valid

    def verify_webhook_signature(self, body: bytes, signature: str) -> bool:
        if not signature:
            return False
        expected = hmac_sha256_hex(self.settings.RAZORPAY_WEBHOOK_SECRET, body)
        valid = hmac.compare_digest(expected.encode(), signature.encode())
        if not valid:
            logger.warning("[RAZORPAY] Invalid webhook signature")
        return valid

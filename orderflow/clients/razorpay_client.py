"""
Razorpay API Client

Async client for the Razorpay Orders API using HTTP Basic auth.

Connection Details:
    - Base URL: https://api.razorpay.com/v1
    - Auth: Basic (key_id:key_secret)

Endpoints:
    - POST /orders - Create a gateway order for an amount in paise

Documentation:
    - https://razorpay.com/docs/api/orders/
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from orderflow.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class RazorpayError(Exception):
    """
    Base exception for Razorpay errors.

    Attributes:
        error_code: Machine-readable error code
        error_message: Human-readable error description
    """

    def __init__(self, error_code: str, error_message: str):
        self.error_code = error_code
        self.error_message = error_message
        super().__init__(f"{error_code}: {error_message}")


class RazorpayAuthError(RazorpayError):
    """Authentication error (invalid key id or secret)."""

    def __init__(self, message: str = "Invalid API key or secret"):
        super().__init__("AUTH_ERROR", message)


class RazorpayConnectionError(RazorpayError):
    """Network connectivity issues."""

    def __init__(self, message: str, error_code: str = "CONNECTION_ERROR"):
        super().__init__(error_code, message)


class RazorpayTimeoutError(RazorpayConnectionError):
    """The gateway did not answer in time."""

    def __init__(self, message: str):
        super().__init__(message, error_code="TIMEOUT")


class RazorpayValidationError(RazorpayError):
    """Request rejected by the gateway as invalid."""

    def __init__(self, message: str):
        super().__init__("VALIDATION_ERROR", message)


class RazorpayClient:
    """
    Async HTTP client for the Razorpay API.

    Environment Variables:
        RAZORPAY_API_BASE: API base URL
        RAZORPAY_KEY_ID: Key id used as the Basic auth user
        RAZORPAY_KEY_SECRET: Key secret used as the Basic auth password
        PAYMENT_GATEWAY_TIMEOUT: Request timeout in seconds (default: 10)

    Example:
        async with RazorpayClient() as client:
            order = await client.create_order(
                amount=59000,
                currency="INR",
                receipt="ORD-20240101-AB12CD",
            )
            # order["id"] is handed to the checkout widget
    """

    def __init__(self, settings: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None):
        """Initialize Razorpay client with settings."""
        settings = settings or get_settings()

        self._base_url = settings.RAZORPAY_API_BASE.rstrip("/")
        self._key_id = settings.RAZORPAY_KEY_ID
        self._key_secret = settings.RAZORPAY_KEY_SECRET
        self._timeout = settings.PAYMENT_GATEWAY_TIMEOUT
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> RazorpayClient:
        """Enter async context and create HTTP client."""
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            auth=(self._key_id, self._key_secret),
            headers={"Content-Type": "application/json"},
            timeout=self._timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args) -> None:
        """Exit async context and close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
        idempotency_key: str | None = None,
        notes: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """
        Create a gateway order.

        Args:
            amount: Amount in the currency's minor unit (paise for INR)
            currency: ISO currency code
            receipt: Our reference, the order number
            idempotency_key: Sent as `Idempotency-Key` so a retried request
                returns the order created by the first one
            notes: Optional key/value notes stored on the gateway order

        Returns:
            Gateway order payload (id, amount, currency, receipt, status, ...)

        Raises:
            RazorpayAuthError: Invalid credentials
            RazorpayValidationError: Invalid request parameters
            RazorpayTimeoutError: Request timed out
            RazorpayConnectionError: Network error
        """
        if amount <= 0:
            raise RazorpayValidationError("Amount must be greater than zero")

        payload: dict[str, Any] = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
        }
        if notes:
            payload["notes"] = notes

        headers = {"Idempotency-Key": idempotency_key} if idempotency_key else None

        logger.info(f"Creating Razorpay order: amount={amount} {currency}, receipt={receipt}")
        data = await self._request("POST", "/orders", json=payload, headers=headers)
        logger.info(f"Razorpay order created: {data.get('id')}")
        return data

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        if not self._client:
            raise RazorpayError("CLIENT_NOT_INITIALIZED", "Client not initialized. Use 'async with' context.")

        try:
            response = await self._client.request(method, path, json=json, headers=headers)

            if response.status_code == 401:
                raise RazorpayAuthError()

            if response.status_code == 400:
                raise RazorpayValidationError(self._error_description(response))

            if response.status_code == 404:
                raise RazorpayError("NOT_FOUND", self._error_description(response))

            response.raise_for_status()
            return response.json()

        except httpx.TimeoutException as e:
            logger.error(f"Razorpay timeout on {method} {path}: {e}")
            raise RazorpayTimeoutError(f"Razorpay request timed out: {e}") from e

        except httpx.TransportError as e:
            logger.error(f"Razorpay connection error on {method} {path}: {e}")
            raise RazorpayConnectionError(f"Could not connect to Razorpay: {e}") from e

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"Razorpay HTTP {status} on {method} {path}")
            if status >= 500:
                raise RazorpayConnectionError(f"Razorpay returned HTTP {status}", error_code=f"HTTP_{status}") from e
            raise RazorpayError(f"HTTP_{status}", self._error_description(e.response)) from e

    @staticmethod
    def _error_description(response: httpx.Response) -> str:
        try:
            error = response.json().get("error") or {}
        except ValueError:
            return response.text or "Unknown error"
        return error.get("description") or error.get("code") or "Unknown error"

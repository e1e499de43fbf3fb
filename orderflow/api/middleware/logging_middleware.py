"""
Request logging middleware.

One line per API call with the caller's correlation id, so a checkout can be
followed from order creation through payment verification and the webhook.
"""

import logging
import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

# Probes and docs are not worth a log line
QUIET_PREFIXES: tuple[str, ...] = ("/health", "/favicon.ico", "/api/v1/docs", "/api/v1/openapi.json")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status and duration and echoes the correlation id."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex[:12]
        request.state.correlation_id = correlation_id
        path = request.url.path

        if path.startswith(QUIET_PREFIXES):
            response = await call_next(request)
            response.headers[CORRELATION_HEADER] = correlation_id
            return response

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.exception(f"[{correlation_id}] {request.method} {path} raised after {elapsed_ms:.1f}ms")
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        logger.log(
            level,
            f"[{correlation_id}] {request.method} {path} -> {response.status_code} "
            f"({elapsed_ms:.1f}ms, client={client_address(request)})",
        )

        response.headers[CORRELATION_HEADER] = correlation_id
        return response


def client_address(request: Request) -> str:
    """First X-Forwarded-For hop, else the socket peer."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"

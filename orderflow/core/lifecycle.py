"""
Startup and shutdown of the shared clients.

The database engine and the Redis pool are module-level singletons created
on first use; the lifespan checks the database once and closes both on exit.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from orderflow.config.settings import Settings, get_settings
from orderflow.core.cache import close_redis_client
from orderflow.database.async_db import check_database_connection, dispose_async_engine

logger = logging.getLogger(__name__)


def warn_on_suspicious_settings(settings: Settings) -> None:
    """Settings that validate but are probably a deployment mistake."""
    if settings.RAZORPAY_KEY_ID.startswith("rzp_test_") and not settings.is_development:
        logger.warning(f"Razorpay test key in use with ENVIRONMENT={settings.ENVIRONMENT}")
    if not settings.RAZORPAY_WEBHOOK_SECRET:
        logger.warning("RAZORPAY_WEBHOOK_SECRET is empty, every webhook will be rejected")
    if not settings.SHIPPING_ENABLED:
        logger.info("Shipping charges disabled until an admin enables them")
    if not settings.SENTRY_DSN:
        logger.info("SENTRY_DSN not set, error tracking disabled")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    logger.info(f"Starting {settings.PROJECT_NAME} ({settings.ENVIRONMENT})")
    warn_on_suspicious_settings(settings)

    if not await check_database_connection():
        # /health keeps answering; database-backed routes fail until it is back
        logger.error("Database unreachable at startup")

    try:
        yield
    finally:
        await close_redis_client()
        await dispose_async_engine()
        logger.info("Shared clients closed")

"""
Redis Integration

Shared async Redis client.
"""

import logging

import redis.asyncio as aioredis

from orderflow.config.settings import get_settings

logger = logging.getLogger(__name__)

_redis_client: aioredis.Redis | None = None


async def get_redis_client() -> aioredis.Redis:
    """
    Get the async Redis client (singleton).

    Connections are opened lazily by the pool on first command.
    """
    global _redis_client

    if _redis_client is None:
        settings = get_settings()
        _redis_client = aioredis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_timeout=5.0,
            socket_connect_timeout=5.0,
        )
        logger.info(f"Async Redis client created: {settings.REDIS_HOST}:{settings.REDIS_PORT}")

    return _redis_client


async def close_redis_client() -> None:
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        logger.info("Async Redis client closed")
    _redis_client = None

"""
Webhook Deduplicator

Redis-based deduplication of Razorpay webhook deliveries. Razorpay retries
a webhook until it gets a 2xx, and may deliver the same event twice.

Key Design:
- Redis SET with NX (only set if not exists) + PX (expire in milliseconds)
- "processing" while an event is handled, "outcome:<status>" once done
- A failed event releases its key so the gateway's retry is processed

Usage in webhook:
    dedup = RedisWebhookDeduplicator(redis)
    is_duplicate, previous = await dedup.check_and_lock(event_id)
    if is_duplicate:
        return {"status": "duplicate", "outcome": previous}
    ...
    await dedup.mark_complete(event_id, "settled")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from orderflow.domains.orders.application.ports import IWebhookDeduplicator

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)

EVENT_KEY_PREFIX = "razorpay:event"

# Lock held while one worker handles an event
PROCESSING_LOCK_TTL_MS = 5 * 60 * 1000  # 5 minutes

PROCESSING = "processing"
OUTCOME_PREFIX = "outcome:"


class RedisWebhookDeduplicator(IWebhookDeduplicator):
    """
    States of an event key:
    - Not found: event not seen before
    - "processing": another worker is handling it
    - "outcome:XXX": handled, XXX is the result status
    """

    def __init__(self, redis_client: Redis, completed_ttl_seconds: int = 24 * 60 * 60):
        self._redis = redis_client
        self._completed_ttl_ms = completed_ttl_seconds * 1000

    def _get_key(self, event_id: str) -> str:
        return f"{EVENT_KEY_PREFIX}:{event_id}"

    async def check_and_lock(self, event_id: str) -> tuple[bool, str | None]:
        """
        Returns (False, None) when the lock was acquired, (True, None) when
        another worker holds it and (True, outcome) when already handled.
        """
        key = self._get_key(event_id)

        existing = await self._redis.get(key)
        if existing:
            existing_str = existing.decode() if isinstance(existing, bytes) else str(existing)

            if existing_str == PROCESSING:
                logger.warning(f"[WEBHOOK] Event {event_id} is currently being processed")
                return (True, None)

            if existing_str.startswith(OUTCOME_PREFIX):
                outcome = existing_str.split(":", 1)[1]
                logger.info(f"[WEBHOOK] Event {event_id} already processed: {outcome}")
                return (True, outcome)

            logger.warning(f"[WEBHOOK] Event {event_id} has unknown value: {existing_str}")
            return (True, None)

        acquired = await self._redis.set(key, PROCESSING, nx=True, px=PROCESSING_LOCK_TTL_MS)
        if acquired:
            logger.debug(f"[WEBHOOK] Acquired lock for event {event_id}")
            return (False, None)

        logger.info(f"[WEBHOOK] Lost race for event {event_id}")
        return (True, None)

    async def mark_complete(self, event_id: str, outcome: str) -> None:
        await self._redis.set(self._get_key(event_id), f"{OUTCOME_PREFIX}{outcome}", px=self._completed_ttl_ms)
        logger.info(f"[WEBHOOK] Marked event {event_id} complete: {outcome}")

    async def mark_failed(self, event_id: str, error: str) -> None:
        """Remove the lock so a redelivery is processed. The error is only logged."""
        await self._redis.delete(self._get_key(event_id))
        logger.warning(f"[WEBHOOK] Removed lock for failed event {event_id}: {error}")

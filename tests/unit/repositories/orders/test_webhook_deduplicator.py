"""
Unit tests for RedisWebhookDeduplicator.
"""

from unittest.mock import AsyncMock

import pytest

from orderflow.domains.orders.infrastructure.services import RedisWebhookDeduplicator
from orderflow.domains.orders.infrastructure.services.webhook_deduplicator import PROCESSING_LOCK_TTL_MS


@pytest.fixture
def mock_redis():
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    return redis


@pytest.fixture
def deduplicator_under_test(mock_redis):
    return RedisWebhookDeduplicator(mock_redis, completed_ttl_seconds=60)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_first_delivery_acquires_lock(deduplicator_under_test, mock_redis):
    """Test an unseen event takes the processing lock with NX and a TTL."""
    result = await deduplicator_under_test.check_and_lock("evt_001")

    assert result == (False, None)
    mock_redis.set.assert_called_once_with("razorpay:event:evt_001", "processing", nx=True, px=PROCESSING_LOCK_TTL_MS)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_event_in_progress(deduplicator_under_test, mock_redis):
    mock_redis.get.return_value = b"processing"

    assert await deduplicator_under_test.check_and_lock("evt_001") == (True, None)
    mock_redis.set.assert_not_called()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_completed_event_returns_outcome(deduplicator_under_test, mock_redis):
    mock_redis.get.return_value = b"outcome:settled"

    assert await deduplicator_under_test.check_and_lock("evt_001") == (True, "settled")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_lost_race_is_duplicate(deduplicator_under_test, mock_redis):
    """Test losing the SET NX to another worker reports a duplicate."""
    mock_redis.set.return_value = None

    assert await deduplicator_under_test.check_and_lock("evt_001") == (True, None)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_mark_complete_stores_outcome(deduplicator_under_test, mock_redis):
    await deduplicator_under_test.mark_complete("evt_001", "settled")

    mock_redis.set.assert_called_once_with("razorpay:event:evt_001", "outcome:settled", px=60_000)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_mark_failed_releases_lock(deduplicator_under_test, mock_redis):
    await deduplicator_under_test.mark_failed("evt_001", "database unavailable")

    mock_redis.delete.assert_called_once_with("razorpay:event:evt_001")

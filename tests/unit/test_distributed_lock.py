"""
Unit tests for the Redis distributed lock.
"""

import pytest
from redis.exceptions import RedisError

from ledger_core.utils.distributed_lock import DistributedLock


class TestDistributedLock:
    """Test lock acquisition and release."""

    @pytest.mark.asyncio
    async def test_without_redis_proceeds(self):
        lock = DistributedLock(redis_client=None)

        async with lock.lock("accrual") as acquired:
            assert acquired is True

    @pytest.mark.asyncio
    async def test_acquire_and_release(self, mock_redis_client):
        lock = DistributedLock(redis_client=mock_redis_client)

        async with lock.lock("accrual", timeout=30) as acquired:
            assert acquired is True

        args, kwargs = mock_redis_client.set.call_args
        assert args[0] == "lock:accrual"
        assert kwargs == {"nx": True, "px": 30_000}
        mock_redis_client.eval.assert_awaited_once()
        assert mock_redis_client.eval.call_args.args[2] == "lock:accrual"

    @pytest.mark.asyncio
    async def test_busy_lock_not_acquired(self, mock_redis_client):
        mock_redis_client.set.return_value = None
        lock = DistributedLock(redis_client=mock_redis_client)

        async with lock.lock("accrual") as acquired:
            assert acquired is False

        mock_redis_client.eval.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_release_error_is_logged(self, mock_redis_client):
        mock_redis_client.eval.side_effect = RedisError("gone")
        lock = DistributedLock(redis_client=mock_redis_client)

        async with lock.lock("accrual") as acquired:
            assert acquired is True

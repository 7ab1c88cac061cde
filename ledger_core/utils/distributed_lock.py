"""
Distributed lock.

Redis ``SET NX PX`` lock with token-checked release. Without a Redis client
the lock degrades to a no-op (single-process runs and tests).
"""

import asyncio
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as redis
from loguru import logger
from redis.exceptions import RedisError

# Delete the key only if we still own it
_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


class DistributedLock:
    """Redis-based mutual exclusion across workers."""

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        prefix: str = "lock:",
    ) -> None:
        self.redis_client = redis_client
        self.prefix = prefix

    async def acquire(self, key: str, token: str, timeout: int) -> bool:
        """Try once to take the lock for ``timeout`` seconds."""
        if self.redis_client is None:
            return True
        acquired = await self.redis_client.set(
            self.prefix + key, token, nx=True, px=int(timeout * 1000)
        )
        return bool(acquired)

    async def release(self, key: str, token: str) -> None:
        if self.redis_client is None:
            return
        try:
            await self.redis_client.eval(
                _RELEASE_SCRIPT, 1, self.prefix + key, token
            )
        except RedisError as e:
            # Lock expires on its own TTL
            logger.warning(f"Failed to release lock {key}: {e}")

    @asynccontextmanager
    async def lock(
        self,
        key: str,
        timeout: int = 60,
        blocking: bool = False,
        blocking_timeout: float = 5.0,
    ) -> AsyncIterator[bool]:
        """
        Hold ``key`` for the duration of the block.

        Yields:
            True if the lock was acquired, False otherwise. The block runs
            either way; callers decide what to do when it is not held.
        """
        if self.redis_client is None:
            logger.warning(
                f"No Redis client for lock '{key}', proceeding without lock"
            )
            yield True
            return

        token = uuid.uuid4().hex
        acquired = await self.acquire(key, token, timeout)
        if not acquired and blocking:
            deadline = time.monotonic() + blocking_timeout
            while not acquired and time.monotonic() < deadline:
                await asyncio.sleep(0.1)
                acquired = await self.acquire(key, token, timeout)

        try:
            yield acquired
        finally:
            if acquired:
                await self.release(key, token)


def get_distributed_lock(
    redis_client: redis.Redis | None = None,
) -> DistributedLock:
    """Factory used by jobs and services."""
    return DistributedLock(redis_client=redis_client)

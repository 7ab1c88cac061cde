"""
Yield accrual task.

Enqueued by the external scheduler (cron). Runs one accrual pass under a
Redis lock so overlapping ticks never process the same investments twice
concurrently.
"""

from datetime import datetime

import dramatiq
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from jobs.async_runner import run_async
from jobs.tasks.notifications import QueueNotifier
from jobs.utils.database import task_session_maker
from ledger_core.config.constants import (
    ACCRUAL_LOCK_KEY,
    DRAMATIQ_TIME_LIMIT_ACCRUAL,
)
from ledger_core.config.settings import settings
from ledger_core.services.accrual import YieldAccrualEngine
from ledger_core.utils.datetime_utils import ensure_utc, utc_now
from ledger_core.utils.distributed_lock import DistributedLock
from ledger_core.utils.redis_utils import get_redis_client


@dramatiq.actor(max_retries=3, time_limit=DRAMATIQ_TIME_LIMIT_ACCRUAL)
def run_accrual_pass(now_iso: str | None = None) -> dict:
    """
    Run one yield accrual pass.

    Args:
        now_iso: Pass timestamp (ISO 8601). Defaults to current time.

    Returns:
        Report counters (also logged)
    """
    now = ensure_utc(datetime.fromisoformat(now_iso)) if now_iso else utc_now()
    logger.info(f"Starting accrual pass as of {now.isoformat()}")

    result = run_async(_run_accrual_pass_async(now))

    if result.get("locked"):
        logger.warning("Accrual pass skipped: another pass holds the lock")
    else:
        logger.info(
            f"Accrual pass complete: {result['processed']} processed, "
            f"{result['completed']} completed, {result['failed']} failed, "
            f"profit {result['total_profit_cents']} cents"
        )
    return result


async def _run_accrual_pass_async(
    now: datetime,
    session_maker: async_sessionmaker[AsyncSession] | None = None,
) -> dict:
    """Async implementation of the accrual pass."""
    redis_client = None
    try:
        redis_client = get_redis_client()
    except Exception as e:
        logger.warning(f"Failed to create Redis client for lock: {e}")

    lock = DistributedLock(redis_client=redis_client)
    try:
        async with lock.lock(
            ACCRUAL_LOCK_KEY, timeout=settings.accrual_lock_timeout_seconds
        ) as acquired:
            if not acquired:
                return {"locked": True}

            async with (session_maker or task_session_maker)() as session:
                engine = YieldAccrualEngine(session, notifier=QueueNotifier())
                report = await engine.run_accrual_pass(now)
                return report.to_dict()
    finally:
        if redis_client is not None:
            await redis_client.aclose()

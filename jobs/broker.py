"""
Dramatiq broker configuration.

Redis-based message broker for the worker queue. The test environment uses
an in-memory stub broker so actors can be imported and enqueued without
Redis.
"""

import dramatiq
from dramatiq.brokers.redis import RedisBroker
from dramatiq.brokers.stub import StubBroker
from dramatiq.middleware import CurrentMessage, Retries, ShutdownNotifications
from loguru import logger

from ledger_core.config.settings import settings
from ledger_core.utils.redis_utils import get_redis_url_masked


def create_broker() -> dramatiq.Broker:
    """Build the broker for the current environment."""
    if settings.environment == "test":
        return StubBroker()

    redis_broker = RedisBroker(
        host=settings.redis_host,
        port=settings.redis_port,
        password=settings.redis_password if settings.redis_password else None,
        db=settings.redis_db,
    )

    # ShutdownNotifications: Allows workers to gracefully shutdown
    # CurrentMessage: Provides access to current message in actors
    # Retries: Exponential backoff for failed tasks
    redis_broker.add_middleware(ShutdownNotifications())
    redis_broker.add_middleware(CurrentMessage())
    redis_broker.add_middleware(
        Retries(
            max_retries=3,
            min_backoff=1000,  # 1 second
            max_backoff=60000,  # 1 minute
        )
    )
    logger.info(f"Dramatiq broker initialized: {get_redis_url_masked()}")
    return redis_broker


broker = create_broker()
dramatiq.set_broker(broker)

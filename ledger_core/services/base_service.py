"""
Base service class.

Provides common functionality for all service classes: session, bound
logger, post-commit notification dispatch and the timing decorator.
"""

import functools
import time
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_core.config.settings import settings
from ledger_core.repositories.user_repository import UserRepository
from ledger_core.services.notification import (
    LoggingNotifier,
    NotificationEvent,
    NotificationKind,
    Notifier,
    dispatch_notifications,
)

# Type variable for generic decorator return types
T = TypeVar("T")


class BaseService:
    """
    Base service class.

    Services are built on one ``AsyncSession`` and open their own
    ``unit_of_work`` blocks; they never share a half-finished transaction
    with their caller.
    """

    def __init__(
        self, session: AsyncSession, notifier: Notifier | None = None
    ) -> None:
        """
        Initialize base service.

        Args:
            session: Async database session
            notifier: Post-commit notifier (logs only when omitted)
        """
        self.session = session
        self.notifier = notifier or LoggingNotifier()
        self.logger = logger.bind(service=self.__class__.__name__)

    async def notify(self, events: Iterable[NotificationEvent]) -> None:
        """Send events after commit. Never raises."""
        await dispatch_notifications(self.notifier, events)

    async def admin_events(
        self,
        kind: NotificationKind,
        amounts: dict[str, int],
        context: dict[str, Any],
    ) -> list[NotificationEvent]:
        """
        One event per admin user, or one to ``settings.admin_email`` when
        no admin account exists.
        """
        admins = await UserRepository(self.session).get_admins()
        recipients = [(admin.email, admin.name or "Admin") for admin in admins]
        if not recipients:
            recipients = [(settings.admin_email, "Admin")]

        return [
            NotificationEvent(
                kind=kind,
                recipient_email=email,
                recipient_name=name,
                amounts=amounts,
                context=context,
            )
            for email, name in recipients
        ]


def log_operation(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator to log method entry/exit with timing.

    Usage:
        @log_operation
        async def run_accrual_pass(self, now):
            ...
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        start_time = time.time()
        op_logger = self.logger.bind(function=func.__name__)

        op_logger.bind(
            args_count=len(args),
            kwargs_keys=list(kwargs.keys()),
        ).info(f"Starting {func.__name__}")

        try:
            result = await func(self, *args, **kwargs)
        except Exception as e:
            duration = time.time() - start_time
            op_logger.bind(
                duration_seconds=round(duration, 3),
                success=False,
            ).error("Failed {}: {}", func.__name__, e)
            raise

        duration = time.time() - start_time
        op_logger.bind(
            duration_seconds=round(duration, 3),
            success=True,
        ).info(f"Completed {func.__name__}")
        return result

    return wrapper

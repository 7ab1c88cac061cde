"""
Notifier interface and safe dispatch.

Notifications are side effects: they are sent only after commit, and a
failing notifier never affects the financial outcome.
"""

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from loguru import logger

from ledger_core.services.notification.events import NotificationEvent


@runtime_checkable
class Notifier(Protocol):
    """Anything that can deliver a notification event."""

    async def notify(self, event: NotificationEvent) -> None:
        ...


class LoggingNotifier:
    """Default notifier: writes the event to the log."""

    async def notify(self, event: NotificationEvent) -> None:
        logger.bind(amounts=event.amounts, context=event.context).info(
            f"Notification {event.kind.value} -> "
            f"{event.recipient_email or '<no recipient>'}"
        )


async def dispatch_notifications(
    notifier: Notifier, events: Iterable[NotificationEvent]
) -> int:
    """
    Deliver events one by one, logging and swallowing failures.

    Returns:
        Number of events delivered without error
    """
    delivered = 0
    for event in events:
        try:
            await notifier.notify(event)
            delivered += 1
        except Exception as e:
            logger.bind(
                recipient=event.recipient_email,
                context=event.context,
            ).error("Notification {} failed: {}", event.kind.value, e)
    return delivered

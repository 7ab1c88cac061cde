"""
Notification delivery task.

Services hand events to ``QueueNotifier`` after commit; the worker delivers
them through the webhook sender, retrying on failure.
"""

import dramatiq
from loguru import logger

from jobs.async_runner import run_async
from ledger_core.config.constants import DRAMATIQ_TIME_LIMIT_NOTIFICATION
from ledger_core.services.notification import (
    NotificationEvent,
    WebhookNotificationSender,
)


@dramatiq.actor(max_retries=5, time_limit=DRAMATIQ_TIME_LIMIT_NOTIFICATION)
def deliver_notification(event_data: dict) -> None:
    """
    Deliver one notification event.

    Raises on delivery failure so the Retries middleware reschedules it.

    Args:
        event_data: ``NotificationEvent.to_dict()`` payload
    """
    event = NotificationEvent.from_dict(event_data)
    run_async(_deliver_async(event))


async def _deliver_async(event: NotificationEvent) -> bool:
    sender = WebhookNotificationSender()
    try:
        return await sender.send(event)
    finally:
        await sender.close()


class QueueNotifier:
    """Notifier that enqueues events for the worker."""

    async def notify(self, event: NotificationEvent) -> None:
        deliver_notification.send(event.to_dict())
        logger.debug(
            f"Queued notification {event.kind.value} "
            f"for {event.recipient_email}"
        )

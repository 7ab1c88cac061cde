"""
Webhook notification sender.

Posts notification events as JSON to the configured delivery endpoint
(an email/push gateway). Used by the ``deliver_notification`` worker actor.
"""

import aiohttp
from loguru import logger

from ledger_core.config.settings import settings
from ledger_core.services.notification.events import NotificationEvent


class NotificationDeliveryError(Exception):
    """Delivery endpoint rejected the event or was unreachable."""


class WebhookNotificationSender:
    """
    HTTP sender for notification events.

    Raises on failure so the worker can retry; the request path never calls
    this directly.
    """

    def __init__(
        self,
        url: str | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self.url = url or settings.notification_webhook_url
        self.timeout_seconds = (
            timeout_seconds or settings.notification_timeout_seconds
        )
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def send(self, event: NotificationEvent) -> bool:
        """
        Deliver one event.

        Returns:
            True if delivered, False if skipped (no endpoint or recipient)

        Raises:
            NotificationDeliveryError: On non-2xx response or network error
        """
        if not self.url:
            logger.info(
                f"No webhook configured, notification {event.kind.value} "
                f"for {event.recipient_email} logged only"
            )
            return False
        if not event.recipient_email:
            logger.warning(
                f"Notification {event.kind.value} has no recipient, skipped"
            )
            return False

        payload = {**event.to_dict(), "client_url": settings.client_url}
        try:
            session = await self._get_session()
            async with session.post(
                self.url,
                json=payload,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                headers={"Content-Type": "application/json"},
            ) as response:
                if response.status >= 300:
                    body = await response.text()
                    raise NotificationDeliveryError(
                        f"HTTP {response.status}: {body[:200]}"
                    )
        except aiohttp.ClientError as e:
            raise NotificationDeliveryError(str(e)) from e

        logger.debug(
            f"Notification {event.kind.value} delivered to "
            f"{event.recipient_email}"
        )
        return True

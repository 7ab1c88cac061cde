"""
Notification services.

Post-commit, best-effort user and admin notifications.
"""

from ledger_core.services.notification.events import (
    NotificationEvent,
    NotificationKind,
)
from ledger_core.services.notification.notifier import (
    LoggingNotifier,
    Notifier,
    dispatch_notifications,
)
from ledger_core.services.notification.webhook import (
    NotificationDeliveryError,
    WebhookNotificationSender,
)

__all__ = [
    "LoggingNotifier",
    "NotificationDeliveryError",
    "NotificationEvent",
    "NotificationKind",
    "Notifier",
    "WebhookNotificationSender",
    "dispatch_notifications",
]

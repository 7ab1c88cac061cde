"""
Dramatiq actors.

Importing this package configures the broker and registers every actor
with it.
"""

from jobs.broker import broker  # noqa: F401  (must be set before actors load)
from jobs.tasks.accrual_pass import run_accrual_pass  # noqa: E402
from jobs.tasks.notifications import (  # noqa: E402
    QueueNotifier,
    deliver_notification,
)

__all__ = ["QueueNotifier", "broker", "deliver_notification", "run_accrual_pass"]

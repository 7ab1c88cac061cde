"""
Worker entrypoint.

Run with:
    dramatiq jobs.worker
"""

from ledger_core.config.logging import setup_logging

setup_logging()

from jobs.tasks import broker, deliver_notification, run_accrual_pass  # noqa: E402

__all__ = ["broker", "deliver_notification", "run_accrual_pass"]

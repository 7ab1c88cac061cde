"""Admin operations."""

from ledger_core.services.admin.balance_adjustment import (
    BalanceAdjustmentService,
)

__all__ = ["BalanceAdjustmentService"]

"""Balance guard and ledger reconciliation."""

from ledger_core.services.balance.guard import (
    BalanceChange,
    BalanceGuard,
    LedgerEntry,
)
from ledger_core.services.balance.reconciler import (
    LedgerReconciler,
    ReconciliationResult,
)

__all__ = [
    "BalanceChange",
    "BalanceGuard",
    "LedgerEntry",
    "LedgerReconciler",
    "ReconciliationResult",
]

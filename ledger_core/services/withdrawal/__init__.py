"""Withdrawal workflow and saved payout addresses."""

from ledger_core.services.withdrawal.addresses import WalletAddressService
from ledger_core.services.withdrawal.workflow import (
    WithdrawalSummary,
    WithdrawalWorkflow,
)

__all__ = ["WalletAddressService", "WithdrawalSummary", "WithdrawalWorkflow"]

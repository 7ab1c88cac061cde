"""Deposit request workflow."""

from ledger_core.services.deposit.workflow import DepositWorkflow

__all__ = ["DepositWorkflow"]

"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from ledger_core.models.base import Base
from ledger_core.models.enums import (
    AdjustmentAction,
    InvestmentStatus,
    TransactionStatus,
    TransactionType,
    WithdrawalStatus,
)
from ledger_core.models.investment import Investment
from ledger_core.models.plan import Plan
from ledger_core.models.platform_settings import PlatformSettings
from ledger_core.models.referral_earning import ReferralEarning
from ledger_core.models.transaction import Transaction
from ledger_core.models.user import User
from ledger_core.models.wallet_address import WalletAddress
from ledger_core.models.withdrawal import Withdrawal

__all__ = [
    "AdjustmentAction",
    "Base",
    "Investment",
    "InvestmentStatus",
    "Plan",
    "PlatformSettings",
    "ReferralEarning",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
    "User",
    "WalletAddress",
    "Withdrawal",
    "WithdrawalStatus",
]

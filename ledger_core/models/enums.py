"""
Enumerations shared by models and services.

Values are stored as plain strings in the database.
"""

from enum import StrEnum


class InvestmentStatus(StrEnum):
    """Investment lifecycle status."""

    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"  # terminal
    CANCELLED = "CANCELLED"  # terminal


class TransactionType(StrEnum):
    """
    Ledger row type.

    The sign of a row is derived from its type; amounts are always positive.
    """

    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    INVESTMENT_RETURN = "INVESTMENT_RETURN"
    REFERRAL_EARNING = "REFERRAL_EARNING"
    INVESTMENT = "INVESTMENT"  # principal moved into an investment
    CAPITAL_RETURN = "CAPITAL_RETURN"  # principal returned on completion

    @property
    def sign(self) -> int:
        """+1 for credits, -1 for debits."""
        if self in (TransactionType.WITHDRAWAL, TransactionType.INVESTMENT):
            return -1
        return 1


class TransactionStatus(StrEnum):
    """Ledger row status."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class WithdrawalStatus(StrEnum):
    """Withdrawal request status."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class AdjustmentAction(StrEnum):
    """Admin balance adjustment direction."""

    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"

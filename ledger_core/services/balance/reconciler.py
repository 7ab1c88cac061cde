"""
Ledger reconciliation.

Compares a user's stored balance with the signed sum of their COMPLETED
ledger rows. Read-only.
"""

from dataclasses import dataclass

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_core.models.user import User
from ledger_core.repositories.transaction_repository import (
    TransactionRepository,
)
from ledger_core.utils.exceptions import UserNotFound


@dataclass(frozen=True)
class ReconciliationResult:
    user_id: int
    balance_cents: int
    ledger_balance_cents: int

    @property
    def difference_cents(self) -> int:
        return self.balance_cents - self.ledger_balance_cents

    @property
    def is_consistent(self) -> bool:
        return self.difference_cents == 0


class LedgerReconciler:
    """Balance vs ledger checker."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.transaction_repo = TransactionRepository(session)

    async def reconcile(self, user_id: int) -> ReconciliationResult:
        """
        Reconcile one user.

        Raises:
            UserNotFound: No such user
        """
        balance = await self.session.scalar(
            select(User.balance_cents).where(User.id == user_id)
        )
        if balance is None:
            raise UserNotFound(f"User {user_id} not found")

        ledger_balance = await self.transaction_repo.get_completed_balance(
            user_id
        )
        result = ReconciliationResult(
            user_id=user_id,
            balance_cents=int(balance),
            ledger_balance_cents=ledger_balance,
        )
        if not result.is_consistent:
            logger.bind(difference_cents=result.difference_cents).warning(
                f"Ledger mismatch for user {user_id}: "
                f"balance={result.balance_cents}, "
                f"ledger={result.ledger_balance_cents}"
            )
        return result

    async def find_mismatches(self) -> list[ReconciliationResult]:
        """Reconcile every user and return the inconsistent ones."""
        user_ids = (
            await self.session.scalars(select(User.id).order_by(User.id))
        ).all()
        mismatches = []
        for user_id in user_ids:
            result = await self.reconcile(user_id)
            if not result.is_consistent:
                mismatches.append(result)
        return mismatches

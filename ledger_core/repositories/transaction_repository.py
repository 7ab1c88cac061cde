"""
Transaction repository.

Data access layer for the append-only ledger.
"""

from typing import Any

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_core.models.enums import TransactionStatus, TransactionType
from ledger_core.models.transaction import Transaction
from ledger_core.repositories.base import BaseRepository

# Signed amount: debits count negative
_SIGNED_AMOUNT = case(
    (
        Transaction.type.in_([
            TransactionType.WITHDRAWAL.value,
            TransactionType.INVESTMENT.value,
        ]),
        -Transaction.amount_cents,
    ),
    else_=Transaction.amount_cents,
)


class TransactionRepository(BaseRepository[Transaction]):
    """Transaction repository. Rows are inserted and settled, never deleted."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize transaction repository."""
        super().__init__(Transaction, session)

    async def create_entry(
        self,
        user_id: int,
        type: TransactionType,
        amount_cents: int,
        status: TransactionStatus,
        asset: str = "USDT",
        reference: str | None = None,
        meta: dict[str, Any] | None = None,
    ) -> Transaction:
        """Insert a ledger row."""
        return await self.create(
            user_id=user_id,
            type=type.value,
            amount_cents=amount_cents,
            status=status.value,
            asset=asset,
            reference=reference,
            meta=meta,
        )

    async def get_completed_balance(self, user_id: int) -> int:
        """Signed sum of the user's COMPLETED ledger rows."""
        stmt = select(func.coalesce(func.sum(_SIGNED_AMOUNT), 0)).where(
            Transaction.user_id == user_id,
            Transaction.status == TransactionStatus.COMPLETED.value,
        )
        result = await self.session.execute(stmt)
        return int(result.scalar() or 0)

    async def get_pending_deposits(self, limit: int = 200) -> list[Transaction]:
        """Admin queue of PENDING deposit requests, oldest first."""
        stmt = (
            select(Transaction)
            .where(
                Transaction.type == TransactionType.DEPOSIT.value,
                Transaction.status == TransactionStatus.PENDING.value,
            )
            .order_by(Transaction.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

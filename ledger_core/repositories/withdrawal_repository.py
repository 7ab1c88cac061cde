"""
Withdrawal repository.

Data access layer for Withdrawal model.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_core.models.enums import WithdrawalStatus
from ledger_core.models.withdrawal import Withdrawal
from ledger_core.repositories.base import BaseRepository


class WithdrawalRepository(BaseRepository[Withdrawal]):
    """Withdrawal repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize withdrawal repository."""
        super().__init__(Withdrawal, session)

    async def get_pending_total(self, user_id: int) -> int:
        """Sum of the user's PENDING withdrawal amounts in cents."""
        stmt = select(
            func.coalesce(func.sum(Withdrawal.amount_cents), 0)
        ).where(
            Withdrawal.user_id == user_id,
            Withdrawal.status == WithdrawalStatus.PENDING.value,
        )
        result = await self.session.execute(stmt)
        return int(result.scalar() or 0)

    async def get_pending(self, limit: int = 200) -> list[Withdrawal]:
        """Admin queue of PENDING withdrawals, oldest first."""
        stmt = (
            select(Withdrawal)
            .where(Withdrawal.status == WithdrawalStatus.PENDING.value)
            .order_by(Withdrawal.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

"""
Investment repository.

Data access layer for Investment model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_core.models.enums import InvestmentStatus
from ledger_core.models.investment import Investment
from ledger_core.models.plan import Plan
from ledger_core.repositories.base import BaseRepository


class InvestmentRepository(BaseRepository[Investment]):
    """Investment repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize investment repository."""
        super().__init__(Investment, session)

    async def get_active_ids(self) -> list[int]:
        """IDs of all ACTIVE investments, oldest first."""
        stmt = (
            select(Investment.id)
            .where(Investment.status == InvestmentStatus.ACTIVE.value)
            .order_by(Investment.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def has_used_plan(self, user_id: int, plan_id: int) -> bool:
        """
        True if the user holds an ACTIVE or COMPLETED investment in the plan.

        CANCELLED investments do not consume the plan.
        """
        stmt = (
            select(Investment.id)
            .where(
                Investment.user_id == user_id,
                Investment.plan_id == plan_id,
                Investment.status.in_([
                    InvestmentStatus.ACTIVE.value,
                    InvestmentStatus.COMPLETED.value,
                ]),
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def get_active_fixed_term(self) -> list[Investment]:
        """ACTIVE investments whose plan has a fixed duration."""
        stmt = (
            select(Investment)
            .join(Plan, Plan.id == Investment.plan_id)
            .where(
                Investment.status == InvestmentStatus.ACTIVE.value,
                Plan.duration_days.is_not(None),
            )
            .order_by(Investment.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

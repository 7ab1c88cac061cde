"""
ReferralEarning repository.

Data access layer for ReferralEarning model.
"""

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_core.models.referral_earning import ReferralEarning
from ledger_core.models.user import User
from ledger_core.repositories.base import BaseRepository


@dataclass(frozen=True)
class LeaderboardRow:
    """Aggregated referral earnings of one user."""

    user_id: int
    email: str
    name: str | None
    total_cents: int
    earnings_count: int


class ReferralEarningRepository(BaseRepository[ReferralEarning]):
    """ReferralEarning repository. Rows are never updated."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral earning repository."""
        super().__init__(ReferralEarning, session)

    async def get_by_earner(
        self, earner_id: int, limit: int = 100
    ) -> list[ReferralEarning]:
        """Earnings of a referrer, newest first."""
        stmt = (
            select(ReferralEarning)
            .where(ReferralEarning.earner_id == earner_id)
            .order_by(ReferralEarning.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_total_for_earner(self, earner_id: int) -> int:
        """Sum of all commissions earned, in cents."""
        stmt = select(
            func.coalesce(func.sum(ReferralEarning.amount_cents), 0)
        ).where(ReferralEarning.earner_id == earner_id)
        result = await self.session.execute(stmt)
        return int(result.scalar() or 0)

    async def get_leaderboard(self, limit: int = 20) -> list[LeaderboardRow]:
        """Top earners by total commission."""
        total = func.sum(ReferralEarning.amount_cents).label("total")
        stmt = (
            select(
                User.id,
                User.email,
                User.name,
                total,
                func.count(ReferralEarning.id),
            )
            .join(User, User.id == ReferralEarning.earner_id)
            .group_by(User.id, User.email, User.name)
            .order_by(total.desc(), User.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [
            LeaderboardRow(
                user_id=row[0],
                email=row[1],
                name=row[2],
                total_cents=int(row[3] or 0),
                earnings_count=int(row[4]),
            )
            for row in result.all()
        ]

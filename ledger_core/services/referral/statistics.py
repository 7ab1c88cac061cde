"""
Referral statistics.

Read-only views over the referral tree and earnings.
"""

from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_core.config.constants import REFERRAL_LEADERBOARD_LIMIT
from ledger_core.models.referral_earning import ReferralEarning
from ledger_core.repositories.referral_earning_repository import (
    LeaderboardRow,
    ReferralEarningRepository,
)
from ledger_core.repositories.user_repository import UserRepository
from ledger_core.utils.exceptions import UserNotFound


@dataclass
class ReferralSummary:
    """Referral overview for one user."""

    user_id: int
    referral_code: str | None
    direct_referrals: int
    total_earnings_cents: int
    earnings: list[ReferralEarning] = field(default_factory=list)


class ReferralStatsService:
    """Referral summary and leaderboard."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.user_repo = UserRepository(session)
        self.earning_repo = ReferralEarningRepository(session)

    async def summary(
        self, user_id: int, earnings_limit: int = 100
    ) -> ReferralSummary:
        """
        Referral count, lifetime commission and latest earnings.

        Raises:
            UserNotFound: No such user
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFound(f"User {user_id} not found")

        return ReferralSummary(
            user_id=user.id,
            referral_code=user.referral_code,
            direct_referrals=await self.user_repo.count_direct_referrals(
                user.id
            ),
            total_earnings_cents=await self.earning_repo.get_total_for_earner(
                user.id
            ),
            earnings=await self.earning_repo.get_by_earner(
                user.id, limit=earnings_limit
            ),
        )

    async def leaderboard(
        self, limit: int = REFERRAL_LEADERBOARD_LIMIT
    ) -> list[LeaderboardRow]:
        """Top earners by total commission."""
        return await self.earning_repo.get_leaderboard(limit=max(1, limit))

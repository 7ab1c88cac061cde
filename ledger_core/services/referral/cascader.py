"""
Referral commission cascader.

Pays level-1 and level-2 commissions up the referral chain for a source
amount (deposit or generated profit). Runs inside the caller's unit of
work and never commits.
"""

from dataclasses import dataclass

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_core.config.constants import REFERRAL_MAX_LEVEL
from ledger_core.models.enums import TransactionType
from ledger_core.models.user import User
from ledger_core.repositories.platform_settings_repository import PlatformConfig
from ledger_core.repositories.referral_earning_repository import (
    ReferralEarningRepository,
)
from ledger_core.repositories.user_repository import UserRepository
from ledger_core.services.balance.guard import BalanceGuard, LedgerEntry
from ledger_core.services.notification.events import (
    NotificationEvent,
    NotificationKind,
)
from ledger_core.utils.money import apply_bps_floor


@dataclass(frozen=True)
class Commission:
    """One commission paid by the cascade."""

    level: int
    earner_id: int
    earner_email: str
    earner_name: str
    from_user_id: int
    from_user_name: str
    amount_cents: int
    source_amount_cents: int
    transaction_id: int
    earning_id: int
    source_investment_id: int | None = None
    source_transaction_id: int | None = None

    def to_event(self) -> NotificationEvent:
        """Notification for the earner."""
        return NotificationEvent(
            kind=NotificationKind.REFERRAL_COMMISSION,
            recipient_email=self.earner_email,
            recipient_name=self.earner_name,
            amounts={
                "commission": self.amount_cents,
                "source": self.source_amount_cents,
            },
            context={
                "level": self.level,
                "from_user_id": self.from_user_id,
                "from_user_name": self.from_user_name,
                "source_investment_id": self.source_investment_id,
                "source_transaction_id": self.source_transaction_id,
            },
        )


def level_rates(config: PlatformConfig) -> tuple[tuple[int, int], ...]:
    """(level, bps) pairs in cascade order."""
    return ((1, config.level1_bps), (2, config.level2_bps))


class ReferralCommissionCascader:
    """
    Two-hop commission cascade.

    ``from_user.referred_by_id`` is level 1, that user's referrer is level 2.
    A missing link stops the walk. Amounts are floored to whole cents.
    """

    def __init__(
        self, session: AsyncSession, guard: BalanceGuard | None = None
    ) -> None:
        """
        Initialize cascader.

        Args:
            session: Async database session (caller's unit of work)
            guard: Balance guard sharing the same session
        """
        self.session = session
        self.guard = guard or BalanceGuard(session)
        self.user_repo = UserRepository(session)
        self.earning_repo = ReferralEarningRepository(session)

    async def distribute_commission(
        self,
        from_user: User,
        source_amount_cents: int,
        config: PlatformConfig,
        source_investment_id: int | None = None,
        source_transaction_id: int | None = None,
    ) -> list[Commission]:
        """
        Credit upline commissions for ``source_amount_cents``.

        Args:
            from_user: User whose activity produced the source amount
            source_amount_cents: Deposit or profit amount
            config: Commission rates for this operation
            source_investment_id: Investment that produced the profit
            source_transaction_id: Deposit transaction that was approved

        Returns:
            Commissions paid, level 1 first (at most two)
        """
        if source_amount_cents <= 0:
            return []

        commissions: list[Commission] = []
        current = from_user

        for level, bps in level_rates(config)[:REFERRAL_MAX_LEVEL]:
            if current.referred_by_id is None:
                break
            earner = await self.user_repo.get_by_id(current.referred_by_id)
            if earner is None:
                break

            amount = apply_bps_floor(source_amount_cents, bps) if bps > 0 else 0
            if amount > 0:
                commissions.append(
                    await self._pay(
                        level=level,
                        earner=earner,
                        from_user=from_user,
                        amount_cents=amount,
                        source_amount_cents=source_amount_cents,
                        source_investment_id=source_investment_id,
                        source_transaction_id=source_transaction_id,
                    )
                )

            current = earner

        if commissions:
            logger.bind(
                from_user_id=from_user.id,
                source_amount_cents=source_amount_cents,
                total_commission_cents=sum(
                    c.amount_cents for c in commissions
                ),
                levels=[c.level for c in commissions],
            ).info("Referral commissions distributed")
        return commissions

    async def _pay(
        self,
        level: int,
        earner: User,
        from_user: User,
        amount_cents: int,
        source_amount_cents: int,
        source_investment_id: int | None,
        source_transaction_id: int | None,
    ) -> Commission:
        """Guard credit + earning record for one level."""
        change = await self.guard.credit(
            earner.id,
            amount_cents,
            LedgerEntry(
                type=TransactionType.REFERRAL_EARNING,
                reference=f"referral:L{level}:user:{from_user.id}",
                meta={
                    "level": level,
                    "from_user_id": from_user.id,
                    "source_amount_cents": source_amount_cents,
                    "source_investment_id": source_investment_id,
                    "source_transaction_id": source_transaction_id,
                },
            ),
        )
        earning = await self.earning_repo.create(
            earner_id=earner.id,
            from_user_id=from_user.id,
            level=level,
            amount_cents=amount_cents,
            source_investment_id=source_investment_id,
            source_transaction_id=source_transaction_id,
        )
        return Commission(
            level=level,
            earner_id=earner.id,
            earner_email=earner.email,
            earner_name=earner.display_name,
            from_user_id=from_user.id,
            from_user_name=from_user.display_name,
            amount_cents=amount_cents,
            source_amount_cents=source_amount_cents,
            transaction_id=change.transaction.id,
            earning_id=earning.id,
            source_investment_id=source_investment_id,
            source_transaction_id=source_transaction_id,
        )

"""
Investment lifecycle manager.

Opens investments: validates the request, debits the principal through the
balance guard and records the investment in one unit of work. Completion
belongs to the accrual engine.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_core.config.database import unit_of_work
from ledger_core.models.enums import InvestmentStatus, TransactionType
from ledger_core.models.investment import Investment
from ledger_core.models.plan import Plan
from ledger_core.repositories.investment_repository import (
    InvestmentRepository,
)
from ledger_core.repositories.user_repository import UserRepository
from ledger_core.services.balance.guard import BalanceGuard, LedgerEntry
from ledger_core.services.base_service import BaseService
from ledger_core.services.investment.plan_resolver import PlanResolver
from ledger_core.services.notification import (
    NotificationEvent,
    NotificationKind,
    Notifier,
)
from ledger_core.utils.datetime_utils import add_days, ensure_utc, utc_now
from ledger_core.utils.exceptions import (
    AmountAboveMaximum,
    AmountBelowMinimum,
    InsufficientBalance,
    PlanAlreadyUsed,
    UserNotFound,
)
from ledger_core.utils.money import format_usd, usd_to_cents


class InvestmentLifecycleManager(BaseService):
    """Creates investments."""

    def __init__(
        self, session: AsyncSession, notifier: Notifier | None = None
    ) -> None:
        super().__init__(session, notifier)
        self.user_repo = UserRepository(session)
        self.investment_repo = InvestmentRepository(session)
        self.plan_resolver = PlanResolver(session)
        self.guard = BalanceGuard(session)

    async def open_investment(
        self,
        user_id: int,
        plan_slug_or_name: str,
        amount_usd: Decimal | float | int | str,
        now: datetime | None = None,
    ) -> Investment:
        """
        Move ``amount_usd`` from the user's balance into a plan.

        Args:
            user_id: Investor
            plan_slug_or_name: Plan slug or name, loosely formatted
            amount_usd: Principal in dollars
            now: Start timestamp (defaults to current time)

        Returns:
            The new ACTIVE investment

        Raises:
            InvalidAmount, PlanNotFound, PlanInactive, AmountBelowMinimum,
            AmountAboveMaximum, PlanAlreadyUsed, InsufficientBalance,
            UserNotFound
        """
        amount_cents = usd_to_cents(amount_usd)
        now = ensure_utc(now or utc_now())

        async with unit_of_work(self.session):
            plan = await self.plan_resolver.resolve(plan_slug_or_name)
            self._check_bounds(plan, amount_cents)

            user = await self.user_repo.get_for_update(user_id)
            if user is None:
                raise UserNotFound(f"User {user_id} not found")

            if await self.investment_repo.has_used_plan(user.id, plan.id):
                raise PlanAlreadyUsed(
                    f"User {user.id} already used plan '{plan.slug}'"
                )

            if user.balance_cents < amount_cents:
                raise InsufficientBalance(
                    f"Balance {format_usd(user.balance_cents)} is below "
                    f"{format_usd(amount_cents)}",
                    balance_cents=user.balance_cents,
                    amount_cents=amount_cents,
                )

            investment = await self.investment_repo.create(
                user_id=user.id,
                plan_id=plan.id,
                amount_cents=amount_cents,
                status=InvestmentStatus.ACTIVE.value,
                start_date=now,
                end_date=(
                    add_days(now, plan.duration_days)
                    if plan.duration_days is not None
                    else None
                ),
                last_roi_accrued_at=now,
                accrued_return_cents=0,
                accrued_days=0,
            )

            await self.guard.debit(
                user.id,
                amount_cents,
                LedgerEntry(
                    type=TransactionType.INVESTMENT,
                    reference=f"investment:{investment.id}",
                    meta={"investment_id": investment.id, "plan": plan.slug},
                ),
            )

        self.logger.bind(
            investment_id=investment.id,
            user_id=user.id,
            plan=plan.slug,
            amount_cents=amount_cents,
        ).info("Investment opened")

        await self.notify([
            NotificationEvent(
                kind=NotificationKind.INVESTMENT_STARTED,
                recipient_email=user.email,
                recipient_name=user.display_name,
                amounts={"principal": amount_cents},
                context={
                    "investment_id": investment.id,
                    "plan_name": plan.name,
                    "daily_roi_bps": plan.daily_roi_bps,
                    "duration_days": plan.duration_days,
                    "end_date": (
                        investment.end_date.isoformat()
                        if investment.end_date
                        else None
                    ),
                },
            )
        ])
        return investment

    @staticmethod
    def _check_bounds(plan: Plan, amount_cents: int) -> None:
        if plan.min_amount_cents is not None and amount_cents < plan.min_amount_cents:
            raise AmountBelowMinimum(
                f"Minimum for {plan.name} is {format_usd(plan.min_amount_cents)}",
                min_amount_cents=plan.min_amount_cents,
            )
        if plan.max_amount_cents is not None and amount_cents > plan.max_amount_cents:
            raise AmountAboveMaximum(
                f"Maximum for {plan.name} is {format_usd(plan.max_amount_cents)}",
                max_amount_cents=plan.max_amount_cents,
            )

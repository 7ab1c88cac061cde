"""
Yield accrual engine.

Periodic pass that credits profit for every ACTIVE investment, completes
matured ones, and cascades referral commissions on the profit. Each
investment is its own unit of work: one failure never blocks the rest,
and an uncommitted investment is simply picked up again by the next pass.
"""

from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_core.config.database import unit_of_work
from ledger_core.config.settings import settings
from ledger_core.models.enums import InvestmentStatus, TransactionType
from ledger_core.repositories.investment_repository import (
    InvestmentRepository,
)
from ledger_core.repositories.platform_settings_repository import (
    PlatformSettingsRepository,
)
from ledger_core.repositories.user_repository import UserRepository
from ledger_core.services.accrual.calculator import plan_accrual_step
from ledger_core.services.balance.guard import BalanceGuard, LedgerEntry
from ledger_core.services.base_service import BaseService, log_operation
from ledger_core.services.notification import (
    NotificationEvent,
    NotificationKind,
    Notifier,
)
from ledger_core.services.referral.cascader import (
    Commission,
    ReferralCommissionCascader,
)
from ledger_core.utils.datetime_utils import ensure_utc, utc_now


@dataclass
class InvestmentAccrual:
    """Outcome of accruing one investment."""

    investment_id: int
    skipped: bool = False
    completed: bool = False
    billable_days: int = 0
    profit_cents: int = 0
    commissions: list[Commission] = field(default_factory=list)
    events: list[NotificationEvent] = field(default_factory=list)

    @property
    def commission_cents(self) -> int:
        return sum(c.amount_cents for c in self.commissions)


@dataclass
class AccrualReport:
    """Summary of one accrual pass."""

    processed: int = 0
    completed: int = 0
    skipped: int = 0
    failed: int = 0
    total_profit_cents: int = 0
    total_commission_cents: int = 0
    failed_ids: list[int] = field(default_factory=list)

    def add(self, outcome: InvestmentAccrual) -> None:
        if outcome.skipped:
            self.skipped += 1
            return
        self.processed += 1
        if outcome.completed:
            self.completed += 1
        self.total_profit_cents += outcome.profit_cents
        self.total_commission_cents += outcome.commission_cents

    def to_dict(self) -> dict:
        return {
            "processed": self.processed,
            "completed": self.completed,
            "skipped": self.skipped,
            "failed": self.failed,
            "total_profit_cents": self.total_profit_cents,
            "total_commission_cents": self.total_commission_cents,
        }


class YieldAccrualEngine(BaseService):
    """Accrues yield on ACTIVE investments."""

    def __init__(
        self, session: AsyncSession, notifier: Notifier | None = None
    ) -> None:
        super().__init__(session, notifier)
        self.investment_repo = InvestmentRepository(session)
        self.user_repo = UserRepository(session)
        self.settings_repo = PlatformSettingsRepository(session)
        self.guard = BalanceGuard(session)
        self.cascader = ReferralCommissionCascader(session, self.guard)

    @log_operation
    async def run_accrual_pass(self, now: datetime | None = None) -> AccrualReport:
        """
        Accrue every ACTIVE investment as of ``now``.

        Running the pass twice with the same ``now`` credits nothing the
        second time.

        Returns:
            AccrualReport with per-pass counters
        """
        now = ensure_utc(now or utc_now())
        report = AccrualReport()

        if settings.emergency_stop_accrual:
            self.logger.warning("Accrual pass blocked by emergency stop")
            return report

        async with unit_of_work(self.session):
            investment_ids = await self.investment_repo.get_active_ids()

        self.logger.info(f"Accrual pass over {len(investment_ids)} investments")

        for investment_id in investment_ids:
            try:
                outcome = await self.accrue_investment(investment_id, now)
            except Exception as e:
                report.failed += 1
                report.failed_ids.append(investment_id)
                self.logger.exception(
                    f"Accrual failed for investment {investment_id}: {e}"
                )
                continue

            report.add(outcome)

        self.logger.bind(**report.to_dict()).info("Accrual pass finished")
        return report

    async def accrue_investment(
        self, investment_id: int, now: datetime
    ) -> InvestmentAccrual:
        """
        Accrue one investment in its own unit of work, then notify.

        Raises:
            Any error from the unit of work, after rollback
        """
        async with unit_of_work(self.session):
            outcome = await self._accrue_locked(investment_id, ensure_utc(now))

        if outcome.events:
            await self.notify(outcome.events)
        return outcome

    async def _accrue_locked(
        self, investment_id: int, now: datetime
    ) -> InvestmentAccrual:
        investment = await self.investment_repo.get_for_update(investment_id)
        if investment is None or investment.status != InvestmentStatus.ACTIVE:
            return InvestmentAccrual(investment_id=investment_id, skipped=True)

        plan = investment.plan
        step = plan_accrual_step(
            amount_cents=investment.amount_cents,
            daily_roi_bps=plan.daily_roi_bps,
            duration_days=plan.duration_days,
            accrued_days=investment.accrued_days,
            last_accrued_at=investment.last_roi_accrued_at,
            end_date=investment.end_date,
            now=now,
        )
        if step.is_noop:
            return InvestmentAccrual(investment_id=investment_id, skipped=True)

        investment.accrued_return_cents += step.profit_cents
        investment.accrued_days += step.billable_days
        investment.last_roi_accrued_at = now
        if step.will_complete:
            investment.status = InvestmentStatus.COMPLETED.value
        await self.session.flush()

        outcome = InvestmentAccrual(
            investment_id=investment.id,
            completed=step.will_complete,
            billable_days=step.billable_days,
            profit_cents=step.profit_cents,
        )
        reference = f"investment:{investment.id}"

        if step.profit_cents > 0:
            await self.guard.credit(
                investment.user_id,
                step.profit_cents,
                LedgerEntry(
                    type=TransactionType.INVESTMENT_RETURN,
                    reference=reference,
                    meta={
                        "investment_id": investment.id,
                        "plan": plan.slug,
                        "days": step.billable_days,
                        "daily_profit_cents": step.daily_profit_cents,
                    },
                ),
            )

        if step.will_complete:
            await self.guard.credit(
                investment.user_id,
                investment.amount_cents,
                LedgerEntry(
                    type=TransactionType.CAPITAL_RETURN,
                    reference=reference,
                    meta={"investment_id": investment.id, "plan": plan.slug},
                ),
            )

        user = await self.user_repo.get_by_id(investment.user_id)
        if step.profit_cents > 0:
            config = await self.settings_repo.load()
            outcome.commissions = await self.cascader.distribute_commission(
                user,
                step.profit_cents,
                config,
                source_investment_id=investment.id,
            )

        if step.will_complete:
            outcome.events.append(
                NotificationEvent(
                    kind=NotificationKind.INVESTMENT_COMPLETED,
                    recipient_email=user.email,
                    recipient_name=user.display_name,
                    amounts={
                        "principal": investment.amount_cents,
                        "total_return": investment.accrued_return_cents,
                    },
                    context={
                        "investment_id": investment.id,
                        "plan_name": plan.name,
                    },
                )
            )
        outcome.events.extend(c.to_event() for c in outcome.commissions)

        self.logger.bind(
            investment_id=investment.id,
            user_id=investment.user_id,
            billable_days=step.billable_days,
            profit_cents=step.profit_cents,
            completed=step.will_complete,
        ).info(f"Investment {investment.id} accrued")
        return outcome

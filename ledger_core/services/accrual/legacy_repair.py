"""
Legacy investment repair.

Older investments of fixed-term plans were stored without ``end_date`` and
therefore never completed. This backfills the date and lets the accrual
engine finish the ones already past maturity, so they are paid the same
way as any other completing investment.
"""

from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_core.config.database import unit_of_work
from ledger_core.repositories.investment_repository import (
    InvestmentRepository,
)
from ledger_core.services.accrual.engine import YieldAccrualEngine
from ledger_core.services.notification import Notifier
from ledger_core.utils.datetime_utils import add_days, ensure_utc, utc_now


@dataclass
class RepairReport:
    backfilled: int = 0
    completed: int = 0
    failed: int = 0
    investment_ids: list[int] = field(default_factory=list)


class LegacyInvestmentRepair:
    """Backfill ``end_date`` and complete overdue legacy investments."""

    def __init__(
        self, session: AsyncSession, notifier: Notifier | None = None
    ) -> None:
        self.session = session
        self.investment_repo = InvestmentRepository(session)
        self.engine = YieldAccrualEngine(session, notifier)

    async def run(self, now: datetime | None = None) -> RepairReport:
        now = ensure_utc(now or utc_now())
        report = RepairReport()

        async with unit_of_work(self.session):
            candidates = [
                inv
                for inv in await self.investment_repo.get_active_fixed_term()
                if inv.end_date is None
            ]
            for investment in candidates:
                investment.end_date = add_days(
                    investment.start_date, investment.plan.duration_days
                )
                report.investment_ids.append(investment.id)
            await self.session.flush()

        report.backfilled = len(candidates)
        logger.info(f"Backfilled end_date on {report.backfilled} investments")

        overdue = [inv.id for inv in candidates if now >= inv.end_date]
        for investment_id in overdue:
            try:
                outcome = await self.engine.accrue_investment(investment_id, now)
            except Exception as e:
                report.failed += 1
                logger.exception(
                    f"Failed to complete legacy investment {investment_id}: {e}"
                )
                continue
            if outcome.completed:
                report.completed += 1

        logger.bind(
            backfilled=report.backfilled,
            completed=report.completed,
            failed=report.failed,
        ).info("Legacy investment repair complete")
        return report

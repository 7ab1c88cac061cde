"""
Integration tests for the legacy investment repair.
"""

from datetime import UTC, datetime, timedelta

import pytest

from ledger_core.models import Investment, InvestmentStatus
from ledger_core.services.accrual import LegacyInvestmentRepair

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def legacy_investment(db_session):
    """ACTIVE fixed-term investment stored without an end date."""

    async def _legacy(user_id: int, plan_id: int, start: datetime) -> int:
        investment = Investment(
            user_id=user_id,
            plan_id=plan_id,
            amount_cents=100_000,
            status=InvestmentStatus.ACTIVE.value,
            start_date=start,
            end_date=None,
            last_roi_accrued_at=start,
            accrued_return_cents=0,
            accrued_days=0,
        )
        db_session.add(investment)
        await db_session.commit()
        return investment.id

    return _legacy


class TestLegacyInvestmentRepair:
    """Test end_date backfill and completion of overdue investments."""

    @pytest.mark.asyncio
    async def test_overdue_investment_is_completed_once(
        self, db_session, make_user, make_plan, balance_of, legacy_investment
    ):
        user = await make_user()
        plan = await make_plan(slug="starter", daily_roi_bps=500, duration_days=5)
        investment_id = await legacy_investment(
            user.id, plan.id, T0 - timedelta(days=12)
        )

        report = await LegacyInvestmentRepair(db_session).run(now=T0)

        assert report.backfilled == 1
        assert report.completed == 1
        assert report.failed == 0
        assert report.investment_ids == [investment_id]

        investment = await db_session.get(
            Investment, investment_id, populate_existing=True
        )
        assert investment.end_date == T0 - timedelta(days=7)
        assert investment.status == InvestmentStatus.COMPLETED
        assert investment.accrued_return_cents == 25_000
        assert await balance_of(user.id) == 125_000

        again = await LegacyInvestmentRepair(db_session).run(now=T0)

        assert again.backfilled == 0
        assert await balance_of(user.id) == 125_000

    @pytest.mark.asyncio
    async def test_running_investment_only_backfilled(
        self, db_session, make_user, make_plan, balance_of, legacy_investment
    ):
        user = await make_user()
        plan = await make_plan(slug="starter", duration_days=30)
        investment_id = await legacy_investment(
            user.id, plan.id, T0 - timedelta(days=3)
        )

        report = await LegacyInvestmentRepair(db_session).run(now=T0)

        assert report.backfilled == 1
        assert report.completed == 0
        investment = await db_session.get(
            Investment, investment_id, populate_existing=True
        )
        assert investment.end_date == T0 + timedelta(days=27)
        assert investment.status == InvestmentStatus.ACTIVE
        assert await balance_of(user.id) == 0

    @pytest.mark.asyncio
    async def test_open_ended_plans_untouched(
        self, db_session, make_user, make_plan, legacy_investment
    ):
        user = await make_user()
        plan = await make_plan(slug="flex", duration_days=None)
        investment_id = await legacy_investment(
            user.id, plan.id, T0 - timedelta(days=100)
        )

        report = await LegacyInvestmentRepair(db_session).run(now=T0)

        assert report.backfilled == 0
        investment = await db_session.get(
            Investment, investment_id, populate_existing=True
        )
        assert investment.end_date is None

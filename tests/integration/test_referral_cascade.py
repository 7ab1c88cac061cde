"""
Integration tests for the two-level referral commission cascade.
"""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import func, select

from ledger_core.config.database import unit_of_work
from ledger_core.models import ReferralEarning, Transaction, TransactionType
from ledger_core.repositories.platform_settings_repository import (
    PlatformConfig,
    PlatformSettingsRepository,
)
from ledger_core.services.accrual import YieldAccrualEngine
from ledger_core.services.investment import InvestmentLifecycleManager
from ledger_core.services.referral import (
    ReferralCommissionCascader,
    ReferralStatsService,
)
from ledger_core.utils.exceptions import ValidationError

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def referral_chain(make_user):
    """Z <- A <- B <- C, each referred by the previous one."""

    async def _chain():
        z = await make_user(name="Zed")
        a = await make_user(name="Alice", referred_by=z)
        b = await make_user(name="Bob", referred_by=a)
        c = await make_user(name="Carol", referred_by=b, balance_cents=100_000)
        return z, a, b, c

    return _chain


async def earnings_for(session, earner_id: int) -> list[ReferralEarning]:
    return list(
        (
            await session.scalars(
                select(ReferralEarning)
                .where(ReferralEarning.earner_id == earner_id)
                .order_by(ReferralEarning.id)
            )
        ).all()
    )


class TestCascader:
    """Test ReferralCommissionCascader.distribute_commission."""

    @pytest.mark.asyncio
    async def test_pays_exactly_two_levels(
        self, db_session, referral_chain, balance_of
    ):
        z, a, b, c = await referral_chain()
        cascader = ReferralCommissionCascader(db_session)
        config = PlatformConfig(level1_bps=500, level2_bps=200)

        async with unit_of_work(db_session):
            commissions = await cascader.distribute_commission(
                c, 10_000, config, source_transaction_id=None
            )

        assert [(x.level, x.earner_id, x.amount_cents) for x in commissions] == [
            (1, b.id, 500),
            (2, a.id, 200),
        ]
        assert await balance_of(b.id) == 500
        assert await balance_of(a.id) == 200
        assert await balance_of(z.id) == 0
        assert await db_session.scalar(
            select(func.count(ReferralEarning.id))
        ) == 2

    @pytest.mark.asyncio
    async def test_amounts_are_floored(self, db_session, referral_chain):
        _, a, b, c = await referral_chain()
        config = PlatformConfig(level1_bps=333, level2_bps=1)

        async with unit_of_work(db_session):
            commissions = await ReferralCommissionCascader(
                db_session
            ).distribute_commission(c, 999, config)

        # 999 * 3.33% = 33.2667 -> 33; 999 * 0.01% = 0.0999 -> nothing
        assert [(x.level, x.amount_cents) for x in commissions] == [(1, 33)]

    @pytest.mark.asyncio
    async def test_zero_level_one_rate_still_pays_level_two(
        self, db_session, referral_chain, balance_of
    ):
        _, a, b, c = await referral_chain()
        config = PlatformConfig(level1_bps=0, level2_bps=200)

        async with unit_of_work(db_session):
            commissions = await ReferralCommissionCascader(
                db_session
            ).distribute_commission(c, 10_000, config)

        assert [(x.level, x.earner_id) for x in commissions] == [(2, a.id)]
        assert await balance_of(b.id) == 0

    @pytest.mark.asyncio
    async def test_no_referrer_pays_nothing(self, db_session, make_user):
        loner = await make_user()

        async with unit_of_work(db_session):
            commissions = await ReferralCommissionCascader(
                db_session
            ).distribute_commission(loner, 10_000, PlatformConfig())

        assert commissions == []

    @pytest.mark.asyncio
    async def test_ledger_rows_and_earnings_match(self, db_session, referral_chain):
        _, a, b, c = await referral_chain()

        async with unit_of_work(db_session):
            commissions = await ReferralCommissionCascader(
                db_session
            ).distribute_commission(
                c, 10_000, PlatformConfig(), source_investment_id=None
            )

        for commission in commissions:
            tx = await db_session.get(Transaction, commission.transaction_id)
            earning = await db_session.get(ReferralEarning, commission.earning_id)
            assert tx.type == TransactionType.REFERRAL_EARNING
            assert tx.user_id == earning.earner_id == commission.earner_id
            assert tx.amount_cents == earning.amount_cents
            assert tx.reference == f"referral:L{commission.level}:user:{c.id}"
            assert earning.from_user_id == c.id

    @pytest.mark.asyncio
    async def test_commission_event(self, db_session, referral_chain):
        _, _, b, c = await referral_chain()

        async with unit_of_work(db_session):
            commissions = await ReferralCommissionCascader(
                db_session
            ).distribute_commission(c, 10_000, PlatformConfig())

        event = commissions[0].to_event()
        assert event.kind.value == "REFERRAL_COMMISSION"
        assert event.recipient_email == b.email
        assert event.amounts == {"commission": 500, "source": 10_000}
        assert event.context["from_user_name"] == "Carol"


class TestProfitCascade:
    """Test commissions paid on accrued profit."""

    @pytest.mark.asyncio
    async def test_accrual_profit_cascades(
        self, db_session, referral_chain, make_plan, balance_of, notifier
    ):
        _, a, b, c = await referral_chain()
        await make_plan(slug="starter", daily_roi_bps=500, duration_days=5)
        investment = await InvestmentLifecycleManager(db_session).open_investment(
            c.id, "starter", 1000, now=T0
        )

        report = await YieldAccrualEngine(db_session, notifier).run_accrual_pass(
            T0 + timedelta(days=1)
        )

        # 5000 profit: 5% to Bob, 2% to Alice
        assert report.total_commission_cents == 350
        assert await balance_of(b.id) == 250
        assert await balance_of(a.id) == 100
        assert notifier.kinds().count("REFERRAL_COMMISSION") == 2

        earning = (await earnings_for(db_session, b.id))[0]
        assert earning.source_investment_id == investment.id
        assert earning.source_transaction_id is None


class TestReferralStats:
    """Test summary and leaderboard."""

    @pytest.mark.asyncio
    async def test_summary_and_leaderboard(self, db_session, referral_chain):
        _, a, b, c = await referral_chain()
        async with unit_of_work(db_session):
            await ReferralCommissionCascader(db_session).distribute_commission(
                c, 10_000, PlatformConfig()
            )
            await ReferralCommissionCascader(db_session).distribute_commission(
                b, 10_000, PlatformConfig()
            )
        stats = ReferralStatsService(db_session)

        summary = await stats.summary(a.id)
        leaders = await stats.leaderboard()

        # Alice: 200 from Carol (L2) + 500 from Bob (L1)
        assert summary.direct_referrals == 1
        assert summary.total_earnings_cents == 700
        assert len(summary.earnings) == 2
        assert [(row.user_id, row.total_cents) for row in leaders][:2] == [
            (a.id, 700),
            (b.id, 500),
        ]


class TestPlatformSettings:
    """Test commission rate configuration."""

    @pytest.mark.asyncio
    async def test_defaults_created_on_first_load(self, db_session):
        config = await PlatformSettingsRepository(db_session).load()

        assert config.level1_bps == 500
        assert config.level2_bps == 200

    @pytest.mark.asyncio
    async def test_update_rates(self, db_session):
        repo = PlatformSettingsRepository(db_session)

        async with unit_of_work(db_session):
            config = await repo.update_commission_rates(800, 0)

        assert (config.level1_bps, config.level2_bps) == (800, 0)
        assert (await repo.load()).level1_bps == 800

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rates", [(-1, 200), (500, 10_001), (5.5, 200)])
    async def test_invalid_rates(self, db_session, rates):
        with pytest.raises(ValidationError):
            await PlatformSettingsRepository(db_session).update_commission_rates(
                *rates
            )

    @pytest.mark.asyncio
    async def test_deposit_addresses(self, db_session):
        repo = PlatformSettingsRepository(db_session)

        async with unit_of_work(db_session):
            config = await repo.update_deposit_addresses(
                btc_deposit_address=" bc1qexample ",
                usdt_trc20_deposit_address="TExample",
                eth_deposit_address="",
            )

        addresses = config.deposit_addresses()
        assert addresses["BTC"] == "bc1qexample"
        assert addresses["ETH"] is None
        assert addresses["USDT"]["TRC20"] == "TExample"
        assert addresses["USDT"]["ERC20"] is None

"""
Integration tests for deposit requests and their review.
"""

import pytest
from sqlalchemy import func, select

from ledger_core.config.database import unit_of_work
from ledger_core.config.settings import settings
from ledger_core.models import (
    ReferralEarning,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from ledger_core.repositories.platform_settings_repository import (
    PlatformSettingsRepository,
)
from ledger_core.services.balance import LedgerReconciler
from ledger_core.services.deposit import DepositWorkflow
from ledger_core.utils.exceptions import (
    InvalidAmount,
    NotFound,
    NotPending,
    UnsupportedAsset,
    UserNotFound,
)


class TestRequestDeposit:
    """Test DepositWorkflow.request_deposit."""

    @pytest.mark.asyncio
    async def test_creates_pending_row_without_balance_change(
        self, db_session, make_user, balance_of, notifier
    ):
        referrer = await make_user(name="Ref")
        user = await make_user(referred_by=referrer)
        workflow = DepositWorkflow(db_session, notifier)

        tx = await workflow.request_deposit(
            user.id, "btc", "250.50", reference=" 0xabc ", note="first"
        )

        assert tx.status == TransactionStatus.PENDING
        assert tx.type == TransactionType.DEPOSIT
        assert tx.asset == "BTC"
        assert tx.amount_cents == 25_050
        assert tx.reference == "0xabc"
        assert tx.meta["note"] == "first"
        assert tx.meta["referrer"]["id"] == referrer.id
        assert await balance_of(user.id) == 0
        assert notifier.kinds() == ["DEPOSIT_REQUESTED"]

    @pytest.mark.asyncio
    async def test_admin_users_are_notified(
        self, db_session, make_user, notifier
    ):
        await make_user(email="boss@example.com", is_admin=True)
        await make_user(email="ops@example.com", is_admin=True)
        user = await make_user()

        await DepositWorkflow(db_session, notifier).request_deposit(
            user.id, "ETH", 10
        )

        assert sorted(e.recipient_email for e in notifier.events) == [
            "boss@example.com",
            "ops@example.com",
        ]

    @pytest.mark.asyncio
    async def test_falls_back_to_configured_admin_email(
        self, db_session, make_user, notifier, monkeypatch
    ):
        monkeypatch.setattr(settings, "admin_email", "ops@example.com")
        user = await make_user()

        await DepositWorkflow(db_session, notifier).request_deposit(
            user.id, "ETH", 10
        )

        assert [e.recipient_email for e in notifier.events] == [
            "ops@example.com"
        ]

    @pytest.mark.asyncio
    async def test_rejects_unknown_asset(self, db_session, make_user):
        user = await make_user()

        with pytest.raises(UnsupportedAsset):
            await DepositWorkflow(db_session).request_deposit(user.id, "DOGE", 10)

    @pytest.mark.asyncio
    async def test_rejects_bad_amount(self, db_session, make_user):
        user = await make_user()

        with pytest.raises(InvalidAmount):
            await DepositWorkflow(db_session).request_deposit(user.id, "BTC", 0)

    @pytest.mark.asyncio
    async def test_unknown_user(self, db_session):
        with pytest.raises(UserNotFound):
            await DepositWorkflow(db_session).request_deposit(777, "BTC", 10)


class TestReviewDeposit:
    """Test approve and reject."""

    @pytest.mark.asyncio
    async def test_approve_credits_and_pays_level_one(
        self, db_session, make_user, balance_of, notifier
    ):
        """$500 deposit at 8% level-1 pays the referrer $40, once."""
        referrer = await make_user()
        depositor = await make_user(referred_by=referrer)
        async with unit_of_work(db_session):
            await PlatformSettingsRepository(db_session).update_commission_rates(
                800, 200
            )
        workflow = DepositWorkflow(db_session, notifier)
        tx = await workflow.request_deposit(depositor.id, "USDT", 500)

        approved = await workflow.approve_deposit(tx.id)

        assert approved.status == TransactionStatus.COMPLETED
        assert await balance_of(depositor.id) == 50_000
        assert await balance_of(referrer.id) == 4_000

        earnings = (await db_session.scalars(select(ReferralEarning))).all()
        assert len(earnings) == 1
        assert earnings[0].level == 1
        assert earnings[0].amount_cents == 4_000
        assert earnings[0].source_transaction_id == tx.id

        assert notifier.kinds()[-2:] == [
            "DEPOSIT_APPROVED",
            "REFERRAL_COMMISSION",
        ]
        reconciler = LedgerReconciler(db_session)
        assert (await reconciler.reconcile(depositor.id)).is_consistent
        assert (await reconciler.reconcile(referrer.id)).is_consistent

    @pytest.mark.asyncio
    async def test_approve_survives_notifier_failure(
        self, db_session, make_user, balance_of, failing_notifier
    ):
        user = await make_user()
        workflow = DepositWorkflow(db_session, failing_notifier)
        tx = await workflow.request_deposit(user.id, "USDT", 100)

        approved = await workflow.approve_deposit(tx.id)

        assert approved.status == TransactionStatus.COMPLETED
        assert await balance_of(user.id) == 10_000
        assert failing_notifier.calls >= 1

    @pytest.mark.asyncio
    async def test_approve_twice(self, db_session, make_user, balance_of):
        user = await make_user()
        user_id = user.id
        workflow = DepositWorkflow(db_session)
        tx = await workflow.request_deposit(user_id, "USDT", 100)
        tx_id = tx.id
        await workflow.approve_deposit(tx_id)

        with pytest.raises(NotPending):
            await workflow.approve_deposit(tx_id)

        assert await balance_of(user_id) == 10_000

    @pytest.mark.asyncio
    async def test_reject_keeps_balance_and_records_reason(
        self, db_session, make_user, balance_of, notifier
    ):
        user = await make_user()
        workflow = DepositWorkflow(db_session, notifier)
        tx = await workflow.request_deposit(user.id, "USDT", 100, note="n")

        rejected = await workflow.reject_deposit(tx.id, "  no funds seen ")

        assert rejected.status == TransactionStatus.FAILED
        assert rejected.meta["reject_reason"] == "no funds seen"
        assert rejected.meta["note"] == "n"
        assert await balance_of(user.id) == 0
        assert notifier.kinds()[-1] == "DEPOSIT_REJECTED"

        stored = await db_session.scalar(
            select(Transaction.meta).where(Transaction.id == tx.id)
        )
        assert stored["reject_reason"] == "no funds seen"

    @pytest.mark.asyncio
    async def test_reject_default_reason(self, db_session, make_user):
        user = await make_user()
        workflow = DepositWorkflow(db_session)
        tx = await workflow.request_deposit(user.id, "USDT", 100)

        rejected = await workflow.reject_deposit(tx.id)

        assert rejected.meta["reject_reason"] == "Deposit rejected by admin"

    @pytest.mark.asyncio
    async def test_reject_after_approve(self, db_session, make_user):
        user = await make_user()
        workflow = DepositWorkflow(db_session)
        tx = await workflow.request_deposit(user.id, "USDT", 100)
        tx_id = tx.id
        await workflow.approve_deposit(tx_id)

        with pytest.raises(NotPending):
            await workflow.reject_deposit(tx_id)

    @pytest.mark.asyncio
    async def test_settled_or_missing_rows_cannot_be_reviewed(
        self, db_session, make_user
    ):
        user = await make_user(balance_cents=1_000)
        opening_row_id = await db_session.scalar(
            select(Transaction.id).where(Transaction.user_id == user.id)
        )

        with pytest.raises(NotPending):
            await DepositWorkflow(db_session).approve_deposit(opening_row_id)
        with pytest.raises(NotFound):
            await DepositWorkflow(db_session).approve_deposit(999_999)

    @pytest.mark.asyncio
    async def test_pending_queue(self, db_session, make_user):
        user = await make_user()
        workflow = DepositWorkflow(db_session)
        first = await workflow.request_deposit(user.id, "USDT", 10)
        second = await workflow.request_deposit(user.id, "BTC", 20)
        first_id, second_id = first.id, second.id
        await workflow.reject_deposit(first_id)

        pending = await workflow.list_pending()

        assert [tx.id for tx in pending] == [second_id]
        assert await db_session.scalar(
            select(func.count(Transaction.id)).where(
                Transaction.status == TransactionStatus.FAILED.value
            )
        ) == 1

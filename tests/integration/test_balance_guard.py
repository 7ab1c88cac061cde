"""
Integration tests for the balance guard and ledger reconciliation.
"""

import pytest
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError

from ledger_core.config.database import unit_of_work
from ledger_core.models import (
    Transaction,
    TransactionStatus,
    TransactionType,
    User,
)
from ledger_core.services.balance import (
    BalanceGuard,
    LedgerEntry,
    LedgerReconciler,
)
from ledger_core.utils.exceptions import (
    InsufficientBalance,
    InvalidAmount,
    UserNotFound,
)


async def count_transactions(session, user_id: int) -> int:
    return await session.scalar(
        select(func.count(Transaction.id)).where(Transaction.user_id == user_id)
    )


class TestBalanceGuard:
    """Test atomic balance mutation."""

    @pytest.mark.asyncio
    async def test_credit_records_completed_row(
        self, db_session, make_user, balance_of
    ):
        user = await make_user()
        guard = BalanceGuard(db_session)

        async with unit_of_work(db_session):
            change = await guard.credit(
                user.id,
                2_500,
                LedgerEntry(type=TransactionType.DEPOSIT, reference="manual"),
            )

        assert change.balance_after_cents == 2_500
        assert change.transaction.status == TransactionStatus.COMPLETED
        assert change.transaction.amount_cents == 2_500
        assert change.transaction.reference == "manual"
        assert await balance_of(user.id) == 2_500

    @pytest.mark.asyncio
    async def test_loaded_user_is_refreshed(self, db_session, make_user):
        user = await make_user(balance_cents=1_000)
        guard = BalanceGuard(db_session)

        async with unit_of_work(db_session):
            await guard.debit(
                user.id, 400, LedgerEntry(type=TransactionType.WITHDRAWAL)
            )

        assert user.balance_cents == 600

    @pytest.mark.asyncio
    async def test_debit_to_exactly_zero(self, db_session, make_user, balance_of):
        user = await make_user(balance_cents=1_000)
        guard = BalanceGuard(db_session)

        async with unit_of_work(db_session):
            change = await guard.debit(
                user.id, 1_000, LedgerEntry(type=TransactionType.WITHDRAWAL)
            )

        assert change.balance_after_cents == 0
        assert await balance_of(user.id) == 0

    @pytest.mark.asyncio
    async def test_overdraft_rejected_without_ledger_row(
        self, db_session, make_user, balance_of
    ):
        user = await make_user(balance_cents=1_000)
        user_id = user.id
        guard = BalanceGuard(db_session)

        with pytest.raises(InsufficientBalance) as exc_info:
            async with unit_of_work(db_session):
                await guard.debit(
                    user_id, 1_001, LedgerEntry(type=TransactionType.WITHDRAWAL)
                )

        assert exc_info.value.context["balance_cents"] == 1_000
        assert await balance_of(user_id) == 1_000
        assert await count_transactions(db_session, user_id) == 1

    @pytest.mark.asyncio
    async def test_failure_rolls_back_earlier_changes(
        self, db_session, make_user, balance_of
    ):
        """Credit and overdraft in one unit of work: neither persists."""
        user = await make_user(balance_cents=1_000)
        user_id = user.id
        guard = BalanceGuard(db_session)

        with pytest.raises(InsufficientBalance):
            async with unit_of_work(db_session):
                await guard.credit(
                    user_id, 500, LedgerEntry(type=TransactionType.DEPOSIT)
                )
                await guard.debit(
                    user_id, 5_000, LedgerEntry(type=TransactionType.WITHDRAWAL)
                )

        assert await balance_of(user_id) == 1_000
        assert await count_transactions(db_session, user_id) == 1

    @pytest.mark.asyncio
    async def test_unknown_user(self, db_session):
        guard = BalanceGuard(db_session)

        with pytest.raises(UserNotFound):
            async with unit_of_work(db_session):
                await guard.credit(
                    9_999, 100, LedgerEntry(type=TransactionType.DEPOSIT)
                )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("delta", [0, 1.5, True])
    async def test_invalid_delta(self, db_session, make_user, delta):
        user = await make_user()
        guard = BalanceGuard(db_session)

        with pytest.raises(InvalidAmount):
            await guard.apply_balance_delta(
                user.id, delta, LedgerEntry(type=TransactionType.DEPOSIT)
            )

    @pytest.mark.asyncio
    async def test_entry_sign_must_match_delta(self, db_session, make_user):
        user = await make_user(balance_cents=1_000)
        guard = BalanceGuard(db_session)

        with pytest.raises(ValueError):
            await guard.apply_balance_delta(
                user.id, 100, LedgerEntry(type=TransactionType.WITHDRAWAL)
            )

    @pytest.mark.asyncio
    async def test_settles_pending_transaction(
        self, db_session, make_user, balance_of
    ):
        user = await make_user()
        pending = Transaction(
            user_id=user.id,
            type=TransactionType.DEPOSIT.value,
            amount_cents=7_500,
            status=TransactionStatus.PENDING.value,
            asset="BTC",
        )
        db_session.add(pending)
        await db_session.commit()
        guard = BalanceGuard(db_session)

        async with unit_of_work(db_session):
            change = await guard.credit(user.id, 7_500, pending)

        assert change.transaction is pending
        assert pending.status == TransactionStatus.COMPLETED
        assert await balance_of(user.id) == 7_500
        assert await count_transactions(db_session, user.id) == 1

    @pytest.mark.asyncio
    async def test_pending_amount_must_match(self, db_session, make_user):
        user = await make_user()
        pending = Transaction(
            user_id=user.id,
            type=TransactionType.DEPOSIT.value,
            amount_cents=7_500,
            status=TransactionStatus.PENDING.value,
        )
        db_session.add(pending)
        await db_session.commit()
        guard = BalanceGuard(db_session)

        with pytest.raises(ValueError):
            await guard.credit(user.id, 7_000, pending)


class TestLedgerReconciler:
    """Test balance vs ledger comparison."""

    @pytest.mark.asyncio
    async def test_consistent_after_guarded_changes(self, db_session, make_user):
        user = await make_user(balance_cents=10_000)
        guard = BalanceGuard(db_session)

        async with unit_of_work(db_session):
            await guard.debit(
                user.id, 3_000, LedgerEntry(type=TransactionType.INVESTMENT)
            )
            await guard.credit(
                user.id, 450, LedgerEntry(type=TransactionType.INVESTMENT_RETURN)
            )

        result = await LedgerReconciler(db_session).reconcile(user.id)

        assert result.balance_cents == 7_450
        assert result.ledger_balance_cents == 7_450
        assert result.is_consistent is True

    @pytest.mark.asyncio
    async def test_detects_direct_balance_edit(self, db_session, make_user):
        clean = await make_user(balance_cents=1_000)
        tampered = await make_user(balance_cents=1_000)
        await db_session.execute(
            update(User)
            .where(User.id == tampered.id)
            .values(balance_cents=1_500)
        )
        await db_session.commit()

        mismatches = await LedgerReconciler(db_session).find_mismatches()

        assert [m.user_id for m in mismatches] == [tampered.id]
        assert mismatches[0].difference_cents == 500
        assert clean.id not in [m.user_id for m in mismatches]

    @pytest.mark.asyncio
    async def test_unknown_user(self, db_session):
        with pytest.raises(UserNotFound):
            await LedgerReconciler(db_session).reconcile(12_345)


class TestLedgerRetention:
    """Test that ledger-bearing users are not silently removed."""

    @pytest.mark.asyncio
    async def test_user_with_ledger_rows_cannot_be_deleted(
        self, db_session, make_user, balance_of
    ):
        user = await make_user(balance_cents=1_000)
        user_id = user.id

        with pytest.raises(IntegrityError):
            async with unit_of_work(db_session):
                await db_session.execute(delete(User).where(User.id == user_id))

        assert await balance_of(user_id) == 1_000
        assert await count_transactions(db_session, user_id) == 1

    @pytest.mark.asyncio
    async def test_deleting_referrer_unlinks_referrals(
        self, db_session, make_user
    ):
        referrer = await make_user()
        user = await make_user(referred_by=referrer)
        referrer_id, user_id = referrer.id, user.id

        async with unit_of_work(db_session):
            await db_session.execute(delete(User).where(User.id == referrer_id))

        assert await db_session.scalar(
            select(User.referred_by_id).where(User.id == user_id)
        ) is None

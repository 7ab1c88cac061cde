"""
Integration tests for admin balance adjustments.
"""

import pytest
from sqlalchemy import func, select

from ledger_core.models import ReferralEarning, Transaction, TransactionType
from ledger_core.services.admin import BalanceAdjustmentService
from ledger_core.services.balance import LedgerReconciler
from ledger_core.utils.exceptions import (
    InsufficientBalance,
    InvalidAction,
    InvalidAmount,
    UserNotFound,
)


class TestBalanceAdjustment:
    """Test BalanceAdjustmentService.adjust_balance."""

    @pytest.mark.asyncio
    async def test_deposit_credits_without_commission(
        self, db_session, make_user, balance_of, notifier
    ):
        admin = await make_user(is_admin=True)
        referrer = await make_user()
        user = await make_user(referred_by=referrer)

        updated = await BalanceAdjustmentService(
            db_session, notifier
        ).adjust_balance(user.id, " deposit ", "25.50", admin_id=admin.id)

        assert updated.balance_cents == 2_550
        assert await balance_of(user.id) == 2_550
        assert await balance_of(referrer.id) == 0
        assert await db_session.scalar(
            select(func.count(ReferralEarning.id))
        ) == 0

        row = (
            await db_session.scalars(
                select(Transaction).where(Transaction.user_id == user.id)
            )
        ).one()
        assert row.type == TransactionType.DEPOSIT
        assert row.reference == "ADMIN_ADJUSTMENT"
        assert row.meta == {"source": "admin", "admin_id": admin.id}
        assert notifier.kinds() == ["BALANCE_ADJUSTED"]
        assert notifier.events[0].amounts["balance_after"] == 2_550

    @pytest.mark.asyncio
    async def test_withdraw_debits(self, db_session, make_user, balance_of):
        user = await make_user(balance_cents=10_000)

        await BalanceAdjustmentService(db_session).adjust_balance(
            user.id, "WITHDRAW", 40
        )

        assert await balance_of(user.id) == 6_000
        assert (await LedgerReconciler(db_session).reconcile(user.id)).is_consistent

    @pytest.mark.asyncio
    async def test_withdraw_beyond_balance(self, db_session, make_user, balance_of):
        user = await make_user(balance_cents=1_000)
        user_id = user.id

        with pytest.raises(InsufficientBalance):
            await BalanceAdjustmentService(db_session).adjust_balance(
                user_id, "WITHDRAW", "10.01"
            )

        assert await balance_of(user_id) == 1_000

    @pytest.mark.asyncio
    @pytest.mark.parametrize("action", ["refund", "", None])
    async def test_invalid_action(self, db_session, make_user, action):
        user = await make_user()

        with pytest.raises(InvalidAction):
            await BalanceAdjustmentService(db_session).adjust_balance(
                user.id, action, 10
            )

    @pytest.mark.asyncio
    async def test_invalid_amount(self, db_session, make_user):
        user = await make_user()

        with pytest.raises(InvalidAmount):
            await BalanceAdjustmentService(db_session).adjust_balance(
                user.id, "DEPOSIT", "-5"
            )

    @pytest.mark.asyncio
    async def test_unknown_user(self, db_session):
        with pytest.raises(UserNotFound):
            await BalanceAdjustmentService(db_session).adjust_balance(
                9_001, "DEPOSIT", 5
            )

"""
Admin balance adjustment.

Manual credit or debit of a user's balance. Goes through the balance guard
like every other mutation and is recorded as a DEPOSIT/WITHDRAWAL ledger
row referenced ``ADMIN_ADJUSTMENT``. Adjustments do not pay referral
commissions.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_core.config.constants import ADMIN_ADJUSTMENT_REFERENCE
from ledger_core.config.database import unit_of_work
from ledger_core.models.enums import AdjustmentAction, TransactionType
from ledger_core.models.user import User
from ledger_core.repositories.user_repository import UserRepository
from ledger_core.services.balance.guard import BalanceGuard, LedgerEntry
from ledger_core.services.base_service import BaseService
from ledger_core.services.notification import (
    NotificationEvent,
    NotificationKind,
    Notifier,
)
from ledger_core.utils.exceptions import InvalidAction, UserNotFound
from ledger_core.utils.money import usd_to_cents


class BalanceAdjustmentService(BaseService):
    """Admin-initiated balance changes."""

    def __init__(
        self, session: AsyncSession, notifier: Notifier | None = None
    ) -> None:
        super().__init__(session, notifier)
        self.user_repo = UserRepository(session)
        self.guard = BalanceGuard(session)

    async def adjust_balance(
        self,
        user_id: int,
        action: str,
        amount_usd: Decimal | float | int | str,
        admin_id: int | None = None,
    ) -> User:
        """
        Credit (DEPOSIT) or debit (WITHDRAW) a user's balance.

        Returns:
            The user with the updated balance

        Raises:
            InvalidAction, InvalidAmount, UserNotFound, InsufficientBalance
        """
        try:
            parsed = AdjustmentAction((action or "").strip().upper())
        except ValueError:
            raise InvalidAction(f"Invalid action {action!r}") from None
        amount_cents = usd_to_cents(amount_usd)

        if parsed is AdjustmentAction.DEPOSIT:
            delta, tx_type = amount_cents, TransactionType.DEPOSIT
        else:
            delta, tx_type = -amount_cents, TransactionType.WITHDRAWAL

        async with unit_of_work(self.session):
            user = await self.user_repo.get_for_update(user_id)
            if user is None:
                raise UserNotFound(f"User {user_id} not found")

            change = await self.guard.apply_balance_delta(
                user.id,
                delta,
                LedgerEntry(
                    type=tx_type,
                    reference=ADMIN_ADJUSTMENT_REFERENCE,
                    meta={"source": "admin", "admin_id": admin_id},
                ),
            )

        self.logger.bind(
            user_id=user.id,
            admin_id=admin_id,
            delta_cents=delta,
            balance_after_cents=change.balance_after_cents,
        ).info(f"Admin balance adjustment {parsed.value}")

        await self.notify([
            NotificationEvent(
                kind=NotificationKind.BALANCE_ADJUSTED,
                recipient_email=user.email,
                recipient_name=user.display_name,
                amounts={
                    "amount": amount_cents,
                    "balance_after": change.balance_after_cents,
                },
                context={"action": parsed.value},
            )
        ])
        return user

"""
Account balance invariant guard.

The only code path that mutates ``User.balance_cents``. Each mutation is a
single conditional UPDATE, so the non-negative invariant holds under any
interleaving, and each one is paired with exactly one COMPLETED ledger row.
"""

from dataclasses import dataclass
from typing import Any

from loguru import logger
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_core.config.constants import LEDGER_ASSET
from ledger_core.models.enums import TransactionStatus, TransactionType
from ledger_core.models.transaction import Transaction
from ledger_core.models.user import User
from ledger_core.repositories.transaction_repository import (
    TransactionRepository,
)
from ledger_core.utils.exceptions import (
    InsufficientBalance,
    InvalidAmount,
    UserNotFound,
)


@dataclass(frozen=True)
class LedgerEntry:
    """Description of the ledger row to insert alongside a balance change."""

    type: TransactionType
    asset: str = LEDGER_ASSET
    reference: str | None = None
    meta: dict[str, Any] | None = None


@dataclass(frozen=True)
class BalanceChange:
    """Result of an applied balance delta."""

    user_id: int
    delta_cents: int
    balance_after_cents: int
    transaction: Transaction


class BalanceGuard:
    """
    Applies balance deltas atomically.

    Flushes but never commits: the caller's unit of work decides whether the
    change and its ledger row persist together or not at all.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.transaction_repo = TransactionRepository(session)
        self.logger = logger.bind(service="BalanceGuard")

    async def apply_balance_delta(
        self,
        user_id: int,
        delta_cents: int,
        entry: LedgerEntry | Transaction,
    ) -> BalanceChange:
        """
        Add ``delta_cents`` to the user's balance.

        Args:
            user_id: Account to change
            delta_cents: Signed, non-zero amount in cents
            entry: ``LedgerEntry`` for a new COMPLETED row, or an existing
                PENDING ``Transaction`` of this user to settle

        Returns:
            BalanceChange with the post-update balance and the ledger row

        Raises:
            InvalidAmount: delta is zero or not an integer
            UserNotFound: No such user
            InsufficientBalance: Result would be negative
        """
        if (
            isinstance(delta_cents, bool)
            or not isinstance(delta_cents, int)
            or delta_cents == 0
        ):
            raise InvalidAmount(
                f"Balance delta must be a non-zero integer, got {delta_cents!r}"
            )

        self._check_entry(user_id, delta_cents, entry)

        stmt = (
            update(User)
            .where(
                User.id == user_id,
                User.balance_cents + delta_cents >= 0,
            )
            .values(balance_cents=User.balance_cents + delta_cents)
            .returning(User.balance_cents)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        balance_after = result.scalar_one_or_none()

        # Bring any loaded User instance up to date (and tell the two
        # failure cases apart when nothing matched)
        user = await self.session.get(User, user_id, populate_existing=True)

        if balance_after is None:
            if user is None:
                raise UserNotFound(f"User {user_id} not found")
            raise InsufficientBalance(
                f"Balance {user.balance_cents} cannot absorb {delta_cents}",
                user_id=user_id,
                balance_cents=user.balance_cents,
                delta_cents=delta_cents,
            )

        transaction = await self._record(user_id, delta_cents, entry)

        self.logger.bind(
            user_id=user_id,
            delta_cents=delta_cents,
            balance_after_cents=balance_after,
            transaction_id=transaction.id,
            type=transaction.type,
        ).info(
            f"Balance {'credit' if delta_cents > 0 else 'debit'} applied"
        )

        return BalanceChange(
            user_id=user_id,
            delta_cents=delta_cents,
            balance_after_cents=int(balance_after),
            transaction=transaction,
        )

    async def credit(
        self, user_id: int, amount_cents: int, entry: LedgerEntry | Transaction
    ) -> BalanceChange:
        """Positive delta."""
        if amount_cents <= 0:
            raise InvalidAmount(f"Credit must be positive, got {amount_cents}")
        return await self.apply_balance_delta(user_id, amount_cents, entry)

    async def debit(
        self, user_id: int, amount_cents: int, entry: LedgerEntry | Transaction
    ) -> BalanceChange:
        """Negative delta."""
        if amount_cents <= 0:
            raise InvalidAmount(f"Debit must be positive, got {amount_cents}")
        return await self.apply_balance_delta(user_id, -amount_cents, entry)

    @staticmethod
    def _check_entry(
        user_id: int, delta_cents: int, entry: LedgerEntry | Transaction
    ) -> None:
        """Ledger row must describe exactly this delta."""
        if isinstance(entry, Transaction):
            if entry.user_id != user_id:
                raise ValueError(
                    f"Transaction {entry.id} belongs to user {entry.user_id}, "
                    f"not {user_id}"
                )
            if entry.status != TransactionStatus.PENDING:
                raise ValueError(
                    f"Only PENDING transactions can be settled, "
                    f"{entry.id} is {entry.status}"
                )
            if entry.amount_cents != abs(delta_cents):
                raise ValueError(
                    f"Transaction {entry.id} amount {entry.amount_cents} "
                    f"does not match delta {delta_cents}"
                )
            tx_type = TransactionType(entry.type)
        else:
            tx_type = entry.type

        if tx_type.sign * delta_cents < 0:
            raise ValueError(
                f"{tx_type.value} row cannot describe a delta of {delta_cents}"
            )

    async def _record(
        self, user_id: int, delta_cents: int, entry: LedgerEntry | Transaction
    ) -> Transaction:
        if isinstance(entry, Transaction):
            entry.status = TransactionStatus.COMPLETED.value
            await self.session.flush()
            return entry

        return await self.transaction_repo.create_entry(
            user_id=user_id,
            type=entry.type,
            amount_cents=abs(delta_cents),
            status=TransactionStatus.COMPLETED,
            asset=entry.asset,
            reference=entry.reference,
            meta=entry.meta,
        )

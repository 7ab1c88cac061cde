"""
Withdrawal workflow.

PENDING -> APPROVED (guard debit + WITHDRAWAL ledger row)
PENDING -> REJECTED (no balance effect)

Pending withdrawals reserve funds: a new request must fit in
``balance - sum(pending)``. The balance itself only moves on approval.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_core.config.constants import DEFAULT_WITHDRAWAL_REJECT_REASON
from ledger_core.config.database import unit_of_work
from ledger_core.models.enums import TransactionType, WithdrawalStatus
from ledger_core.models.withdrawal import Withdrawal
from ledger_core.repositories.user_repository import UserRepository
from ledger_core.repositories.wallet_address_repository import (
    WalletAddressRepository,
)
from ledger_core.repositories.withdrawal_repository import (
    WithdrawalRepository,
)
from ledger_core.services.balance.guard import BalanceGuard, LedgerEntry
from ledger_core.services.base_service import BaseService
from ledger_core.services.notification import (
    NotificationEvent,
    NotificationKind,
    Notifier,
)
from ledger_core.utils.datetime_utils import utc_now
from ledger_core.utils.exceptions import (
    InsufficientAvailableBalance,
    NoSavedAddress,
    NotFound,
    NotPending,
    UserNotFound,
)
from ledger_core.utils.money import format_usd, usd_to_cents
from ledger_core.utils.validation import normalize_asset, normalize_network


@dataclass(frozen=True)
class WithdrawalSummary:
    balance_cents: int
    pending_cents: int
    available_cents: int


class WithdrawalWorkflow(BaseService):
    """Withdrawal requests and their admin review."""

    def __init__(
        self, session: AsyncSession, notifier: Notifier | None = None
    ) -> None:
        super().__init__(session, notifier)
        self.user_repo = UserRepository(session)
        self.withdrawal_repo = WithdrawalRepository(session)
        self.address_repo = WalletAddressRepository(session)
        self.guard = BalanceGuard(session)

    async def get_withdrawal_summary(self, user_id: int) -> WithdrawalSummary:
        """
        Balance, reserved and available amounts.

        Raises:
            UserNotFound
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFound(f"User {user_id} not found")
        pending = await self.withdrawal_repo.get_pending_total(user_id)
        return WithdrawalSummary(
            balance_cents=user.balance_cents,
            pending_cents=pending,
            available_cents=max(0, user.balance_cents - pending),
        )

    async def request_withdrawal(
        self,
        user_id: int,
        asset: str,
        amount_usd: Decimal | float | int | str,
        network: str | None = None,
    ) -> Withdrawal:
        """
        Create a PENDING withdrawal to the user's saved address.

        The user row is locked while available balance is checked, so two
        concurrent requests cannot both reserve the same funds.

        Raises:
            UnsupportedAsset, InvalidAmount, InvalidNetwork,
            InsufficientAvailableBalance, NoSavedAddress, UserNotFound
        """
        symbol = normalize_asset(asset)
        amount_cents = usd_to_cents(amount_usd)
        net = normalize_network(symbol, network)

        async with unit_of_work(self.session):
            user = await self.user_repo.get_for_update(user_id)
            if user is None:
                raise UserNotFound(f"User {user_id} not found")

            pending = await self.withdrawal_repo.get_pending_total(user.id)
            available = max(0, user.balance_cents - pending)
            if amount_cents > available:
                raise InsufficientAvailableBalance(
                    f"Insufficient available balance. "
                    f"Available: {format_usd(available)}",
                    available_cents=available,
                    amount_cents=amount_cents,
                )

            wallet = await self.address_repo.get_address(user.id, symbol, net)
            if wallet is None:
                raise NoSavedAddress(
                    f"No saved {symbol}{f' {net}' if net else ''} address"
                )

            withdrawal = await self.withdrawal_repo.create(
                user_id=user.id,
                amount_cents=amount_cents,
                asset=symbol,
                network=net,
                target_address=wallet.address,
                status=WithdrawalStatus.PENDING.value,
            )

        self.logger.bind(
            withdrawal_id=withdrawal.id,
            user_id=user.id,
            asset=symbol,
            network=net,
            amount_cents=amount_cents,
        ).info("Withdrawal requested")

        await self.notify(
            await self.admin_events(
                NotificationKind.WITHDRAWAL_REQUESTED,
                amounts={
                    "amount": amount_cents,
                    "available_after": available - amount_cents,
                },
                context={
                    "withdrawal_id": withdrawal.id,
                    "user_id": user.id,
                    "user_email": user.email,
                    "asset": symbol,
                    "network": net,
                    "target_address": withdrawal.target_address,
                },
            )
        )
        return withdrawal

    async def approve_withdrawal(
        self, withdrawal_id: int, reviewer_id: int | None
    ) -> Withdrawal:
        """
        Approve and debit the balance.

        Raises:
            NotFound, NotPending, InsufficientBalance (nothing is changed)
        """
        async with unit_of_work(self.session):
            withdrawal = await self._get_pending(withdrawal_id)
            withdrawal.status = WithdrawalStatus.APPROVED.value
            withdrawal.reviewed_by_id = reviewer_id
            withdrawal.reviewed_at = utc_now()
            await self.session.flush()

            await self.guard.debit(
                withdrawal.user_id,
                withdrawal.amount_cents,
                LedgerEntry(
                    type=TransactionType.WITHDRAWAL,
                    asset=withdrawal.asset,
                    reference=str(withdrawal.id),
                    meta={
                        "withdrawal_id": withdrawal.id,
                        "network": withdrawal.network,
                        "target_address": withdrawal.target_address,
                        "reviewed_by_id": reviewer_id,
                    },
                ),
            )
            user = await self.user_repo.get_by_id(withdrawal.user_id)

        self.logger.bind(
            withdrawal_id=withdrawal.id,
            user_id=withdrawal.user_id,
            amount_cents=withdrawal.amount_cents,
            reviewer_id=reviewer_id,
        ).info("Withdrawal approved")
        await self.notify([
            self._user_event(
                NotificationKind.WITHDRAWAL_APPROVED, withdrawal, user
            )
        ])
        return withdrawal

    async def reject_withdrawal(
        self,
        withdrawal_id: int,
        reviewer_id: int | None,
        reason: str | None = None,
    ) -> Withdrawal:
        """
        Reject without touching the balance.

        Raises:
            NotFound, NotPending
        """
        reason = (reason or "").strip() or DEFAULT_WITHDRAWAL_REJECT_REASON

        async with unit_of_work(self.session):
            withdrawal = await self._get_pending(withdrawal_id)
            withdrawal.status = WithdrawalStatus.REJECTED.value
            withdrawal.reviewed_by_id = reviewer_id
            withdrawal.reviewed_at = utc_now()
            withdrawal.reject_reason = reason
            await self.session.flush()
            user = await self.user_repo.get_by_id(withdrawal.user_id)

        self.logger.bind(withdrawal_id=withdrawal.id, reason=reason).info(
            "Withdrawal rejected"
        )
        await self.notify([
            self._user_event(
                NotificationKind.WITHDRAWAL_REJECTED, withdrawal, user
            )
        ])
        return withdrawal

    async def list_pending(self, limit: int = 200) -> list[Withdrawal]:
        """Admin review queue."""
        return await self.withdrawal_repo.get_pending(limit=limit)

    async def _get_pending(self, withdrawal_id: int) -> Withdrawal:
        withdrawal = await self.withdrawal_repo.get_for_update(withdrawal_id)
        if withdrawal is None:
            raise NotFound(f"Withdrawal {withdrawal_id} not found")
        if withdrawal.status != WithdrawalStatus.PENDING:
            raise NotPending(f"Withdrawal {withdrawal_id} is {withdrawal.status}")
        return withdrawal

    @staticmethod
    def _user_event(kind, withdrawal, user) -> NotificationEvent:
        return NotificationEvent(
            kind=kind,
            recipient_email=user.email if user else None,
            recipient_name=user.display_name if user else None,
            amounts={"amount": withdrawal.amount_cents},
            context={
                "withdrawal_id": withdrawal.id,
                "asset": withdrawal.asset,
                "network": withdrawal.network,
                "target_address": withdrawal.target_address,
                "reason": withdrawal.reject_reason,
            },
        )

"""
Deposit workflow.

PENDING -> COMPLETED (approve: credit + referral cascade)
PENDING -> FAILED (reject: no balance effect)
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_core.config.constants import DEFAULT_DEPOSIT_REJECT_REASON
from ledger_core.config.database import unit_of_work
from ledger_core.models.enums import TransactionStatus, TransactionType
from ledger_core.models.transaction import Transaction
from ledger_core.repositories.platform_settings_repository import (
    PlatformSettingsRepository,
)
from ledger_core.repositories.transaction_repository import (
    TransactionRepository,
)
from ledger_core.repositories.user_repository import UserRepository
from ledger_core.services.balance.guard import BalanceGuard
from ledger_core.services.base_service import BaseService
from ledger_core.services.notification import (
    NotificationEvent,
    NotificationKind,
    Notifier,
)
from ledger_core.services.referral.cascader import ReferralCommissionCascader
from ledger_core.utils.exceptions import NotFound, NotPending, UserNotFound
from ledger_core.utils.money import usd_to_cents
from ledger_core.utils.validation import normalize_asset


class DepositWorkflow(BaseService):
    """Deposit requests and their admin review."""

    def __init__(
        self, session: AsyncSession, notifier: Notifier | None = None
    ) -> None:
        super().__init__(session, notifier)
        self.user_repo = UserRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.settings_repo = PlatformSettingsRepository(session)
        self.guard = BalanceGuard(session)
        self.cascader = ReferralCommissionCascader(session, self.guard)

    async def request_deposit(
        self,
        user_id: int,
        asset: str,
        amount_usd: Decimal | float | int | str,
        reference: str | None = None,
        note: str | None = None,
    ) -> Transaction:
        """
        Record a deposit the user claims to have sent.

        No balance effect until an admin approves it.

        Raises:
            UnsupportedAsset, InvalidAmount, UserNotFound
        """
        symbol = normalize_asset(asset)
        amount_cents = usd_to_cents(amount_usd)

        async with unit_of_work(self.session):
            user = await self.user_repo.get_by_id(user_id)
            if user is None:
                raise UserNotFound(f"User {user_id} not found")

            referrer = await self.user_repo.get_referrer(user)
            tx = await self.transaction_repo.create_entry(
                user_id=user.id,
                type=TransactionType.DEPOSIT,
                amount_cents=amount_cents,
                status=TransactionStatus.PENDING,
                asset=symbol,
                reference=(reference or "").strip() or None,
                meta={
                    "note": (note or "").strip() or None,
                    "referrer": (
                        {
                            "id": referrer.id,
                            "email": referrer.email,
                            "name": referrer.name,
                            "referral_code": referrer.referral_code,
                        }
                        if referrer
                        else None
                    ),
                },
            )

        self.logger.bind(
            transaction_id=tx.id,
            user_id=user.id,
            asset=symbol,
            amount_cents=amount_cents,
        ).info("Deposit requested")

        await self.notify(
            await self.admin_events(
                NotificationKind.DEPOSIT_REQUESTED,
                amounts={"amount": amount_cents},
                context={
                    "transaction_id": tx.id,
                    "user_id": user.id,
                    "user_email": user.email,
                    "asset": symbol,
                    "reference": tx.reference,
                },
            )
        )
        return tx

    async def approve_deposit(self, tx_id: int) -> Transaction:
        """
        Settle a pending deposit, credit it and pay referral commissions.

        Raises:
            NotFound: Missing or not a deposit
            NotPending: Already reviewed
        """
        async with unit_of_work(self.session):
            tx = await self._get_pending_deposit(tx_id)

            depositor = await self.user_repo.get_by_id(tx.user_id)
            if depositor is None:
                raise UserNotFound(f"User {tx.user_id} not found")

            await self.guard.credit(depositor.id, tx.amount_cents, tx)

            config = await self.settings_repo.load()
            commissions = await self.cascader.distribute_commission(
                depositor,
                tx.amount_cents,
                config,
                source_transaction_id=tx.id,
            )

        self.logger.bind(
            transaction_id=tx.id,
            user_id=depositor.id,
            amount_cents=tx.amount_cents,
            commissions=len(commissions),
        ).info("Deposit approved")

        events = [
            NotificationEvent(
                kind=NotificationKind.DEPOSIT_APPROVED,
                recipient_email=depositor.email,
                recipient_name=depositor.display_name,
                amounts={"amount": tx.amount_cents},
                context={"transaction_id": tx.id, "asset": tx.asset},
            )
        ]
        events.extend(c.to_event() for c in commissions)
        await self.notify(events)
        return tx

    async def reject_deposit(
        self, tx_id: int, reason: str | None = None
    ) -> Transaction:
        """
        Mark a pending deposit FAILED with a reject reason.

        Raises:
            NotFound, NotPending
        """
        reason = (reason or "").strip() or DEFAULT_DEPOSIT_REJECT_REASON

        async with unit_of_work(self.session):
            tx = await self._get_pending_deposit(tx_id)
            tx.status = TransactionStatus.FAILED.value
            # New dict so the JSON column change is detected
            tx.meta = {**(tx.meta or {}), "reject_reason": reason}
            await self.session.flush()
            depositor = await self.user_repo.get_by_id(tx.user_id)

        self.logger.bind(transaction_id=tx.id, reason=reason).info(
            "Deposit rejected"
        )

        if depositor is not None:
            await self.notify([
                NotificationEvent(
                    kind=NotificationKind.DEPOSIT_REJECTED,
                    recipient_email=depositor.email,
                    recipient_name=depositor.display_name,
                    amounts={"amount": tx.amount_cents},
                    context={
                        "transaction_id": tx.id,
                        "asset": tx.asset,
                        "reason": reason,
                    },
                )
            ])
        return tx

    async def list_pending(self, limit: int = 200) -> list[Transaction]:
        """Admin review queue."""
        return await self.transaction_repo.get_pending_deposits(limit=limit)

    async def _get_pending_deposit(self, tx_id: int) -> Transaction:
        tx = await self.transaction_repo.get_for_update(tx_id)
        if tx is None or tx.type != TransactionType.DEPOSIT:
            raise NotFound(f"Deposit request {tx_id} not found")
        if tx.status != TransactionStatus.PENDING:
            raise NotPending(f"Deposit {tx_id} is {tx.status}")
        return tx

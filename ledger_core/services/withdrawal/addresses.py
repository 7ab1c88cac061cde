"""
Saved wallet addresses.

One payout address per (user, asset, network); withdrawals resolve their
destination here.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_core.config.database import unit_of_work
from ledger_core.models.wallet_address import WalletAddress
from ledger_core.repositories.user_repository import UserRepository
from ledger_core.repositories.wallet_address_repository import (
    WalletAddressRepository,
)
from ledger_core.services.base_service import BaseService
from ledger_core.utils.exceptions import UserNotFound
from ledger_core.utils.validation import normalize_asset, normalize_network


class WalletAddressService(BaseService):
    """Manage a user's payout addresses."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.user_repo = UserRepository(session)
        self.address_repo = WalletAddressRepository(session)

    async def save_address(
        self,
        user_id: int,
        asset: str,
        network: str | None,
        address: str | None,
    ) -> WalletAddress | None:
        """
        Set the address for (asset, network); an empty address clears it.

        Returns:
            Saved row, or None when cleared

        Raises:
            UnsupportedAsset, InvalidNetwork, UserNotFound
        """
        symbol = normalize_asset(asset)
        net = normalize_network(symbol, network)
        cleaned = (address or "").strip()

        async with unit_of_work(self.session):
            if await self.user_repo.get_by_id(user_id) is None:
                raise UserNotFound(f"User {user_id} not found")

            if cleaned:
                row = await self.address_repo.upsert(
                    user_id, symbol, net, cleaned
                )
            else:
                row = None
                removed = await self.address_repo.remove(user_id, symbol, net)

        if row is not None:
            self.logger.info(
                f"Wallet address saved for user {user_id}: {symbol}/{net or '-'}"
            )
        else:
            self.logger.info(
                f"Wallet address cleared for user {user_id}: "
                f"{symbol}/{net or '-'} (existed={removed})"
            )
        return row

    async def list_addresses(self, user_id: int) -> list[WalletAddress]:
        """Saved addresses ordered by asset then network."""
        return await self.address_repo.get_user_addresses(user_id)

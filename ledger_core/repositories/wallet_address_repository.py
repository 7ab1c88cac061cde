"""
WalletAddress repository.

Data access layer for WalletAddress model.
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_core.models.wallet_address import WalletAddress
from ledger_core.repositories.base import BaseRepository


class WalletAddressRepository(BaseRepository[WalletAddress]):
    """WalletAddress repository. ``network`` is '' for network-less assets."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize wallet address repository."""
        super().__init__(WalletAddress, session)

    async def get_address(
        self, user_id: int, asset: str, network: str | None
    ) -> WalletAddress | None:
        stmt = select(WalletAddress).where(
            WalletAddress.user_id == user_id,
            WalletAddress.asset == asset,
            WalletAddress.network == (network or ""),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert(
        self, user_id: int, asset: str, network: str | None, address: str
    ) -> WalletAddress:
        """Create or replace the saved address for (user, asset, network)."""
        existing = await self.get_address(user_id, asset, network)
        if existing:
            existing.address = address
            await self.session.flush()
            return existing
        return await self.create(
            user_id=user_id,
            asset=asset,
            network=network or "",
            address=address,
        )

    async def remove(
        self, user_id: int, asset: str, network: str | None
    ) -> bool:
        """Delete the saved address. Returns True if one existed."""
        stmt = delete(WalletAddress).where(
            WalletAddress.user_id == user_id,
            WalletAddress.asset == asset,
            WalletAddress.network == (network or ""),
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def get_user_addresses(self, user_id: int) -> list[WalletAddress]:
        stmt = (
            select(WalletAddress)
            .where(WalletAddress.user_id == user_id)
            .order_by(WalletAddress.asset, WalletAddress.network)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

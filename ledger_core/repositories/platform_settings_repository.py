"""
PlatformSettings repository.

Loads the singleton settings row as an immutable ``PlatformConfig`` that
services receive as a parameter.
"""

from dataclasses import dataclass

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_core.config.constants import BPS_DENOMINATOR, PLATFORM_SETTINGS_ID
from ledger_core.models.platform_settings import PlatformSettings
from ledger_core.repositories.base import BaseRepository
from ledger_core.utils.exceptions import ValidationError


@dataclass(frozen=True)
class PlatformConfig:
    """Snapshot of platform settings for one operation."""

    level1_bps: int = 500
    level2_bps: int = 200
    btc_deposit_address: str | None = None
    eth_deposit_address: str | None = None
    usdt_trc20_deposit_address: str | None = None
    usdt_bep20_deposit_address: str | None = None
    usdt_erc20_deposit_address: str | None = None

    @classmethod
    def from_model(cls, row: PlatformSettings) -> "PlatformConfig":
        return cls(
            level1_bps=row.level1_bps,
            level2_bps=row.level2_bps,
            btc_deposit_address=row.btc_deposit_address,
            eth_deposit_address=row.eth_deposit_address,
            usdt_trc20_deposit_address=row.usdt_trc20_deposit_address,
            usdt_bep20_deposit_address=row.usdt_bep20_deposit_address,
            usdt_erc20_deposit_address=row.usdt_erc20_deposit_address,
        )

    def deposit_addresses(self) -> dict[str, str | dict[str, str | None] | None]:
        """
        Deposit addresses shown to users.

        Returns:
            {"BTC": addr, "ETH": addr, "USDT": {"TRC20": addr, ...}}
        """
        return {
            "BTC": self.btc_deposit_address,
            "ETH": self.eth_deposit_address,
            "USDT": {
                "TRC20": self.usdt_trc20_deposit_address,
                "BEP20": self.usdt_bep20_deposit_address,
                "ERC20": self.usdt_erc20_deposit_address,
            },
        }


class PlatformSettingsRepository(BaseRepository[PlatformSettings]):
    """Repository for the singleton settings row."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize platform settings repository."""
        super().__init__(PlatformSettings, session)

    async def get_or_create(self) -> PlatformSettings:
        """Return row 1, inserting it with defaults when missing."""
        row = await self.get_by_id(PLATFORM_SETTINGS_ID)
        if row is None:
            logger.info("Platform settings row missing, creating defaults")
            row = await self.create(id=PLATFORM_SETTINGS_ID)
        return row

    async def load(self) -> PlatformConfig:
        """Load settings as an immutable config value."""
        return PlatformConfig.from_model(await self.get_or_create())

    async def update_commission_rates(
        self, level1_bps: int, level2_bps: int
    ) -> PlatformConfig:
        """
        Change referral commission rates.

        Raises:
            ValidationError: If a rate is outside 0..10000 bps
        """
        for label, value in (("level1_bps", level1_bps), ("level2_bps", level2_bps)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError(f"{label} must be an integer")
            if not 0 <= value <= BPS_DENOMINATOR:
                raise ValidationError(
                    f"{label} must be between 0 and {BPS_DENOMINATOR}"
                )

        row = await self.get_or_create()
        row.level1_bps = level1_bps
        row.level2_bps = level2_bps
        await self.session.flush()

        logger.bind(level1_bps=level1_bps, level2_bps=level2_bps).info(
            "Referral commission rates updated"
        )
        return PlatformConfig.from_model(row)

    async def update_deposit_addresses(self, **addresses: str | None) -> PlatformConfig:
        """
        Set deposit addresses; empty strings clear an address.

        Accepts the ``*_deposit_address`` column names as keywords.
        """
        row = await self.get_or_create()
        for key, value in addresses.items():
            if not key.endswith("_deposit_address") or not hasattr(row, key):
                raise ValidationError(f"Unknown deposit address field: {key}")
            value = (value or "").strip()
            setattr(row, key, value or None)
        await self.session.flush()
        return PlatformConfig.from_model(row)

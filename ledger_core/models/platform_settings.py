"""
PlatformSettings model.

Singleton row (id = 1) holding referral rates and deposit addresses.
"""

from datetime import UTC, datetime

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_core.models.base import Base
from ledger_core.models.types import UTCDateTime


class PlatformSettings(Base):
    """Platform-wide settings."""

    __tablename__ = "platform_settings"
    __table_args__ = (
        CheckConstraint(
            'level1_bps >= 0 AND level1_bps <= 10000',
            name='check_settings_level1_bps_range'
        ),
        CheckConstraint(
            'level2_bps >= 0 AND level2_bps <= 10000',
            name='check_settings_level2_bps_range'
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # Referral commission rates
    level1_bps: Mapped[int] = mapped_column(
        Integer, default=500, nullable=False
    )
    level2_bps: Mapped[int] = mapped_column(
        Integer, default=200, nullable=False
    )

    # Deposit addresses shown to users
    btc_deposit_address: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    eth_deposit_address: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    usdt_trc20_deposit_address: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    usdt_bep20_deposit_address: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    usdt_erc20_deposit_address: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<PlatformSettings(level1_bps={self.level1_bps}, "
            f"level2_bps={self.level2_bps})>"
        )

"""
WalletAddress model.

User's saved payout address per asset/network.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_core.models.base import Base
from ledger_core.models.types import UTCDateTime

if TYPE_CHECKING:
    from ledger_core.models.user import User


class WalletAddress(Base):
    """Saved wallet address."""

    __tablename__ = "wallet_addresses"
    __table_args__ = (
        UniqueConstraint(
            'user_id', 'asset', 'network',
            name='uq_wallet_address_user_asset_network'
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    asset: Mapped[str] = mapped_column(String(10), nullable=False)
    # Empty string for assets without a network so the unique key holds
    network: Mapped[str] = mapped_column(
        String(10), nullable=False, default=""
    )
    address: Mapped[str] = mapped_column(String(255), nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    user: Mapped["User"] = relationship(
        "User", back_populates="wallet_addresses"
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<WalletAddress(user_id={self.user_id}, asset={self.asset}, "
            f"network={self.network or '-'})>"
        )

"""
User model.

Represents a platform account holding a spendable USD balance.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_core.models.base import Base
from ledger_core.models.types import MoneyCents, UTCDateTime

if TYPE_CHECKING:
    from ledger_core.models.investment import Investment
    from ledger_core.models.transaction import Transaction
    from ledger_core.models.wallet_address import WalletAddress
    from ledger_core.models.withdrawal import Withdrawal


class User(Base):
    """
    User model.

    ``balance_cents`` is mutated only through the balance guard, never
    assigned directly by services.

    ``referred_by_id`` is a weak lookup key: deleting the referrer nulls it
    and no relationship cascades through it.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            'balance_cents >= 0', name='check_user_balance_non_negative'
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Identity
    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )
    username: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True
    )
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    referral_code: Mapped[str | None] = mapped_column(
        String(32), nullable=True, unique=True, index=True
    )

    # Balance
    balance_cents: Mapped[int] = mapped_column(
        MoneyCents, default=0, nullable=False
    )

    # Referral (weak, optional)
    referred_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Status flags
    is_admin: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    # Relationships
    investments: Mapped[list["Investment"]] = relationship(
        "Investment",
        back_populates="user",
        passive_deletes="all",
    )
    transactions: Mapped[list["Transaction"]] = relationship(
        "Transaction",
        back_populates="user",
        passive_deletes="all",
    )
    withdrawals: Mapped[list["Withdrawal"]] = relationship(
        "Withdrawal",
        back_populates="user",
        passive_deletes="all",
        foreign_keys="Withdrawal.user_id",
    )
    wallet_addresses: Mapped[list["WalletAddress"]] = relationship(
        "WalletAddress",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    @property
    def display_name(self) -> str:
        """Name used in notifications."""
        return self.name or self.username or self.email

    @property
    def balance_usd(self) -> str:
        """Balance formatted as dollars for display."""
        return f"{self.balance_cents / 100:.2f}"

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<User(id={self.id}, email={self.email}, "
            f"balance_cents={self.balance_cents})>"
        )

"""
Withdrawal model.

User request to move funds out of the platform, reviewed by an admin.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_core.models.base import Base
from ledger_core.models.enums import WithdrawalStatus
from ledger_core.models.types import MoneyCents, UTCDateTime

if TYPE_CHECKING:
    from ledger_core.models.user import User


class Withdrawal(Base):
    """Withdrawal model - PENDING -> APPROVED | REJECTED."""

    __tablename__ = "withdrawals"
    __table_args__ = (
        CheckConstraint(
            'amount_cents > 0', name='check_withdrawal_amount_positive'
        ),
        Index('idx_withdrawal_user_status', 'user_id', 'status'),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    amount_cents: Mapped[int] = mapped_column(MoneyCents, nullable=False)
    asset: Mapped[str] = mapped_column(String(10), nullable=False)
    network: Mapped[str | None] = mapped_column(String(10), nullable=True)
    target_address: Mapped[str] = mapped_column(
        String(255), nullable=False
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=WithdrawalStatus.PENDING.value,
        index=True,
    )
    reject_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Review
    reviewed_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True
    )
    reviewed_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(UTC), nullable=False
    )

    user: Mapped["User"] = relationship(
        "User", back_populates="withdrawals", foreign_keys=[user_id]
    )

    @property
    def is_pending(self) -> bool:
        return self.status == WithdrawalStatus.PENDING

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Withdrawal(id={self.id}, user_id={self.user_id}, "
            f"amount_cents={self.amount_cents}, status={self.status})>"
        )

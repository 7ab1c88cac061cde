"""
Transaction model.

Append-only ledger. Every balance mutation is described by exactly one
COMPLETED row; PENDING rows (deposit requests) have no balance effect.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_core.models.base import Base
from ledger_core.models.enums import TransactionStatus, TransactionType
from ledger_core.models.types import JSONType, MoneyCents, UTCDateTime

if TYPE_CHECKING:
    from ledger_core.models.user import User


class Transaction(Base):
    """Transaction model - ledger row."""

    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint(
            'amount_cents > 0', name='check_transaction_amount_positive'
        ),
        Index('idx_transaction_user_status', 'user_id', 'status'),
        Index('idx_transaction_type_status', 'type', 'status'),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    type: Mapped[str] = mapped_column(String(32), nullable=False)
    amount_cents: Mapped[int] = mapped_column(MoneyCents, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=TransactionStatus.PENDING.value,
    )
    asset: Mapped[str] = mapped_column(
        String(10), nullable=False, default="USDT"
    )
    reference: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    meta: Mapped[dict[str, Any] | None] = mapped_column(
        JSONType, nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    user: Mapped["User"] = relationship(
        "User", back_populates="transactions"
    )

    @property
    def signed_amount_cents(self) -> int:
        """Amount with the sign implied by the transaction type."""
        return TransactionType(self.type).sign * self.amount_cents

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Transaction(id={self.id}, user_id={self.user_id}, "
            f"type={self.type}, amount_cents={self.amount_cents}, "
            f"status={self.status})>"
        )

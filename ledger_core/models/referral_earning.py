"""
ReferralEarning model.

Immutable record of a commission paid to an upline referrer.
"""

from datetime import UTC, datetime

from sqlalchemy import CheckConstraint, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from ledger_core.models.base import Base
from ledger_core.models.types import MoneyCents, UTCDateTime


class ReferralEarning(Base):
    """Commission earned by ``earner_id`` from activity of ``from_user_id``."""

    __tablename__ = "referral_earnings"
    __table_args__ = (
        CheckConstraint(
            'level IN (1, 2)', name='check_referral_earning_level'
        ),
        CheckConstraint(
            'amount_cents > 0', name='check_referral_earning_amount_positive'
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    earner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    from_user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    level: Mapped[int] = mapped_column(Integer, nullable=False)
    amount_cents: Mapped[int] = mapped_column(MoneyCents, nullable=False)

    # Source of the commission
    source_investment_id: Mapped[int | None] = mapped_column(
        ForeignKey("investments.id", ondelete="SET NULL"), nullable=True
    )
    source_transaction_id: Mapped[int | None] = mapped_column(
        ForeignKey("transactions.id", ondelete="SET NULL"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(UTC), nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<ReferralEarning(id={self.id}, earner_id={self.earner_id}, "
            f"from_user_id={self.from_user_id}, level={self.level}, "
            f"amount_cents={self.amount_cents})>"
        )

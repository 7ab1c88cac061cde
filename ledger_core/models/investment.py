"""
Investment model.

A user's allocation of balance into a plan.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_core.models.base import Base
from ledger_core.models.enums import InvestmentStatus
from ledger_core.models.types import MoneyCents, UTCDateTime

if TYPE_CHECKING:
    from ledger_core.models.plan import Plan
    from ledger_core.models.user import User


class Investment(Base):
    """
    Investment entity.

    Attributes:
        amount_cents: Principal, immutable after creation
        status: ACTIVE -> COMPLETED (accrual) or ACTIVE -> CANCELLED
        end_date: start_date + plan duration, None for open-ended plans
        last_roi_accrued_at: Watermark of the last accrual commit
        accrued_return_cents: Profit credited so far
        accrued_days: Yield days credited so far, never above the duration
    """

    __tablename__ = "investments"
    __table_args__ = (
        CheckConstraint(
            'amount_cents > 0', name='check_investment_amount_positive'
        ),
        CheckConstraint(
            'accrued_return_cents >= 0',
            name='check_investment_accrued_return_non_negative'
        ),
        CheckConstraint(
            'accrued_days >= 0',
            name='check_investment_accrued_days_non_negative'
        ),
        Index('idx_investment_user_plan', 'user_id', 'plan_id'),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    plan_id: Mapped[int] = mapped_column(
        ForeignKey("plans.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    amount_cents: Mapped[int] = mapped_column(MoneyCents, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=InvestmentStatus.ACTIVE.value,
        index=True,
    )

    # Term
    start_date: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(UTC), nullable=False
    )
    end_date: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True
    )

    # Accrual progress
    last_roi_accrued_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False
    )
    accrued_return_cents: Mapped[int] = mapped_column(
        MoneyCents, default=0, nullable=False
    )
    accrued_days: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(UTC), nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User", back_populates="investments"
    )
    plan: Mapped["Plan"] = relationship("Plan", lazy="selectin")

    @property
    def is_active(self) -> bool:
        return self.status == InvestmentStatus.ACTIVE

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Investment(id={self.id}, user_id={self.user_id}, "
            f"plan_id={self.plan_id}, amount_cents={self.amount_cents}, "
            f"status={self.status})>"
        )

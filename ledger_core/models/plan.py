"""
Plan model.

Yield plan catalog. Read-only for the ledger core.
"""

from sqlalchemy import Boolean, CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_core.models.base import Base
from ledger_core.models.types import MoneyCents


class Plan(Base):
    """Plan model - fixed or open-ended yield product."""

    __tablename__ = "plans"
    __table_args__ = (
        CheckConstraint(
            'daily_roi_bps >= 0', name='check_plan_daily_roi_non_negative'
        ),
        CheckConstraint(
            'duration_days IS NULL OR duration_days > 0',
            name='check_plan_duration_positive'
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(
        String(100), unique=True, index=True, nullable=False
    )

    # Yield terms
    daily_roi_bps: Mapped[int] = mapped_column(Integer, nullable=False)
    duration_days: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )  # None = no fixed term

    # Amount bounds (inclusive)
    min_amount_cents: Mapped[int | None] = mapped_column(
        MoneyCents, nullable=True
    )
    max_amount_cents: Mapped[int | None] = mapped_column(
        MoneyCents, nullable=True
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )

    @property
    def is_fixed_term(self) -> bool:
        return self.duration_days is not None

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Plan(id={self.id}, slug={self.slug}, "
            f"daily_roi_bps={self.daily_roi_bps}, "
            f"duration_days={self.duration_days})>"
        )

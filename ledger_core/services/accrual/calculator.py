"""
Yield accrual calculations.

Pure functions: no session, no clock. The engine feeds them the locked
investment state and the pass timestamp.
"""

from dataclasses import dataclass
from datetime import datetime

from ledger_core.utils.datetime_utils import ensure_utc, whole_days_between
from ledger_core.utils.money import apply_bps_half_up


def calculate_daily_profit(amount_cents: int, daily_roi_bps: int) -> int:
    """
    Profit for one day, rounded half away from zero to whole cents.

    Examples:
        >>> calculate_daily_profit(100_000, 500)
        5000
        >>> calculate_daily_profit(333, 150)
        5
    """
    return apply_bps_half_up(amount_cents, daily_roi_bps)


def calculate_profit(amount_cents: int, daily_roi_bps: int, days: int) -> int:
    """
    Profit for ``days`` days.

    The daily figure is rounded once and multiplied, so a multi-day batch
    equals the sum of single-day batches.
    """
    if days <= 0:
        return 0
    return calculate_daily_profit(amount_cents, daily_roi_bps) * days


@dataclass(frozen=True)
class AccrualStep:
    """What one accrual run should do for one investment."""

    elapsed_days: int
    billable_days: int
    daily_profit_cents: int
    profit_cents: int
    will_complete: bool

    @property
    def is_noop(self) -> bool:
        return self.billable_days <= 0 and not self.will_complete


def plan_accrual_step(
    amount_cents: int,
    daily_roi_bps: int,
    duration_days: int | None,
    accrued_days: int,
    last_accrued_at: datetime,
    end_date: datetime | None,
    now: datetime,
) -> AccrualStep:
    """
    Decide billable days and profit for one run.

    Open-ended plans bill every whole elapsed day. Fixed-term plans bill
    elapsed days up to the remaining contractual days; the run that reaches
    ``end_date`` bills all remaining days, so a completed investment always
    earned exactly ``daily_profit * duration_days``.
    """
    now = ensure_utc(now)
    elapsed_days = whole_days_between(last_accrued_at, now)
    will_complete = end_date is not None and now >= ensure_utc(end_date)

    if duration_days is None:
        billable_days = max(elapsed_days, 0)
    else:
        remaining = max(duration_days - accrued_days, 0)
        if will_complete:
            billable_days = remaining
        else:
            billable_days = min(max(elapsed_days, 0), remaining)

    daily_profit = calculate_daily_profit(amount_cents, daily_roi_bps)
    return AccrualStep(
        elapsed_days=elapsed_days,
        billable_days=billable_days,
        daily_profit_cents=daily_profit,
        profit_cents=daily_profit * billable_days,
        will_complete=will_complete,
    )

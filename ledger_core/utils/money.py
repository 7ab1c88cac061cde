"""
Money helpers.

All money is integer USD cents; rates are integer basis points.
"""

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation

from ledger_core.config.constants import BPS_DENOMINATOR, CENTS_PER_DOLLAR
from ledger_core.utils.exceptions import InvalidAmount


def _to_decimal(value: Decimal | float | int | str) -> Decimal:
    if isinstance(value, bool):
        raise InvalidAmount(f"Amount must be numeric, got {value!r}")
    try:
        return value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise InvalidAmount(f"Amount must be numeric, got {value!r}") from e


def usd_to_cents(amount_usd: Decimal | float | int | str) -> int:
    """
    Convert a USD amount to integer cents.

    Rounds half away from zero (Decimal ROUND_HALF_UP). Non-finite values
    and anything that is not strictly positive after rounding raise
    ``InvalidAmount``.

    Examples:
        >>> usd_to_cents(12.345)
        1235
        >>> usd_to_cents("500")
        50000
    """
    value = _to_decimal(amount_usd)
    if not value.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {amount_usd!r}")

    cents = int(
        (value * CENTS_PER_DOLLAR).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    )
    if cents <= 0:
        raise InvalidAmount(f"Amount must be positive, got {amount_usd!r}")
    return cents


def cents_to_usd(cents: int) -> Decimal:
    """Cents as a two-place Decimal amount."""
    return (Decimal(cents) / CENTS_PER_DOLLAR).quantize(Decimal("0.01"))


def format_usd(cents: int) -> str:
    """Human-readable amount, e.g. ``$1,234.50``."""
    return f"${cents_to_usd(cents):,.2f}"


def apply_bps_half_up(amount_cents: int, bps: int) -> int:
    """``amount * bps / 10000`` rounded half away from zero."""
    value = Decimal(amount_cents) * Decimal(bps) / Decimal(BPS_DENOMINATOR)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def apply_bps_floor(amount_cents: int, bps: int) -> int:
    """``amount * bps / 10000`` truncated toward negative infinity."""
    value = Decimal(amount_cents) * Decimal(bps) / Decimal(BPS_DENOMINATOR)
    return int(value.to_integral_value(rounding=ROUND_FLOOR))

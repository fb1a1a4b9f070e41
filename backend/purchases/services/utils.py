from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from ..exceptions import InvalidArgument

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def d(val) -> Decimal:
    """Coerce incoming values to Decimal safely."""
    if isinstance(val, Decimal):
        return val
    return Decimal(str(val))


def require_number(value, param: str) -> Decimal:
    """Return `value` as a finite Decimal, or raise InvalidArgument naming `param`.

    Accepts int, float, Decimal and numeric strings (form payloads). Booleans,
    None, NaN and infinities are rejected.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal, str)):
        raise InvalidArgument(param, value)
    try:
        out = d(value.strip() if isinstance(value, str) else value)
    except (InvalidOperation, ValueError):
        raise InvalidArgument(param, value) from None
    if not out.is_finite():
        raise InvalidArgument(param, value)
    return out


def optional_number(value, param: str) -> Decimal:
    """Like require_number, but an absent (None) value counts as zero."""
    if value is None:
        return ZERO
    return require_number(value, param)


def finite_or_zero(value) -> Decimal:
    """Best-effort coercion used where the caller must never see an exception."""
    try:
        return require_number(value, "value")
    except InvalidArgument:
        return ZERO


def quantize_money(amount) -> Decimal:
    """Round to two decimals for display (half-up). Never used before aggregation."""
    out = d(amount).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    # Avoid rendering "-0.00"
    if out == ZERO:
        return ZERO.quantize(TWOPLACES)
    return out


def format_percent(pct: Decimal) -> str:
    """Render a percent without trailing zeros or exponent (2.50 -> '2.5', 100 -> '100')."""
    return format(d(pct).normalize(), "f")

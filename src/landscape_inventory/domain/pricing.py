from decimal import ROUND_HALF_UP, Decimal, DecimalException, InvalidOperation
from typing import Any, Optional

TWO_PLACES = Decimal("0.01")
HUNDRED = Decimal("100")


def parse_decimal(value: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """Parse user input into a Decimal.

    Accepts ints, floats, Decimals and numeric text ('10.5', '10,5', ' 3 ').
    Empty, non-numeric, NaN and infinite input returns `default`.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, int):
        parsed = Decimal(value)
    elif isinstance(value, float):
        parsed = Decimal(str(value))
    else:
        s = str(value).strip().replace(" ", "")
        if not s:
            return default
        if "," in s and "." not in s:
            s = s.replace(",", ".")
        try:
            parsed = Decimal(s)
        except InvalidOperation:
            return default
    if not parsed.is_finite():
        return default
    return parsed


def quantize_money(value: Decimal) -> Optional[Decimal]:
    """Round half-up to cents; None when the result needs more digits than the context holds."""
    try:
        return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    except DecimalException:
        return None


def derive_selling_price(cost: Decimal, markup: Decimal) -> Optional[Decimal]:
    """Return cost * (1 + markup/100) rounded half-up to two decimals.

    Returns None when the amount is too large to be expressed in cents.
    """
    try:
        selling = cost * (1 + markup / HUNDRED)
    except DecimalException:
        return None
    return quantize_money(selling)


def format_money(value: Optional[Decimal]) -> str:
    if value is None:
        return "0.00"
    rounded = quantize_money(value)
    return str(rounded) if rounded is not None else format(value, "f")


def preview_selling_price(cost: Any, markup: Any) -> str:
    """Selling price shown next to a draft while it is being typed.

    Unparsable cost or markup counts as zero, so an empty draft shows '0.00'.
    An amount too large to price also shows '0.00'.
    """
    zero = Decimal(0)
    return format_money(
        derive_selling_price(parse_decimal(cost, zero), parse_decimal(markup, zero))
    )

# worthline/utils/decimal_utils.py
"""
Exact decimal helpers.

All amounts, prices and FX rates travel through the engine as
decimal.Decimal and leave it as canonical strings. Floats never appear.

Canonical string form ("normalized"):
    - fixed-point notation, never exponent notation ("1E+3" -> "1000")
    - trailing fractional zeros stripped ("100.50" -> "100.5")
    - a now-trailing decimal point dropped ("12.0" -> "12")
    - negative zero collapsed ("-0.00" -> "0")

Usage:
    from worthline.utils.decimal_utils import to_decimal, normalize_decimal

    total = to_decimal("100.50") + to_decimal("0.25")
    normalize_decimal(total)  # "100.75"
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from worthline.services.exceptions import InvalidDecimalError

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")

PERCENTAGE_NOT_AVAILABLE = "N/A"


def to_decimal(value: str | int | Decimal, field: str | None = None) -> Decimal:
    """
    Build an exact Decimal from a decimal string, int or Decimal.

    Floats are rejected.

    Raises:
        InvalidDecimalError: If the value is not a finite decimal number

    Example:
        >>> to_decimal(" 100.50 ")
        Decimal('100.50')
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or isinstance(value, float):
        raise InvalidDecimalError(value, field=field)
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise InvalidDecimalError(value, field=field) from None
    else:
        raise InvalidDecimalError(value, field=field)

    if not result.is_finite():
        raise InvalidDecimalError(value, field=field)
    return result


def normalize_decimal(value: Decimal) -> str:
    """
    Render a Decimal in canonical string form.

    Example:
        >>> normalize_decimal(Decimal("100.50"))
        '100.5'
        >>> normalize_decimal(Decimal("-0.000"))
        '0'
        >>> normalize_decimal(Decimal("1E+3"))
        '1000'
    """
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


def round_decimal(value: Decimal, places: int) -> Decimal:
    """
    Round half away from zero to a fixed number of decimal places.

    Example:
        >>> round_decimal(Decimal("2.345"), 2)
        Decimal('2.35')
        >>> round_decimal(Decimal("-2.345"), 2)
        Decimal('-2.35')
    """
    if places < 0:
        raise ValueError("places must be >= 0")
    quantum = Decimal(1).scaleb(-places)
    return value.quantize(quantum, rounding=ROUND_HALF_UP)


def percentage_change(initial: Decimal, final: Decimal) -> str:
    """
    Relative change from initial to final, in percent, with two decimals.

    Returns "N/A" when the initial value is zero (division undefined).

    Example:
        >>> percentage_change(Decimal("100"), Decimal("150"))
        '50.00'
        >>> percentage_change(Decimal("300"), Decimal("200"))
        '-33.33'
        >>> percentage_change(Decimal("0"), Decimal("10"))
        'N/A'
    """
    if initial == ZERO:
        return PERCENTAGE_NOT_AVAILABLE
    change = round_decimal((final - initial) / initial * HUNDRED, 2)
    if change == ZERO:
        change = abs(change)
    return format(change, "f")


__all__ = [
    "ZERO",
    "ONE",
    "HUNDRED",
    "PERCENTAGE_NOT_AVAILABLE",
    "to_decimal",
    "normalize_decimal",
    "round_decimal",
    "percentage_change",
]

from __future__ import annotations

from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext

ONE_D18 = 10**18


def scale_to_18(value: int, decimals: int) -> int:
    """Scale an integer amount to 18 decimals.

    Args:
        value: Integer amount expressed with ``decimals`` decimal places.
        decimals: Current decimal precision of ``value``.

    Returns:
        The amount scaled to 18-decimal precision.

    Notes:
        - If ``decimals`` < 18, multiplies by 10**(18 - decimals).
        - If ``decimals`` > 18, uses integer division (truncates toward zero).
    """
    if decimals == 18:
        return value
    if decimals < 18:
        return value * (10 ** (18 - decimals))
    return _div_trunc(value, 10 ** (decimals - 18))


def to_d18(value: int | float | str | Decimal) -> int:
    """Convert a human-readable number (e.g. a JSON price) to 18-decimal fixed point.

    Floats go through ``str`` so ``2.5`` becomes exactly ``2.5 * 10**18``.
    Digits beyond the 18th decimal are truncated.

    Raises:
        ValueError: If the value is not a finite number.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value!r}")
    try:
        decimal_value = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Invalid numeric value: {value!r}") from e
    if not decimal_value.is_finite():
        raise ValueError(f"Invalid numeric value: {value!r}")
    with localcontext() as ctx:
        # enough digits that only the final truncation drops anything
        ctx.prec = max(ctx.prec, len(decimal_value.as_tuple().digits) + 18)
        return int(decimal_value.scaleb(18).to_integral_value(rounding=ROUND_DOWN))


def mul_d18(amount: int, price: int) -> int:
    """Multiply an 18-decimal amount by an 18-decimal price, truncating toward zero."""
    return _div_trunc(amount * price, ONE_D18)


def from_d18(value: int) -> Decimal:
    """Convert an 18-decimal fixed point integer to a Decimal in whole units."""
    return Decimal(value) / ONE_D18


def _div_trunc(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // denominator
    return quotient if numerator >= 0 else -quotient

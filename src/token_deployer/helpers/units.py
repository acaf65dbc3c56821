"""
Exact conversion between human token amounts and on-chain integer units.

ERC20 balances are fixed-point integers, so amounts are parsed with
``decimal.Decimal`` and scaled with integer arithmetic only.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation

__all__ = ["parse_amount", "parse_units", "format_units", "format_ether"]

MAX_DECIMALS = 18


def parse_amount(amount: str | int | Decimal) -> Decimal:
    """Check amount syntax without scaling it.

    Raises:
        ValueError: If the amount is not a finite non-negative decimal.
    """
    if isinstance(amount, bool) or isinstance(amount, float):
        raise ValueError(f"Amount must be a decimal string or integer, got {type(amount).__name__}")

    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {amount!r}") from None

    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    if value < 0:
        raise ValueError(f"Amount must not be negative: {amount!r}")
    return value


def parse_units(amount: str | int | Decimal, decimals: int) -> int:
    """Scale a human-readable amount by ``10**decimals``.

    >>> parse_units("0.1", 18)
    100000000000000000

    Raises:
        ValueError: If the amount is not a finite non-negative decimal or has
            more fractional digits than ``decimals`` allows.
    """
    if not isinstance(decimals, int) or isinstance(decimals, bool) or decimals < 0:
        raise ValueError(f"Invalid decimals: {decimals!r}")
    value = parse_amount(amount)

    # normalize() rounds to the context precision, so trailing zeros are stripped here.
    _, digits, exponent = value.as_tuple()
    coefficient = "".join(str(d) for d in digits)
    significant = coefficient.rstrip("0")
    if not significant:
        return 0
    exponent += len(coefficient) - len(significant)

    if exponent < 0 and -exponent > decimals:
        raise ValueError(f"Amount {amount!r} has more than {decimals} fractional digits")
    return int(significant) * 10 ** (decimals + exponent)


def format_units(raw: int, decimals: int) -> str:
    """Render an integer amount as an exact decimal string.

    Whole values keep one fractional digit (``"1000.0"``), other values drop
    trailing zeros (``"0.25"``).
    """
    raw = int(raw)
    decimals = int(decimals)
    sign = "-" if raw < 0 else ""
    whole, fraction = divmod(abs(raw), 10 ** decimals)
    if decimals == 0:
        return f"{sign}{whole}.0"
    fraction_str = str(fraction).rjust(decimals, "0").rstrip("0") or "0"
    return f"{sign}{whole}.{fraction_str}"


def format_ether(wei: int) -> str:
    return format_units(wei, MAX_DECIMALS)

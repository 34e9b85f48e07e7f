"""Money / rounding helpers.

Centralized so the history table, the form and the JSON state endpoint use
identical rounding semantics.
"""

from __future__ import annotations
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from fxportal.models.constants import DEFAULT_MIN_AMOUNT

AmountLike = Union[str, int, float, Decimal, None]


def to_decimal(value: AmountLike) -> Optional[Decimal]:
    """Parse ``value`` into a finite Decimal, or None when it is not a number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not d.is_finite():
        return None
    return d


def quantize(value: Decimal, decimals: int) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)


def format_amount(value: AmountLike, decimals: int) -> Optional[str]:
    """Fixed ``decimals`` with thousands grouping; None for absent / non-numeric input."""
    d = to_decimal(value)
    if d is None:
        return None
    return f"{quantize(d, decimals):,.{decimals}f}"


def amount_step(decimals: Optional[int]) -> Decimal:
    """Smallest amount a currency can express (1 for zero-decimal currencies)."""
    if decimals is None:
        return DEFAULT_MIN_AMOUNT
    if decimals <= 0:
        return Decimal(1)
    return Decimal(1).scaleb(-decimals)

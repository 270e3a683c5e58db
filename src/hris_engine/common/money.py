from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from ..core.constants import CURRENCY_DECIMAL_PLACES, ZERO_AMOUNT

Number = Union[Decimal, int, str]

_QUANT = Decimal(1).scaleb(-CURRENCY_DECIMAL_PLACES)


def _to_decimal(value: Optional[Number]) -> Decimal:
    if value is None:
        return ZERO_AMOUNT
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_amount(value: Optional[Number]) -> Decimal:
    """Coerce to a Decimal rounded to currency precision (None -> 0.00)."""
    return _to_decimal(value).quantize(_QUANT, rounding=ROUND_HALF_UP)


def capped_deduction(rate_per_minute: Optional[Number], minutes: int, cap: Optional[Number]) -> Decimal:
    """``min(rate * minutes, cap)``; a cap of zero or less means uncapped.

    The result is never negative and never exceeds a configured cap.
    """
    rate = _to_decimal(rate_per_minute)
    if rate <= 0 or minutes <= 0:
        return to_amount(0)

    amount = rate * int(minutes)
    limit = to_amount(cap)
    if limit > 0:
        amount = min(amount, limit)
    return to_amount(amount)

"""Money / rounding helpers.

Centralized so listing, summaries and ranking use identical rounding
semantics. Sums are carried as Decimal and rounded once, on output.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[Decimal, float, int, str]

ZERO = Decimal("0")
CENT = Decimal("0.01")


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round2(value: Number) -> float:
    return float(to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))

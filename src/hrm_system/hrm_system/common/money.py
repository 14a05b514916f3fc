from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from ..core.constants import CURRENCY_PREFIX

Number = Union[Decimal, int, float, str]

CENTS = Decimal("0.01")


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 0.1 from dragging binary noise into Decimal.
    return Decimal(str(value))


def round2(value: Number) -> Decimal:
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def format_currency(value: Number) -> str:
    """Render an amount as ``Rs <amount, 2 decimals>``."""
    return f"{CURRENCY_PREFIX} {round2(value):.2f}"

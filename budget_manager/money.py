"""Money arithmetic on top of ``Decimal``.

Amounts travel through the engine as plain floats, but every sum is
accumulated in ``Decimal`` and every stored or reported value is rounded
half-up to ``DISPLAY_PRECISION`` places. Repeated additions therefore never
drift (``0.1 + 0.2`` is ``0.3`` here).
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Union

from budget_manager.config import DISPLAY_PRECISION

Number = Union[int, float, str, Decimal]


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so 0.1 becomes Decimal("0.1"), not its binary expansion
    return Decimal(str(value))


def quantize(value: Number, precision: int = DISPLAY_PRECISION) -> Decimal:
    exponent = Decimal(1).scaleb(-precision)
    return to_decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)


def normalize(amount: Number, precision: int = DISPLAY_PRECISION) -> float:
    """Round ``amount`` to the engine precision and return it as a float."""
    return float(quantize(amount, precision))


def money_sum(values: Iterable[Number], precision: int = DISPLAY_PRECISION) -> float:
    total = sum((to_decimal(v) for v in values), Decimal(0))
    return normalize(total, precision)


def signum(value: Number) -> int:
    d = to_decimal(value)
    if d > 0:
        return 1
    if d < 0:
        return -1
    return 0


def format_amount(amount: Number, precision: int = DISPLAY_PRECISION) -> str:
    return f"{quantize(amount, precision):.{precision}f}"

"""Fixed-precision currency helpers.

Amounts are tracked to three decimal places (the fils of the Bahraini dinar)
and every arithmetic step of a line calculation is rounded half-up to that
precision before the next step uses it.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from vansales.app.core.config import settings

Q = Decimal("0.001")
ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Largest magnitude stored exactly. SQLite keeps Numeric columns as REAL,
# which holds 15 significant digits.
MAX_AMOUNT = Decimal("999999999999.999")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number | None) -> Decimal:
    """Convert to Decimal through ``str`` so floats keep their printed value."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round3(value: Number) -> Decimal:
    return to_decimal(value).quantize(Q, rounding=ROUND_HALF_UP)


def is_storable(value: Number | None) -> bool:
    """True for a finite amount no larger than :data:`MAX_AMOUNT`."""
    amount = to_decimal(value)
    return amount.is_finite() and abs(amount) <= MAX_AMOUNT


def format_currency(amount: Number, currency: str | None = None) -> str:
    """``1234.5`` -> ``"1,234.500 BHD"``."""
    code = currency or settings.CURRENCY_CODE
    return f"{round3(amount):,.3f} {code}"

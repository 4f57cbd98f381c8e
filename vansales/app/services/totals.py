from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from vansales.app.models.invoice import PaymentStatus
from vansales.app.services.calculator import LineResult
from vansales.app.services.money import ZERO, Number, round3


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal
    paid: Decimal
    balance: Decimal


def aggregate(lines: Iterable[LineResult], paid_amount: Number = ZERO) -> Totals:
    """Roll line results up into document totals.

    Sums the already-rounded per-line figures instead of recomputing on the
    aggregate subtotal; the two can differ by a fils.  ``balance`` is not
    clamped, a negative balance records an overpayment.
    """
    lines = list(lines)
    subtotal = round3(sum((line.subtotal for line in lines), ZERO))
    discount = round3(sum((line.discount_amount for line in lines), ZERO))
    tax = round3(sum((line.tax_amount for line in lines), ZERO))
    total = round3(sum((line.total for line in lines), ZERO))
    paid = round3(paid_amount)
    return Totals(
        subtotal=subtotal,
        discount=discount,
        tax=tax,
        total=total,
        paid=paid,
        balance=round3(total - paid),
    )


def classify_payment_status(total: Number, balance: Number) -> PaymentStatus:
    """paid when nothing is owed, partial when some of it is, unpaid otherwise.

    An untouched invoice (``balance == total``) is unpaid, not partial.
    """
    total = round3(total)
    balance = round3(balance)
    if balance == ZERO:
        return PaymentStatus.PAID
    if ZERO < balance < total:
        return PaymentStatus.PARTIAL
    return PaymentStatus.UNPAID


def display_balance(balance: Number) -> Decimal:
    """Balance shown to a customer; overpayment shows as zero."""
    return max(round3(balance), ZERO)

"""Tests for document totals and payment status."""
from __future__ import annotations

from decimal import Decimal

import pytest

from vansales.app.models.invoice import PaymentStatus
from vansales.app.services.calculator import compute_line
from vansales.app.services.totals import aggregate, classify_payment_status, display_balance


def test_sums_rounded_line_values() -> None:
    lines = [compute_line(3, "10.005", 10, 5), compute_line(2, 100, 10, 5)]
    totals = aggregate(lines, paid_amount="50")
    assert totals.subtotal == Decimal("230.015")
    assert totals.discount == Decimal("23.002")
    assert totals.tax == Decimal("10.351")
    assert totals.total == Decimal("217.364")
    assert totals.paid == Decimal("50.000")
    assert totals.balance == Decimal("167.364")


def test_total_is_sum_of_line_totals_not_recomputed() -> None:
    # Each line's tax rounds up by half a fils; recomputing on the sum would not
    lines = [compute_line(1, "0.010", 0, 5)] * 3
    assert aggregate(lines).tax == Decimal("0.003")


def test_aggregate_is_idempotent() -> None:
    lines = [compute_line(2, 100, 10, 5), compute_line(1, "2.5", 0, 10)]
    assert aggregate(lines, 10) == aggregate(list(lines), 10)


def test_empty_lines_total_zero() -> None:
    totals = aggregate([])
    assert totals.total == Decimal("0.000")
    assert totals.balance == Decimal("0.000")


def test_overpayment_leaves_negative_balance() -> None:
    totals = aggregate([compute_line(1, 100)], paid_amount=120)
    assert totals.balance == Decimal("-20.000")
    assert display_balance(totals.balance) == Decimal("0")


@pytest.mark.parametrize(
    "total, balance, expected",
    [
        (100, 0, PaymentStatus.PAID),
        (100, 50, PaymentStatus.PARTIAL),
        (100, 100, PaymentStatus.UNPAID),
        (100, -20, PaymentStatus.UNPAID),
        (0, 0, PaymentStatus.PAID),
    ],
)
def test_classify_payment_status(total: int, balance: int, expected: PaymentStatus) -> None:
    assert classify_payment_status(total, balance) is expected

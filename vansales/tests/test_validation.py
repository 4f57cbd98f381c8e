"""Tests for entry guards on invoices, returns and receipts."""
from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from vansales.app.core.exceptions import (
    DocumentValidationError,
    DuplicateLineItem,
    EmptyDocument,
    InvalidAmount,
    InvalidLineItem,
    MissingParty,
    MissingReason,
    MissingReference,
    MissingVan,
)
from vansales.app.services.calculator import LineItemInput
from vansales.app.services.validation import (
    validate_invoice,
    validate_line_items,
    validate_receipt,
    validate_return,
)


def _line(quantity: str = "1", price: str = "5") -> LineItemInput:
    return LineItemInput(uuid4(), Decimal(quantity), Decimal(price))


# ─── Line items ──────────────────────────────────────────────────────────────


class TestLineItems:
    def test_empty(self) -> None:
        with pytest.raises(EmptyDocument):
            validate_line_items([])

    def test_zero_quantity_names_the_line(self) -> None:
        with pytest.raises(InvalidLineItem) as exc:
            validate_line_items([_line(), _line(quantity="0")])
        assert exc.value.line_no == 2

    def test_negative_price(self) -> None:
        with pytest.raises(InvalidLineItem):
            validate_line_items([_line(price="-0.001")])

    def test_zero_price_is_allowed(self) -> None:
        validate_line_items([_line(price="0")])

    def test_same_item_twice(self) -> None:
        line = _line()
        with pytest.raises(DuplicateLineItem):
            validate_line_items([line, line])

    def test_errors_are_value_errors(self) -> None:
        with pytest.raises(ValueError):
            validate_line_items([])

    @pytest.mark.parametrize(
        "quantity, price",
        [("1e13", "1e13"), ("1", "12345678901234.567"), ("NaN", "1"), ("1", "Infinity")],
    )
    def test_amount_beyond_stored_precision(self, quantity: str, price: str) -> None:
        with pytest.raises(InvalidLineItem) as exc:
            validate_line_items([_line(quantity=quantity, price=price)])
        assert exc.value.line_no == 1

    def test_document_gross_is_bounded(self) -> None:
        lines = [_line(price="300000000000"), _line(price="300000000000")]
        with pytest.raises(InvalidLineItem) as exc:
            validate_line_items(lines)
        assert exc.value.line_no == 2

    def test_largest_storable_line(self) -> None:
        validate_line_items([_line(price="499999999999.999")])


# ─── Invoice ─────────────────────────────────────────────────────────────────


class TestInvoice:
    def test_requires_van_first(self) -> None:
        with pytest.raises(MissingVan):
            validate_invoice({"customer_id": uuid4()}, [])

    def test_requires_a_party(self) -> None:
        with pytest.raises(MissingParty):
            validate_invoice({"van_id": uuid4(), "walk_in_customer_name": "  "}, [_line()])

    def test_rejects_both_parties(self) -> None:
        with pytest.raises(MissingParty):
            validate_invoice(
                {"van_id": uuid4(), "customer_id": uuid4(), "walk_in_customer_name": "Sara"},
                [_line()],
            )

    def test_walk_in_alone_is_enough(self) -> None:
        validate_invoice({"van_id": uuid4(), "walk_in_customer_name": "Sara"}, [_line()])

    def test_negative_paid_amount(self) -> None:
        with pytest.raises(InvalidAmount):
            validate_invoice(
                {"van_id": uuid4(), "customer_id": uuid4(), "paid_amount": Decimal("-1")},
                [_line()],
            )

    @pytest.mark.parametrize("paid", [Decimal("1e20"), Decimal("NaN")])
    def test_paid_amount_too_large(self, paid: Decimal) -> None:
        with pytest.raises(InvalidAmount):
            validate_invoice(
                {"van_id": uuid4(), "customer_id": uuid4(), "paid_amount": paid},
                [_line()],
            )

    def test_party_checked_before_lines(self) -> None:
        with pytest.raises(MissingParty):
            validate_invoice({"van_id": uuid4()}, [])


# ─── Return ──────────────────────────────────────────────────────────────────


class TestReturn:
    def test_walk_in_not_accepted(self) -> None:
        with pytest.raises(MissingParty):
            validate_return(
                {"van_id": uuid4(), "walk_in_customer_name": "Sara", "reason": "x"}, [_line()]
            )

    def test_reason_required(self) -> None:
        with pytest.raises(MissingReason):
            validate_return({"van_id": uuid4(), "customer_id": uuid4(), "reason": " "}, [_line()])

    def test_valid(self) -> None:
        validate_return(
            {"van_id": uuid4(), "customer_id": uuid4(), "reason": "Expired"}, [_line()]
        )


# ─── Receipt ─────────────────────────────────────────────────────────────────


class TestReceipt:
    def _fields(self, **overrides: object) -> dict:
        fields = {"van_id": uuid4(), "customer_id": uuid4(), "amount": Decimal("10")}
        fields.update(overrides)
        return fields

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5"), None])
    def test_amount_must_be_positive(self, amount: Decimal | None) -> None:
        with pytest.raises(InvalidAmount):
            validate_receipt(self._fields(amount=amount))

    @pytest.mark.parametrize("amount", [Decimal("1e20"), Decimal("Infinity")])
    def test_amount_too_large(self, amount: Decimal) -> None:
        with pytest.raises(InvalidAmount):
            validate_receipt(self._fields(amount=amount))

    @pytest.mark.parametrize("mode", ["cheque", "bank_transfer"])
    def test_reference_required(self, mode: str) -> None:
        with pytest.raises(MissingReference):
            validate_receipt(self._fields(payment_mode=mode))
        validate_receipt(self._fields(payment_mode=mode, reference_number="CHQ-42"))

    def test_cash_needs_no_reference(self) -> None:
        validate_receipt(self._fields(payment_mode="cash"))

    def test_customer_required(self) -> None:
        with pytest.raises(MissingParty):
            validate_receipt(self._fields(customer_id=None))

    def test_all_are_validation_errors(self) -> None:
        with pytest.raises(DocumentValidationError):
            validate_receipt(self._fields(van_id=None))

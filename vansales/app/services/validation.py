"""Entry guards run before anything is written.

Each rule raises its own exception class; checks run in a fixed order so a
caller always sees the most basic problem first.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping, Sequence

from vansales.app.core.exceptions import (
    DuplicateLineItem,
    EmptyDocument,
    InvalidAmount,
    InvalidLineItem,
    MissingParty,
    MissingReason,
    MissingReference,
    MissingVan,
)
from vansales.app.models.receipt import ReceiptPaymentMode
from vansales.app.services.calculator import LineItemInput
from vansales.app.services.money import MAX_AMOUNT, ZERO, is_storable, to_decimal

logger = logging.getLogger(__name__)

REFERENCE_REQUIRED_MODES = {ReceiptPaymentMode.CHEQUE, ReceiptPaymentMode.BANK_TRANSFER}

# With tax capped at 100% a document total is at most twice its gross.
MAX_DOCUMENT_GROSS = Decimal("499999999999.999")


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _require_van(header: Mapping[str, Any]) -> None:
    if _blank(header.get("van_id")):
        raise MissingVan("A van must be selected")


def line_is_storable(item: LineItemInput) -> bool:
    """Quantity and price fit the stored precision; percentages are finite."""
    return (
        is_storable(item.quantity)
        and is_storable(item.unit_price)
        and to_decimal(item.discount_percent).is_finite()
        and to_decimal(item.tax_percent).is_finite()
    )


def validate_line_items(items: Sequence[LineItemInput]) -> None:
    if not items:
        raise EmptyDocument("Document must have at least one item")

    gross = ZERO
    for line_no, item in enumerate(items, start=1):
        if not line_is_storable(item):
            raise InvalidLineItem(
                f"Line {line_no}: quantity and unit price must be finite "
                f"and at most {MAX_AMOUNT:,}",
                line_no=line_no,
            )
        if to_decimal(item.quantity) <= ZERO or to_decimal(item.unit_price) < ZERO:
            logger.warning(
                "Rejected line %d (item %s): quantity=%s unit_price=%s",
                line_no, item.item_id, item.quantity, item.unit_price,
            )
            raise InvalidLineItem(
                f"Line {line_no}: quantity must be greater than 0 "
                f"and unit price must not be negative",
                line_no=line_no,
            )
        gross += to_decimal(item.quantity) * to_decimal(item.unit_price)
        if gross > MAX_DOCUMENT_GROSS:
            raise InvalidLineItem(
                f"Line {line_no}: document amount exceeds {MAX_DOCUMENT_GROSS:,}",
                line_no=line_no,
            )

    seen: set[Any] = set()
    for item in items:
        if item.item_id in seen:
            raise DuplicateLineItem(f"Item {item.item_id} appears more than once")
        seen.add(item.item_id)


def validate_invoice(header: Mapping[str, Any], items: Sequence[LineItemInput]) -> None:
    """Invoice party is a registered customer or a walk-in name, never both."""
    _require_van(header)

    has_customer = header.get("customer_id") is not None
    has_walk_in = not _blank(header.get("walk_in_customer_name"))
    if not has_customer and not has_walk_in:
        raise MissingParty("Select a customer or enter a walk-in customer name")
    if has_customer and has_walk_in:
        raise MissingParty(
            "An invoice is for either a registered customer or a walk-in customer, not both"
        )

    validate_line_items(items)

    if not is_storable(header.get("paid_amount")):
        raise InvalidAmount(f"Paid amount must be finite and at most {MAX_AMOUNT:,}")
    if to_decimal(header.get("paid_amount")) < ZERO:
        raise InvalidAmount("Paid amount must not be negative")


def validate_return(header: Mapping[str, Any], items: Sequence[LineItemInput]) -> None:
    _require_van(header)
    if header.get("customer_id") is None:
        raise MissingParty("Select a customer for the return")
    validate_line_items(items)
    if _blank(header.get("reason")):
        raise MissingReason("Provide a reason for the return")


def validate_receipt(fields: Mapping[str, Any]) -> None:
    _require_van(fields)
    if fields.get("customer_id") is None:
        raise MissingParty("Select a customer for the receipt")
    if not is_storable(fields.get("amount")):
        raise InvalidAmount(f"Receipt amount must be finite and at most {MAX_AMOUNT:,}")
    if to_decimal(fields.get("amount")) <= ZERO:
        raise InvalidAmount("Receipt amount must be greater than 0")

    mode = ReceiptPaymentMode(fields.get("payment_mode") or ReceiptPaymentMode.CASH)
    if mode in REFERENCE_REQUIRED_MODES and _blank(fields.get("reference_number")):
        raise MissingReference(
            "A reference number is required for cheque and bank transfer receipts"
        )

"""Line-item calculator.

The one place a line total is computed.  Sale entry, invoice edit, returns
and every printed form go through :func:`compute_line`, so the stored
``line_total`` and anything shown to the customer cannot disagree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping
from uuid import UUID

from vansales.app.services.money import HUNDRED, ZERO, Number, round3, to_decimal

logger = logging.getLogger(__name__)

TAX_RATES_BY_CODE: dict[str, Decimal] = {
    "tx5": Decimal("5"),
    "tx10": Decimal("10"),
}


@dataclass(frozen=True)
class LineItemInput:
    item_id: UUID
    quantity: Decimal
    unit_price: Decimal
    discount_percent: Decimal = ZERO
    tax_percent: Decimal = ZERO
    batch_number: str | None = None


@dataclass(frozen=True)
class LineResult:
    subtotal: Decimal
    discount_amount: Decimal
    taxable_base: Decimal
    tax_amount: Decimal
    total: Decimal


def clamp_percent(value: Number | None) -> Decimal:
    """Clamp a percentage into [0, 100]."""
    pct = to_decimal(value)
    if pct < ZERO or pct > HUNDRED:
        clamped = min(max(pct, ZERO), HUNDRED)
        logger.debug("Percentage %s clamped to %s", pct, clamped)
        return clamped
    return pct


def compute_line(
    quantity: Number,
    unit_price: Number,
    discount_percent: Number = ZERO,
    tax_percent: Number = ZERO,
) -> LineResult:
    """Compute one line in five steps, each rounded to 3 decimals.

    Discount is taken off the gross amount and tax is charged on what is
    left.  Callers validate ``quantity > 0`` and ``unit_price >= 0`` first.
    """
    subtotal = round3(to_decimal(quantity) * to_decimal(unit_price))
    discount_amount = round3(subtotal * clamp_percent(discount_percent) / HUNDRED)
    taxable_base = round3(subtotal - discount_amount)
    tax_amount = round3(taxable_base * clamp_percent(tax_percent) / HUNDRED)
    total = round3(taxable_base + tax_amount)
    return LineResult(
        subtotal=subtotal,
        discount_amount=discount_amount,
        taxable_base=taxable_base,
        tax_amount=tax_amount,
        total=total,
    )


def compute_input(line: LineItemInput) -> LineResult:
    return compute_line(
        line.quantity, line.unit_price, line.discount_percent, line.tax_percent
    )


def tax_rate_for_code(taxcode: str | None) -> Decimal:
    """Tax percentage for a catalog tax code; unknown codes are tax free."""
    return TAX_RATES_BY_CODE.get((taxcode or "").strip().lower(), ZERO)


def line_from_catalog(
    item: Mapping[str, Any],
    quantity: Number = 1,
    discount_percent: Number = ZERO,
) -> LineItemInput:
    """Start a line from a catalog item row at its list price and tax code."""
    return LineItemInput(
        item_id=item["id"],
        quantity=to_decimal(quantity),
        unit_price=to_decimal(item.get("price")),
        discount_percent=to_decimal(discount_percent),
        tax_percent=tax_rate_for_code(item.get("taxcode")),
    )


def line_from_row(row: Mapping[str, Any]) -> LineItemInput:
    """Rebuild the calculator input from a stored line row."""
    return LineItemInput(
        item_id=row["item_id"],
        quantity=to_decimal(row["quantity"]),
        unit_price=to_decimal(row["unit_price"]),
        discount_percent=to_decimal(row["discount_percent"]),
        tax_percent=to_decimal(row["tax_percent"]),
        batch_number=row.get("batch_number"),
    )

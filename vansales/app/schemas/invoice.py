from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from vansales.app.models.invoice import PaymentMode, PaymentStatus


# ─── Line items ───────────────────────────────────────────────────────────────


class LineItemIn(BaseModel):
    """Quantity and price limits are checked by the repository, not here."""

    item_id: UUID
    quantity: Decimal
    unit_price: Decimal
    discount_percent: Decimal = Decimal("0")
    tax_percent: Decimal = Decimal("0")
    batch_number: str | None = None


class LineItemOut(BaseModel):
    id: UUID
    line_no: int
    item_id: UUID
    quantity: Decimal
    unit_price: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    tax_percent: Decimal
    tax_amount: Decimal
    line_total: Decimal
    batch_number: str | None = None


# ─── Invoice Creation / Update ────────────────────────────────────────────────


class InvoiceCreate(BaseModel):
    van_id: UUID | None = None
    customer_id: UUID | None = None
    walk_in_customer_name: str | None = None
    invoice_date: date | None = None
    payment_mode: PaymentMode = PaymentMode.CASH
    paid_amount: Decimal = Decimal("0")
    notes: str | None = None
    items: list[LineItemIn] = Field(default_factory=list)


class InvoiceUpdate(BaseModel):
    """Only the fields sent are patched; ``items`` replaces the whole set.

    Unknown fields are passed on so the repository can refuse them by name.
    """

    model_config = ConfigDict(extra="allow")

    customer_id: UUID | None = None
    walk_in_customer_name: str | None = None
    payment_mode: PaymentMode | None = None
    paid_amount: Decimal | None = None
    notes: str | None = None
    items: list[LineItemIn] | None = None


# ─── Response Models ─────────────────────────────────────────────────────────


class InvoiceSummaryOut(BaseModel):
    id: UUID
    invoice_number: str
    van_id: UUID
    customer_id: UUID | None
    walk_in_customer_name: str | None
    invoice_date: date
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    payment_mode: PaymentMode
    payment_status: PaymentStatus
    paid_amount: Decimal
    balance_amount: Decimal
    notes: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class InvoiceOut(InvoiceSummaryOut):
    items: list[LineItemOut]


class ShareTextOut(BaseModel):
    text: str

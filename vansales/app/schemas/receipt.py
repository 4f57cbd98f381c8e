from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from vansales.app.models.receipt import ReceiptPaymentMode


class ReceiptCreate(BaseModel):
    van_id: UUID | None = None
    customer_id: UUID | None = None
    invoice_id: UUID | None = None
    receipt_date: date | None = None
    amount: Decimal = Decimal("0")
    payment_mode: ReceiptPaymentMode = ReceiptPaymentMode.CASH
    reference_number: str | None = None
    notes: str | None = None


class ReceiptUpdate(BaseModel):
    model_config = ConfigDict(extra="allow")

    invoice_id: UUID | None = None
    amount: Decimal | None = None
    payment_mode: ReceiptPaymentMode | None = None
    reference_number: str | None = None
    notes: str | None = None


class ReceiptOut(BaseModel):
    id: UUID
    receipt_number: str
    van_id: UUID
    customer_id: UUID
    invoice_id: UUID | None
    receipt_date: date
    amount: Decimal
    payment_mode: ReceiptPaymentMode
    reference_number: str | None
    notes: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from vansales.app.models.returns import ReturnType
from vansales.app.schemas.invoice import LineItemIn, LineItemOut


# ─── Request Schemas ──────────────────────────────────────────────────────────


class ReturnCreate(BaseModel):
    van_id: UUID | None = None
    customer_id: UUID | None = None
    invoice_id: UUID | None = None
    return_date: date | None = None
    return_type: ReturnType = ReturnType.GOOD
    reason: str | None = None
    notes: str | None = None
    items: list[LineItemIn] = Field(default_factory=list)


class ReturnUpdate(BaseModel):
    model_config = ConfigDict(extra="allow")

    customer_id: UUID | None = None
    invoice_id: UUID | None = None
    return_type: ReturnType | None = None
    reason: str | None = None
    notes: str | None = None
    items: list[LineItemIn] | None = None


# ─── Response Schemas ─────────────────────────────────────────────────────────


class ReturnSummaryOut(BaseModel):
    id: UUID
    return_number: str
    van_id: UUID
    customer_id: UUID
    invoice_id: UUID | None
    return_date: date
    return_type: ReturnType
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    reason: str
    notes: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ReturnOut(ReturnSummaryOut):
    items: list[LineItemOut]

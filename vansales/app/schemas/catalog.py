from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel


class ItemOut(BaseModel):
    id: UUID
    code: str
    name: str
    barcode: str | None
    price: Decimal
    taxcode: str | None
    tax_percent: Decimal


class CustomerOut(BaseModel):
    id: UUID
    code: str
    name: str
    phone: str | None
    address: str | None
    credit_limit: Decimal


class LinePriceOut(BaseModel):
    item_id: UUID
    quantity: Decimal
    unit_price: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    tax_percent: Decimal
    tax_amount: Decimal
    line_total: Decimal

from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Sequence
from uuid import UUID

from vansales.app.core.config import settings
from vansales.app.models.returns import ReturnType
from vansales.app.services.calculator import LineItemInput, LineResult
from vansales.app.services.documents import Document, DocumentRepository, as_uuid
from vansales.app.services.storage import Between
from vansales.app.services.totals import aggregate
from vansales.app.services.validation import validate_return

RETURNS_TABLE = "sales_returns"
RETURN_ITEMS_TABLE = "sales_return_items"


class SalesReturnRepository(DocumentRepository):
    """Sales returns: same line maths as invoices, no payment fields.

    ``return_type`` decides what happens to the stock (resaleable or
    written off); that handling lives with the van stock, not here.
    """

    header_table = RETURNS_TABLE
    items_table = RETURN_ITEMS_TABLE
    parent_key = "sales_return_id"
    number_field = "return_number"
    date_field = "return_date"
    default_prefix = settings.RETURN_PREFIX
    label = "return"

    creatable_fields = frozenset({
        "van_id",
        "customer_id",
        "invoice_id",
        "return_date",
        "return_type",
        "reason",
        "notes",
    })
    patchable_fields = frozenset({
        "customer_id",
        "invoice_id",
        "return_type",
        "reason",
        "notes",
    })

    def validate(self, header: Mapping[str, Any], items: Sequence[LineItemInput]) -> None:
        validate_return(header, items)

    def coerce_fields(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        out = super().coerce_fields(fields)
        out["return_type"] = ReturnType(out.get("return_type") or ReturnType.GOOD)
        out["reason"] = out["reason"].strip()
        return out

    def derived_fields(
        self, header: Mapping[str, Any], lines: Sequence[LineResult]
    ) -> dict[str, Any]:
        totals = aggregate(lines)
        return {
            "subtotal": totals.subtotal,
            "discount_amount": totals.discount,
            "tax_amount": totals.tax,
            "total_amount": totals.total,
        }

    async def list(
        self,
        van_id: UUID | None = None,
        customer_id: UUID | None = None,
        invoice_id: UUID | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Document]:
        predicate: dict[str, Any] = {}
        if van_id is not None:
            predicate["van_id"] = as_uuid(van_id)
        if customer_id is not None:
            predicate["customer_id"] = as_uuid(customer_id)
        if invoice_id is not None:
            predicate["invoice_id"] = as_uuid(invoice_id)
        if start_date is not None or end_date is not None:
            predicate["return_date"] = Between(start_date, end_date)
        return await self.storage.query(
            RETURNS_TABLE, predicate, order_by=["-return_date", "-created_at"]
        )

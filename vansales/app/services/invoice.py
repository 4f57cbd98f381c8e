from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Sequence
from uuid import UUID

from vansales.app.core.config import settings
from vansales.app.models.invoice import PaymentMode, PaymentStatus
from vansales.app.services.calculator import LineItemInput, LineResult
from vansales.app.services.documents import Document, DocumentRepository, as_uuid
from vansales.app.services.money import ZERO
from vansales.app.services.storage import Between
from vansales.app.services.totals import aggregate, classify_payment_status
from vansales.app.services.validation import validate_invoice

INVOICES_TABLE = "sales_invoices"
INVOICE_ITEMS_TABLE = "sales_invoice_items"


class InvoiceRepository(DocumentRepository):
    """Sales invoices and their line items.

    Totals, balance and ``payment_status`` are derived here on every write;
    callers only supply the party, the payment mode, the amount paid and the
    lines.
    """

    header_table = INVOICES_TABLE
    items_table = INVOICE_ITEMS_TABLE
    parent_key = "sales_invoice_id"
    number_field = "invoice_number"
    date_field = "invoice_date"
    default_prefix = settings.INVOICE_PREFIX
    label = "invoice"

    creatable_fields = frozenset({
        "van_id",
        "customer_id",
        "walk_in_customer_name",
        "invoice_date",
        "payment_mode",
        "paid_amount",
        "notes",
    })
    patchable_fields = frozenset({
        "customer_id",
        "walk_in_customer_name",
        "payment_mode",
        "paid_amount",
        "notes",
    })

    def validate(self, header: Mapping[str, Any], items: Sequence[LineItemInput]) -> None:
        validate_invoice(header, items)

    def coerce_fields(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        out = super().coerce_fields(fields)
        out["payment_mode"] = PaymentMode(out.get("payment_mode") or PaymentMode.CASH)
        if out.get("walk_in_customer_name") is not None:
            out["walk_in_customer_name"] = out["walk_in_customer_name"].strip() or None
        return out

    def derived_fields(
        self, header: Mapping[str, Any], lines: Sequence[LineResult]
    ) -> dict[str, Any]:
        totals = aggregate(lines, header.get("paid_amount") or ZERO)
        return {
            "subtotal": totals.subtotal,
            "discount_amount": totals.discount,
            "tax_amount": totals.tax,
            "total_amount": totals.total,
            "paid_amount": totals.paid,
            "balance_amount": totals.balance,
            "payment_status": classify_payment_status(totals.total, totals.balance),
        }

    async def list(
        self,
        van_id: UUID | None = None,
        customer_id: UUID | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        payment_status: PaymentStatus | str | None = None,
    ) -> list[Document]:
        """Invoice headers, newest first."""
        predicate: dict[str, Any] = {}
        if van_id is not None:
            predicate["van_id"] = as_uuid(van_id)
        if customer_id is not None:
            predicate["customer_id"] = as_uuid(customer_id)
        if start_date is not None or end_date is not None:
            predicate["invoice_date"] = Between(start_date, end_date)
        if payment_status is not None:
            predicate["payment_status"] = PaymentStatus(payment_status)
        return await self.storage.query(
            INVOICES_TABLE, predicate, order_by=["-invoice_date", "-created_at"]
        )

    async def list_open_for_customer(
        self, customer_id: UUID, van_id: UUID | None = None
    ) -> list[Document]:
        """Invoices a receipt can still be collected against."""
        predicate: dict[str, Any] = {
            "customer_id": as_uuid(customer_id),
            "payment_status": [PaymentStatus.PARTIAL, PaymentStatus.UNPAID],
        }
        if van_id is not None:
            predicate["van_id"] = as_uuid(van_id)
        rows = await self.storage.query(
            INVOICES_TABLE, predicate, order_by=["invoice_date", "created_at"]
        )
        return [row for row in rows if row["balance_amount"] > ZERO]

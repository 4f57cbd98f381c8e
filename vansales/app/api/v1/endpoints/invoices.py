from __future__ import annotations

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse

from vansales.app.api.deps import get_catalog, get_invoice_repository, http_error
from vansales.app.core.exceptions import DocumentError
from vansales.app.models.invoice import PaymentStatus
from vansales.app.schemas.invoice import (
    InvoiceCreate,
    InvoiceOut,
    InvoiceSummaryOut,
    InvoiceUpdate,
    LineItemIn,
    ShareTextOut,
)
from vansales.app.services.calculator import LineItemInput
from vansales.app.services.catalog import CatalogLookup
from vansales.app.services.export_pdf import export_invoice_pdf
from vansales.app.services.invoice import InvoiceRepository
from vansales.app.services.share_text import invoice_share_text

router = APIRouter()


def to_line_inputs(items: list[LineItemIn]) -> list[LineItemInput]:
    return [LineItemInput(**item.model_dump()) for item in items]


@router.post("", response_model=InvoiceOut, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    body: InvoiceCreate,
    repo: InvoiceRepository = Depends(get_invoice_repository),
) -> dict:
    try:
        return await repo.create(
            body.model_dump(exclude={"items"}), to_line_inputs(body.items)
        )
    except DocumentError as e:
        raise http_error(e)


@router.get("", response_model=list[InvoiceSummaryOut])
async def list_invoices(
    van_id: UUID | None = Query(None),
    customer_id: UUID | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    payment_status: PaymentStatus | None = Query(None),
    repo: InvoiceRepository = Depends(get_invoice_repository),
) -> list[dict]:
    try:
        return await repo.list(van_id, customer_id, start_date, end_date, payment_status)
    except DocumentError as e:
        raise http_error(e)


@router.get("/open", response_model=list[InvoiceSummaryOut])
async def list_open_invoices(
    customer_id: UUID = Query(..., description="Customer collecting against"),
    van_id: UUID | None = Query(None),
    repo: InvoiceRepository = Depends(get_invoice_repository),
) -> list[dict]:
    try:
        return await repo.list_open_for_customer(customer_id, van_id)
    except DocumentError as e:
        raise http_error(e)


@router.get("/{invoice_id}", response_model=InvoiceOut)
async def get_invoice(
    invoice_id: str,
    repo: InvoiceRepository = Depends(get_invoice_repository),
) -> dict:
    try:
        return await repo.get(invoice_id)
    except DocumentError as e:
        raise http_error(e)


@router.put("/{invoice_id}", response_model=InvoiceOut)
async def update_invoice(
    invoice_id: str,
    body: InvoiceUpdate,
    repo: InvoiceRepository = Depends(get_invoice_repository),
) -> dict:
    patch = {**body.model_dump(exclude_unset=True, exclude={"items"}), **(body.model_extra or {})}
    items = None if body.items is None else to_line_inputs(body.items)
    try:
        return await repo.update(invoice_id, patch, items)
    except DocumentError as e:
        raise http_error(e)


@router.get("/{invoice_id}/pdf")
async def invoice_pdf(
    invoice_id: str,
    repo: InvoiceRepository = Depends(get_invoice_repository),
    catalog: CatalogLookup = Depends(get_catalog),
) -> StreamingResponse:
    try:
        invoice = await repo.get(invoice_id)
        customer_name, item_names, van_label = await catalog.print_context(invoice)
    except DocumentError as e:
        raise http_error(e)
    buf = export_invoice_pdf(invoice, customer_name, item_names, van_label)
    return StreamingResponse(
        buf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{invoice["invoice_number"]}.pdf"'
        },
    )


@router.get("/{invoice_id}/share-text", response_model=ShareTextOut)
async def invoice_text(
    invoice_id: str,
    repo: InvoiceRepository = Depends(get_invoice_repository),
    catalog: CatalogLookup = Depends(get_catalog),
) -> dict:
    try:
        invoice = await repo.get(invoice_id)
        customer_name, item_names, van_label = await catalog.print_context(invoice)
    except DocumentError as e:
        raise http_error(e)
    return {"text": invoice_share_text(invoice, customer_name, item_names, van_label)}

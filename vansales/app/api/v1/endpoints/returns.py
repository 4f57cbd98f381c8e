from __future__ import annotations

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse

from vansales.app.api.deps import get_catalog, get_return_repository, http_error
from vansales.app.api.v1.endpoints.invoices import to_line_inputs
from vansales.app.core.exceptions import DocumentError
from vansales.app.schemas.returns import (
    ReturnCreate,
    ReturnOut,
    ReturnSummaryOut,
    ReturnUpdate,
)
from vansales.app.services.catalog import CatalogLookup
from vansales.app.services.export_pdf import export_return_pdf
from vansales.app.services.returns import SalesReturnRepository

router = APIRouter()


@router.post("", response_model=ReturnOut, status_code=status.HTTP_201_CREATED)
async def create_return(
    body: ReturnCreate,
    repo: SalesReturnRepository = Depends(get_return_repository),
) -> dict:
    try:
        return await repo.create(
            body.model_dump(exclude={"items"}), to_line_inputs(body.items)
        )
    except DocumentError as e:
        raise http_error(e)


@router.get("", response_model=list[ReturnSummaryOut])
async def list_returns(
    van_id: UUID | None = Query(None),
    customer_id: UUID | None = Query(None),
    invoice_id: UUID | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    repo: SalesReturnRepository = Depends(get_return_repository),
) -> list[dict]:
    try:
        return await repo.list(van_id, customer_id, invoice_id, start_date, end_date)
    except DocumentError as e:
        raise http_error(e)


@router.get("/{return_id}", response_model=ReturnOut)
async def get_return(
    return_id: str,
    repo: SalesReturnRepository = Depends(get_return_repository),
) -> dict:
    try:
        return await repo.get(return_id)
    except DocumentError as e:
        raise http_error(e)


@router.put("/{return_id}", response_model=ReturnOut)
async def update_return(
    return_id: str,
    body: ReturnUpdate,
    repo: SalesReturnRepository = Depends(get_return_repository),
) -> dict:
    patch = {**body.model_dump(exclude_unset=True, exclude={"items"}), **(body.model_extra or {})}
    items = None if body.items is None else to_line_inputs(body.items)
    try:
        return await repo.update(return_id, patch, items)
    except DocumentError as e:
        raise http_error(e)


@router.get("/{return_id}/pdf")
async def return_pdf(
    return_id: str,
    repo: SalesReturnRepository = Depends(get_return_repository),
    catalog: CatalogLookup = Depends(get_catalog),
) -> StreamingResponse:
    try:
        sales_return = await repo.get(return_id)
        customer_name, item_names, van_label = await catalog.print_context(sales_return)
    except DocumentError as e:
        raise http_error(e)
    buf = export_return_pdf(sales_return, customer_name, item_names, van_label)
    return StreamingResponse(
        buf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{sales_return["return_number"]}.pdf"'
        },
    )

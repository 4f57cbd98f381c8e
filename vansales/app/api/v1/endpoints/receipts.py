from __future__ import annotations

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from vansales.app.api.deps import get_receipt_repository, http_error
from vansales.app.core.exceptions import DocumentError
from vansales.app.schemas.receipt import ReceiptCreate, ReceiptOut, ReceiptUpdate
from vansales.app.services.receipt import ReceiptRepository

router = APIRouter()


@router.post("", response_model=ReceiptOut, status_code=status.HTTP_201_CREATED)
async def create_receipt(
    body: ReceiptCreate,
    repo: ReceiptRepository = Depends(get_receipt_repository),
) -> dict:
    try:
        return await repo.create(body.model_dump())
    except DocumentError as e:
        raise http_error(e)


@router.get("", response_model=list[ReceiptOut])
async def list_receipts(
    van_id: UUID | None = Query(None),
    customer_id: UUID | None = Query(None),
    invoice_id: UUID | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    repo: ReceiptRepository = Depends(get_receipt_repository),
) -> list[dict]:
    try:
        return await repo.list(van_id, customer_id, invoice_id, start_date, end_date)
    except DocumentError as e:
        raise http_error(e)


@router.get("/{receipt_id}", response_model=ReceiptOut)
async def get_receipt(
    receipt_id: str,
    repo: ReceiptRepository = Depends(get_receipt_repository),
) -> dict:
    try:
        return await repo.get(receipt_id)
    except DocumentError as e:
        raise http_error(e)


@router.put("/{receipt_id}", response_model=ReceiptOut)
async def update_receipt(
    receipt_id: str,
    body: ReceiptUpdate,
    repo: ReceiptRepository = Depends(get_receipt_repository),
) -> dict:
    patch = {**body.model_dump(exclude_unset=True), **(body.model_extra or {})}
    try:
        return await repo.update(receipt_id, patch)
    except DocumentError as e:
        raise http_error(e)

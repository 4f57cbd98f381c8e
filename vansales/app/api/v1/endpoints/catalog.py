from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from vansales.app.api.deps import get_catalog, http_error
from vansales.app.core.exceptions import DocumentError
from vansales.app.schemas.catalog import CustomerOut, ItemOut, LinePriceOut
from vansales.app.services.calculator import tax_rate_for_code
from vansales.app.services.catalog import CatalogLookup

router = APIRouter()


@router.get("/items", response_model=list[ItemOut])
async def search_items(
    q: str = Query("", description="Matches name, code or barcode"),
    catalog: CatalogLookup = Depends(get_catalog),
) -> list[dict]:
    try:
        items = await catalog.search_items(q)
    except DocumentError as e:
        raise http_error(e)
    return [{**item, "tax_percent": tax_rate_for_code(item["taxcode"])} for item in items]


@router.get("/items/{item_id}/line", response_model=LinePriceOut)
async def price_line(
    item_id: UUID,
    quantity: Decimal = Query(Decimal("1")),
    discount_percent: Decimal = Query(Decimal("0")),
    catalog: CatalogLookup = Depends(get_catalog),
) -> dict:
    try:
        return await catalog.price_line(item_id, quantity, discount_percent)
    except DocumentError as e:
        raise http_error(e)


@router.get("/customers", response_model=list[CustomerOut])
async def search_customers(
    q: str = Query("", description="Matches name, code or phone"),
    catalog: CatalogLookup = Depends(get_catalog),
) -> list[dict]:
    try:
        return await catalog.search_customers(q)
    except DocumentError as e:
        raise http_error(e)

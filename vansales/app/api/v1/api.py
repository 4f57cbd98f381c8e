from fastapi import APIRouter

from vansales.app.api.v1.endpoints import (
    catalog,
    invoices,
    receipts,
    returns,
)

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(invoices.router, prefix="/invoices", tags=["invoices"])
api_router.include_router(returns.router, prefix="/returns", tags=["returns"])
api_router.include_router(receipts.router, prefix="/receipts", tags=["receipts"])
api_router.include_router(catalog.router, prefix="/catalog", tags=["catalog"])

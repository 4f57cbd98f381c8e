from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from vansales.app.core.exceptions import DocumentError, NotFound, StorageError
from vansales.app.services.catalog import CatalogLookup
from vansales.app.services.invoice import InvoiceRepository
from vansales.app.services.locks import KeyedLock
from vansales.app.services.receipt import ReceiptRepository
from vansales.app.services.returns import SalesReturnRepository
from vansales.app.services.storage import SqlStorage


def get_storage(request: Request) -> SqlStorage:
    return request.app.state.storage


def _locks(request: Request, name: str) -> KeyedLock:
    """Repositories are built per request; their locks live on the app."""
    return request.app.state.locks[name]


def get_invoice_repository(
    request: Request, storage: SqlStorage = Depends(get_storage)
) -> InvoiceRepository:
    return InvoiceRepository(storage, locks=_locks(request, "invoices"))


def get_return_repository(
    request: Request, storage: SqlStorage = Depends(get_storage)
) -> SalesReturnRepository:
    return SalesReturnRepository(storage, locks=_locks(request, "returns"))


def get_receipt_repository(
    request: Request, storage: SqlStorage = Depends(get_storage)
) -> ReceiptRepository:
    return ReceiptRepository(storage, locks=_locks(request, "receipts"))


def get_catalog(storage: SqlStorage = Depends(get_storage)) -> CatalogLookup:
    return CatalogLookup(storage)


def http_error(exc: DocumentError) -> HTTPException:
    """Map an engine error to the HTTP status the client sees."""
    if isinstance(exc, NotFound):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, StorageError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail={"kind": exc.kind, "message": str(exc)})

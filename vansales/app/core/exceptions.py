"""Error taxonomy raised by the document engine.

Validation errors also subclass ``ValueError`` so callers that only know
"bad input" can keep catching that.  Every error carries a short ``kind``
string which the HTTP layer passes through to the client.
"""

from __future__ import annotations


class DocumentError(Exception):
    kind = "DocumentError"


class DocumentValidationError(DocumentError, ValueError):
    kind = "ValidationError"


class MissingVan(DocumentValidationError):
    kind = "MissingVan"


class MissingParty(DocumentValidationError):
    kind = "MissingParty"


class EmptyDocument(DocumentValidationError):
    kind = "EmptyDocument"


class InvalidLineItem(DocumentValidationError):
    kind = "InvalidLineItem"

    def __init__(self, message: str, line_no: int | None = None) -> None:
        super().__init__(message)
        self.line_no = line_no


class DuplicateLineItem(DocumentValidationError):
    kind = "DuplicateLineItem"


class MissingReason(DocumentValidationError):
    kind = "MissingReason"


class InvalidAmount(DocumentValidationError):
    kind = "InvalidAmount"


class MissingReference(DocumentValidationError):
    kind = "MissingReference"


class ProtectedField(DocumentValidationError):
    kind = "ProtectedField"


class NotFound(DocumentError, LookupError):
    kind = "NotFound"


class StorageError(DocumentError):
    """Any failure of the storage layer. The transaction is already rolled back."""

    kind = "StorageError"

"""Receipts: payments collected from a customer.

A receipt may name the invoice it was collected against, but it is a
record of its own.  Recording one leaves the invoice's ``paid_amount`` and
``balance_amount`` untouched; reconciling the two is done separately.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Mapping
from uuid import UUID

from vansales.app.core.config import settings
from vansales.app.core.exceptions import NotFound, ProtectedField
from vansales.app.models.receipt import ReceiptPaymentMode
from vansales.app.services.audit import log_action
from vansales.app.services.documents import UUID_FIELDS, as_uuid
from vansales.app.services.locks import KeyedLock
from vansales.app.services.money import round3
from vansales.app.services.numbering import SequenceNumberGenerator
from vansales.app.services.storage import Between, Row, Storage
from vansales.app.services.validation import validate_receipt

logger = logging.getLogger(__name__)

RECEIPTS_TABLE = "receipts"

CREATABLE_FIELDS = frozenset({
    "van_id",
    "customer_id",
    "invoice_id",
    "receipt_date",
    "amount",
    "payment_mode",
    "reference_number",
    "notes",
})
PATCHABLE_FIELDS = frozenset({
    "invoice_id",
    "amount",
    "payment_mode",
    "reference_number",
    "notes",
})


def _coerce(fields: Mapping[str, Any]) -> dict[str, Any]:
    out = dict(fields)
    for key in UUID_FIELDS:
        if out.get(key) is not None:
            out[key] = as_uuid(out[key])
    out["amount"] = round3(out["amount"])
    out["payment_mode"] = ReceiptPaymentMode(out.get("payment_mode") or ReceiptPaymentMode.CASH)
    if out.get("reference_number") is not None:
        out["reference_number"] = out["reference_number"].strip() or None
    return out


def _check_fields(fields: Mapping[str, Any], allowed: frozenset[str]) -> None:
    rejected = sorted(set(fields) - allowed)
    if rejected:
        raise ProtectedField(f"{', '.join(rejected)} cannot be set on a receipt")


class ReceiptRepository:
    def __init__(
        self,
        storage: Storage,
        numbers: SequenceNumberGenerator | None = None,
        locks: KeyedLock | None = None,
        prefix: str | None = None,
    ) -> None:
        self.storage = storage
        self.numbers = numbers or SequenceNumberGenerator()
        self.locks = locks or KeyedLock()
        self.prefix = prefix or settings.RECEIPT_PREFIX

    async def create(
        self, fields: Mapping[str, Any], *, user_id: UUID | str | None = None
    ) -> Row:
        _check_fields(fields, CREATABLE_FIELDS)
        validate_receipt(fields)
        values = _coerce(fields)
        receipt_date: date = values.get("receipt_date") or date.today()

        async with self.storage.transaction() as tx:
            number = await self.numbers.next_number(tx, self.prefix, receipt_date)
            row = await tx.insert(
                RECEIPTS_TABLE,
                {**values, "receipt_number": number, "receipt_date": receipt_date},
            )
            await log_action(
                tx,
                user_id=user_id,
                action="RECEIPT_CREATED",
                resource_type=RECEIPTS_TABLE,
                resource_id=str(row["id"]),
                changes={
                    "receipt_number": number,
                    "amount": row["amount"],
                    "invoice_id": row["invoice_id"],
                    "payment_mode": row["payment_mode"],
                },
            )

        logger.info("Created receipt %s for %s", number, row["amount"])
        return row

    async def update(
        self,
        receipt_id: UUID | str,
        patch: Mapping[str, Any],
        *,
        user_id: UUID | str | None = None,
    ) -> Row:
        _check_fields(patch, PATCHABLE_FIELDS)
        receipt_id = self._receipt_id(receipt_id)

        async with self.locks.hold(receipt_id):
            async with self.storage.transaction() as tx:
                current = await self._get(tx, receipt_id)
                merged = {**current, **patch}
                validate_receipt(merged)
                merged = _coerce(merged)
                changes = {key: merged[key] for key in patch}
                row = await tx.update(
                    RECEIPTS_TABLE,
                    receipt_id,
                    {**changes, "updated_at": datetime.now(timezone.utc)},
                )
                await log_action(
                    tx,
                    user_id=user_id,
                    action="RECEIPT_UPDATED",
                    resource_type=RECEIPTS_TABLE,
                    resource_id=str(receipt_id),
                    changes=changes,
                )
        return row

    def _receipt_id(self, receipt_id: UUID | str) -> UUID:
        try:
            return as_uuid(receipt_id)
        except ValueError:
            raise NotFound(f"Receipt {receipt_id} not found") from None

    async def _get(self, tx: Any, receipt_id: UUID) -> Row:
        rows = await tx.query(RECEIPTS_TABLE, {"id": receipt_id})
        if not rows:
            raise NotFound(f"Receipt {receipt_id} not found")
        return rows[0]

    async def get(self, receipt_id: UUID | str) -> Row:
        receipt_id = self._receipt_id(receipt_id)
        async with self.storage.transaction() as tx:
            return await self._get(tx, receipt_id)

    async def list(
        self,
        van_id: UUID | None = None,
        customer_id: UUID | None = None,
        invoice_id: UUID | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Row]:
        predicate: dict[str, Any] = {}
        if van_id is not None:
            predicate["van_id"] = as_uuid(van_id)
        if customer_id is not None:
            predicate["customer_id"] = as_uuid(customer_id)
        if invoice_id is not None:
            predicate["invoice_id"] = as_uuid(invoice_id)
        if start_date is not None or end_date is not None:
            predicate["receipt_date"] = Between(start_date, end_date)
        return await self.storage.query(
            RECEIPTS_TABLE, predicate, order_by=["-receipt_date", "-created_at"]
        )

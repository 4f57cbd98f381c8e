"""Shared create/update machinery for documents with owned line items.

A document is a header row plus its line rows.  The repository, never the
caller, runs the calculator and the aggregator, so stored totals always
match stored items.  Create and update each run in one storage transaction;
update additionally holds a per-document lock for its read-modify-write.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Mapping, Sequence
from uuid import UUID

from vansales.app.core.exceptions import NotFound, ProtectedField
from vansales.app.services.audit import log_action
from vansales.app.services.calculator import (
    LineItemInput,
    LineResult,
    clamp_percent,
    compute_input,
    line_from_row,
)
from vansales.app.services.locks import KeyedLock
from vansales.app.services.money import round3
from vansales.app.services.numbering import SequenceNumberGenerator
from vansales.app.services.storage import Row, Storage, StorageSession
from vansales.app.services.validation import line_is_storable

logger = logging.getLogger(__name__)

Document = dict[str, Any]

UUID_FIELDS = ("van_id", "customer_id", "invoice_id")


def as_uuid(value: Any) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))


def normalize_line(item: LineItemInput) -> LineItemInput:
    """Bring a line to stored precision so the stored fields reproduce line_total."""
    if not line_is_storable(item):
        return item  # rejected by validation
    return LineItemInput(
        item_id=as_uuid(item.item_id),
        quantity=round3(item.quantity),
        unit_price=round3(item.unit_price),
        discount_percent=round3(clamp_percent(item.discount_percent)),
        tax_percent=round3(clamp_percent(item.tax_percent)),
        batch_number=item.batch_number,
    )


class DocumentRepository:
    header_table: str
    items_table: str
    parent_key: str
    number_field: str
    date_field: str
    default_prefix: str
    label: str

    creatable_fields: frozenset[str]
    patchable_fields: frozenset[str]

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
        self.prefix = prefix or self.default_prefix

    # ── hooks ────────────────────────────────────────────────────────────

    def validate(self, header: Mapping[str, Any], items: Sequence[LineItemInput]) -> None:
        raise NotImplementedError

    def derived_fields(
        self, header: Mapping[str, Any], lines: Sequence[LineResult]
    ) -> dict[str, Any]:
        raise NotImplementedError

    def coerce_fields(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        """Convert caller values to column types (UUIDs, enums)."""
        out = dict(fields)
        for key in UUID_FIELDS:
            if out.get(key) is not None:
                out[key] = as_uuid(out[key])
        return out

    # ── helpers ──────────────────────────────────────────────────────────

    def _check_fields(self, fields: Mapping[str, Any], allowed: frozenset[str]) -> None:
        rejected = sorted(set(fields) - allowed)
        if rejected:
            logger.warning("Rejected %s fields on %s: %s", self.label, self.header_table, rejected)
            raise ProtectedField(
                f"{', '.join(rejected)} cannot be set on a {self.label}"
            )

    def _item_rows(
        self, document_id: UUID, items: Sequence[LineItemInput], lines: Sequence[LineResult]
    ) -> list[dict[str, Any]]:
        return [
            {
                self.parent_key: document_id,
                "line_no": line_no,
                "item_id": item.item_id,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "discount_percent": item.discount_percent,
                "discount_amount": line.discount_amount,
                "tax_percent": item.tax_percent,
                "tax_amount": line.tax_amount,
                "line_total": line.total,
                "batch_number": item.batch_number,
            }
            for line_no, (item, line) in enumerate(zip(items, lines), start=1)
        ]

    async def _replace_items(
        self,
        tx: StorageSession,
        document_id: UUID,
        items: Sequence[LineItemInput],
        lines: Sequence[LineResult],
    ) -> None:
        await tx.delete_where(self.items_table, {self.parent_key: document_id})
        for row in self._item_rows(document_id, items, lines):
            await tx.insert(self.items_table, row)

    async def _header(self, tx: StorageSession, document_id: UUID) -> Row:
        rows = await tx.query(self.header_table, {"id": document_id})
        if not rows:
            raise NotFound(f"{self.label.capitalize()} {document_id} not found")
        return rows[0]

    async def _items(self, tx: StorageSession, document_id: UUID) -> list[Row]:
        return await tx.query(
            self.items_table, {self.parent_key: document_id}, order_by=["line_no"]
        )

    async def _load(self, tx: StorageSession, document_id: UUID) -> Document:
        header = await self._header(tx, document_id)
        header["items"] = await self._items(tx, document_id)
        return header

    # ── operations ───────────────────────────────────────────────────────

    async def create(
        self,
        header: Mapping[str, Any],
        items: Sequence[LineItemInput],
        *,
        user_id: UUID | str | None = None,
    ) -> Document:
        """Validate, number, compute and insert header plus lines atomically."""
        self._check_fields(header, self.creatable_fields)
        items = [normalize_line(item) for item in items]
        self.validate(header, items)
        fields = self.coerce_fields(header)
        lines = [compute_input(item) for item in items]
        doc_date: date = fields.get(self.date_field) or date.today()

        async with self.storage.transaction() as tx:
            number = await self.numbers.next_number(tx, self.prefix, doc_date)
            row = await tx.insert(
                self.header_table,
                {
                    **fields,
                    self.number_field: number,
                    self.date_field: doc_date,
                    **self.derived_fields(fields, lines),
                },
            )
            for item_row in self._item_rows(row["id"], items, lines):
                await tx.insert(self.items_table, item_row)
            document = await self._load(tx, row["id"])
            await log_action(
                tx,
                user_id=user_id,
                action=f"{self.label.upper()}_CREATED",
                resource_type=self.header_table,
                resource_id=str(row["id"]),
                changes={
                    self.number_field: number,
                    "total_amount": document["total_amount"],
                    "item_count": len(items),
                },
            )

        logger.info(
            "Created %s %s: %d items, total %s",
            self.label, number, len(items), document["total_amount"],
        )
        return document

    async def update(
        self,
        document_id: UUID | str,
        patch: Mapping[str, Any],
        items: Sequence[LineItemInput] | None = None,
        *,
        user_id: UUID | str | None = None,
    ) -> Document:
        """Patch header fields and replace the whole item set.

        ``items=None`` keeps the stored lines; totals are recomputed either way.
        """
        self._check_fields(patch, self.patchable_fields)
        document_id = self._document_id(document_id)
        new_items = None if items is None else [normalize_line(item) for item in items]

        async with self.locks.hold(document_id):
            async with self.storage.transaction() as tx:
                current = await self._header(tx, document_id)
                if new_items is None:
                    new_items = [line_from_row(r) for r in await self._items(tx, document_id)]
                merged = {**current, **patch}
                self.validate(merged, new_items)
                merged = self.coerce_fields(merged)
                lines = [compute_input(item) for item in new_items]

                await self._replace_items(tx, document_id, new_items, lines)
                changes = {key: merged[key] for key in patch}
                await tx.update(
                    self.header_table,
                    document_id,
                    {
                        **changes,
                        **self.derived_fields(merged, lines),
                        "updated_at": datetime.now(timezone.utc),
                    },
                )
                document = await self._load(tx, document_id)
                await log_action(
                    tx,
                    user_id=user_id,
                    action=f"{self.label.upper()}_UPDATED",
                    resource_type=self.header_table,
                    resource_id=str(document_id),
                    changes={
                        **changes,
                        "total_amount": document["total_amount"],
                        "item_count": len(new_items),
                    },
                )

        logger.info(
            "Updated %s %s: %d items, total %s",
            self.label, document[self.number_field], len(new_items), document["total_amount"],
        )
        return document

    def _document_id(self, document_id: UUID | str) -> UUID:
        try:
            return as_uuid(document_id)
        except ValueError:
            raise NotFound(f"{self.label.capitalize()} {document_id} not found") from None

    async def get(self, document_id: UUID | str) -> Document:
        document_id = self._document_id(document_id)
        async with self.storage.transaction() as tx:
            return await self._load(tx, document_id)

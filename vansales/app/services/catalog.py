"""Read-only lookups over vans, customers and catalog items."""

from __future__ import annotations

import logging
from typing import Any, Mapping
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError

from vansales.app.core.exceptions import NotFound, StorageError
from vansales.app.models.catalog import Customer, Item
from vansales.app.services.calculator import compute_input, line_from_catalog
from vansales.app.services.documents import as_uuid, normalize_line
from vansales.app.services.money import Number
from vansales.app.services.storage import Row, SqlStorage
from vansales.app.services.validation import validate_line_items

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 50


class CatalogLookup:
    def __init__(self, storage: SqlStorage) -> None:
        self.storage = storage

    async def _get(self, table: str, label: str, id: UUID | str) -> Row:
        try:
            key = as_uuid(id)
        except ValueError:
            raise NotFound(f"{label} {id} not found") from None
        rows = await self.storage.query(table, {"id": key})
        if not rows:
            raise NotFound(f"{label} {id} not found")
        return rows[0]

    async def get_item(self, item_id: UUID | str) -> Row:
        return await self._get("items", "Item", item_id)

    async def get_customer(self, customer_id: UUID | str) -> Row:
        return await self._get("customers", "Customer", customer_id)

    async def get_van(self, van_id: UUID | str) -> Row:
        return await self._get("vans", "Van", van_id)

    async def _search(self, stmt: Any) -> list[Row]:
        try:
            async with self.storage.engine.connect() as conn:
                result = await conn.execute(stmt.limit(SEARCH_LIMIT))
                return [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as exc:
            logger.exception("Catalog search failed")
            raise StorageError(f"Catalog search failed: {exc}") from exc

    async def search_items(self, term: str = "", active_only: bool = True) -> list[Row]:
        """Items whose name, code or barcode contains *term*, by name."""
        table = Item.__table__
        stmt = select(table).order_by(table.c.name)
        if active_only:
            stmt = stmt.where(table.c.is_active.is_(True))
        term = term.strip()
        if term:
            pattern = f"%{term}%"
            stmt = stmt.where(
                or_(
                    table.c.name.ilike(pattern),
                    table.c.code.ilike(pattern),
                    table.c.barcode.ilike(pattern),
                )
            )
        return await self._search(stmt)

    async def search_customers(self, term: str = "", active_only: bool = True) -> list[Row]:
        table = Customer.__table__
        stmt = select(table).order_by(table.c.name)
        if active_only:
            stmt = stmt.where(table.c.is_active.is_(True))
        term = term.strip()
        if term:
            pattern = f"%{term}%"
            stmt = stmt.where(
                or_(
                    table.c.name.ilike(pattern),
                    table.c.code.ilike(pattern),
                    table.c.phone.ilike(pattern),
                )
            )
        return await self._search(stmt)

    async def price_line(
        self, item_id: UUID | str, quantity: Number = 1, discount_percent: Number = 0
    ) -> Row:
        """Price one line of *item_id* at its list price and catalog tax code."""
        item = await self.get_item(item_id)
        line = normalize_line(line_from_catalog(item, quantity, discount_percent))
        validate_line_items([line])
        result = compute_input(line)
        return {
            "item_id": line.item_id,
            "quantity": line.quantity,
            "unit_price": line.unit_price,
            "discount_percent": line.discount_percent,
            "discount_amount": result.discount_amount,
            "tax_percent": line.tax_percent,
            "tax_amount": result.tax_amount,
            "line_total": result.total,
        }

    async def names_for(self, item_ids: list[UUID]) -> dict[UUID, str]:
        """Map item ids to names for printed documents."""
        if not item_ids:
            return {}
        rows = await self.storage.query("items", {"id": list(item_ids)})
        return {row["id"]: row["name"] for row in rows}

    async def print_context(self, document: Mapping[str, Any]) -> tuple[str, dict[UUID, str], str]:
        """Customer name, item names and van label for printing *document*."""
        if document.get("customer_id") is not None:
            customer_name = (await self.get_customer(document["customer_id"]))["name"]
        else:
            customer_name = document.get("walk_in_customer_name") or ""
        van = await self.get_van(document["van_id"])
        item_names = await self.names_for([item["item_id"] for item in document["items"]])
        return customer_name, item_names, f"{van['code']} - {van['vehicle_number']}"

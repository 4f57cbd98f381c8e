"""Tests for SalesReturnRepository."""
from __future__ import annotations

import asyncio
from datetime import date
from decimal import Decimal
from typing import Any

import pytest

from vansales.app.core.exceptions import MissingParty, MissingReason, ProtectedField
from vansales.app.models.returns import ReturnType
from vansales.app.services.calculator import LineItemInput, line_from_catalog
from vansales.app.services.invoice import InvoiceRepository
from vansales.app.services.returns import SalesReturnRepository

DAY = date(2026, 10, 18)


def _header(seed: dict[str, Any], **overrides: Any) -> dict[str, Any]:
    header = {
        "van_id": seed["van_id"],
        "customer_id": seed["customer_id"],
        "return_date": DAY,
        "return_type": "damage",
        "reason": "  Crushed in transit ",
    }
    header.update(overrides)
    return header


def test_create_return(seeded_storage) -> None:
    async def scenario() -> None:
        async with seeded_storage() as (storage, seed):
            repo = SalesReturnRepository(storage)
            lines = [line_from_catalog(seed["juice"], quantity=2, discount_percent=10)]
            sales_return = await repo.create(_header(seed), lines, user_id="salesman-1")

            assert sales_return["return_number"] == "RET-261018-000001"
            assert sales_return["return_type"] is ReturnType.DAMAGE
            assert sales_return["reason"] == "Crushed in transit"
            assert sales_return["subtotal"] == Decimal("200.000")
            assert sales_return["discount_amount"] == Decimal("20.000")
            assert sales_return["tax_amount"] == Decimal("9.000")
            assert sales_return["total_amount"] == Decimal("189.000")
            assert "balance_amount" not in sales_return
            assert sales_return["items"][0]["tax_percent"] == Decimal("5.000")

            audit = await storage.query("audit_logs", {"action": "RETURN_CREATED"})
            assert len(audit) == 1

    asyncio.run(scenario())


def test_default_return_type_is_good(seeded_storage) -> None:
    async def scenario() -> None:
        async with seeded_storage() as (storage, seed):
            header = _header(seed)
            del header["return_type"]
            sales_return = await SalesReturnRepository(storage).create(
                header, [line_from_catalog(seed["milk"])]
            )
            assert sales_return["return_type"] is ReturnType.GOOD

    asyncio.run(scenario())


def test_return_requires_customer_and_reason(seeded_storage) -> None:
    async def scenario() -> None:
        async with seeded_storage() as (storage, seed):
            repo = SalesReturnRepository(storage)
            lines = [line_from_catalog(seed["milk"])]
            with pytest.raises(MissingParty):
                await repo.create(_header(seed, customer_id=None), lines)
            with pytest.raises(MissingReason):
                await repo.create(_header(seed, reason=""), lines)
            assert await storage.query("sales_returns") == []

    asyncio.run(scenario())


def test_update_return_and_list_by_invoice(seeded_storage) -> None:
    async def scenario() -> None:
        async with seeded_storage() as (storage, seed):
            invoice = await InvoiceRepository(storage).create(
                {
                    "van_id": seed["van_id"],
                    "customer_id": seed["customer_id"],
                    "invoice_date": DAY,
                },
                [line_from_catalog(seed["water"], quantity=3)],
            )
            repo = SalesReturnRepository(storage)
            sales_return = await repo.create(
                _header(seed, invoice_id=invoice["id"]),
                [line_from_catalog(seed["water"], quantity=3)],
            )
            assert sales_return["total_amount"] == Decimal("30.015")

            updated = await repo.update(
                sales_return["id"],
                {"return_type": ReturnType.GOOD, "reason": "Customer changed mind"},
                [LineItemInput(seed["water"]["id"], Decimal("1"), Decimal("10.005"))],
            )
            assert updated["return_type"] is ReturnType.GOOD
            assert updated["total_amount"] == Decimal("10.005")
            assert updated["return_number"] == sales_return["return_number"]

            with pytest.raises(ProtectedField):
                await repo.update(sales_return["id"], {"return_number": "RET-X"})

            listed = await repo.list(invoice_id=invoice["id"])
            assert [r["id"] for r in listed] == [sales_return["id"]]
            assert await repo.list(customer_id=seed["other_customer_id"]) == []

    asyncio.run(scenario())

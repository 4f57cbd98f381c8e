"""Shared test fixtures.

Each test gets its own SQLite file database under ``tmp_path``.  Async code
is driven with ``asyncio.run``; an engine is created and disposed inside the
same event loop, so tests open storage through :func:`seeded_storage`.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from decimal import Decimal
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Generator

import pytest
from fastapi.testclient import TestClient

from vansales.app.main import create_app
from vansales.app.services.storage import SqlStorage, open_storage


async def seed_catalog(storage: SqlStorage) -> dict[str, Any]:
    """One van, two customers and three items."""
    van = await storage.insert("vans", {"code": "VAN01", "vehicle_number": "BH-1234"})
    ali = await storage.insert(
        "customers", {"code": "C001", "name": "Ali Grocery", "phone": "39990001"}
    )
    noor = await storage.insert(
        "customers", {"code": "C002", "name": "Noor Supermarket", "phone": "39990002"}
    )
    juice = await storage.insert(
        "items",
        {"code": "JUICE1L", "name": "Orange Juice 1L", "barcode": "6290000000011",
         "price": Decimal("100.000"), "taxcode": "tx5"},
    )
    water = await storage.insert(
        "items",
        {"code": "WATER500", "name": "Water 500ml", "barcode": "6290000000028",
         "price": Decimal("10.005"), "taxcode": None},
    )
    milk = await storage.insert(
        "items",
        {"code": "MILK2L", "name": "Fresh Milk 2L", "barcode": "6290000000035",
         "price": Decimal("2.500"), "taxcode": "tx10"},
    )
    return {
        "van_id": van["id"],
        "customer_id": ali["id"],
        "other_customer_id": noor["id"],
        "juice": juice,
        "water": water,
        "milk": milk,
    }


@pytest.fixture()
def db_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest.fixture()
def seeded_storage(db_url: str) -> Callable[[], Any]:
    """Async context manager factory yielding ``(storage, seed)``."""

    @asynccontextmanager
    async def factory() -> AsyncIterator[tuple[SqlStorage, dict[str, Any]]]:
        storage = await open_storage(db_url)
        try:
            seed = await seed_catalog(storage)
            yield storage, seed
        finally:
            await storage.close()

    return factory


@pytest.fixture()
def seed(db_url: str) -> dict[str, Any]:
    """Seed the file database up front for tests that talk HTTP."""

    async def _seed() -> dict[str, Any]:
        storage = await open_storage(db_url)
        try:
            return await seed_catalog(storage)
        finally:
            await storage.close()

    return asyncio.run(_seed())


@pytest.fixture()
def client(db_url: str, seed: dict[str, Any]) -> Generator[TestClient, None, None]:
    with TestClient(create_app(db_url)) as c:
        yield c

from __future__ import annotations

import enum
from typing import Any

from sqlalchemy import Enum, event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def is_sqlite_url(url: str) -> bool:
    return url.startswith("sqlite")


def create_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine; on SQLite, foreign keys are switched on per connection."""
    engine = create_async_engine(url, echo=echo)
    if is_sqlite_url(url):
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


async def create_schema(engine: AsyncEngine) -> None:
    # Importing the models registers every table on Base.metadata
    from vansales.app.models import audit, catalog, invoice, receipt, returns, sequence  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def value_enum(enum_cls: type[enum.Enum]) -> Enum:
    """Column type storing an enum by its lowercase wire value rather than its name."""
    return Enum(
        enum_cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        length=20,
    )

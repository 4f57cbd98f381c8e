"""Storage collaborator used by the document repositories.

Four row-level operations (insert, update, delete_where, query) against
named tables, plus :meth:`Storage.transaction` which binds the same four
operations to one database transaction.  Repositories compose multi-row
writes inside a transaction; if anything raises inside the ``async with``
block every row written so far is rolled back.

Predicates are plain ``{column: value}`` mappings.  A list, tuple or set
value means ``IN``; ``None`` means ``IS NULL``; :class:`Between` is a range.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager, asynccontextmanager, nullcontext
from dataclasses import dataclass
from typing import Any, AsyncIterator, Mapping, Sequence

from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from vansales.app.core.database import Base, create_engine, create_schema, is_sqlite_url
from vansales.app.core.exceptions import NotFound, StorageError

logger = logging.getLogger(__name__)

Row = dict[str, Any]
Predicate = Mapping[str, Any]


class StorageSession(ABC):
    """Row operations; each call is atomic on its own."""

    @abstractmethod
    async def insert(self, table: str, row: Mapping[str, Any]) -> Row: ...

    @abstractmethod
    async def update(self, table: str, id: Any, patch: Mapping[str, Any]) -> Row: ...

    @abstractmethod
    async def delete_where(self, table: str, predicate: Predicate) -> int: ...

    @abstractmethod
    async def query(
        self,
        table: str,
        predicate: Predicate | None = None,
        order_by: Sequence[str] | None = None,
    ) -> list[Row]: ...


class Storage(StorageSession):
    """A StorageSession that can also open multi-row transactions."""

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[StorageSession]:
        """Async context manager yielding a :class:`StorageSession`."""

    async def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        async with self.transaction() as tx:
            return await tx.insert(table, row)

    async def update(self, table: str, id: Any, patch: Mapping[str, Any]) -> Row:
        async with self.transaction() as tx:
            return await tx.update(table, id, patch)

    async def delete_where(self, table: str, predicate: Predicate) -> int:
        async with self.transaction() as tx:
            return await tx.delete_where(table, predicate)

    async def query(
        self,
        table: str,
        predicate: Predicate | None = None,
        order_by: Sequence[str] | None = None,
    ) -> list[Row]:
        async with self.transaction() as tx:
            return await tx.query(table, predicate, order_by)


@dataclass(frozen=True)
class Between:
    """Inclusive range predicate value; either bound may be left open."""

    low: Any = None
    high: Any = None


# ─── SQLAlchemy implementation ───────────────────────────────────────────────


def _table(name: str) -> Table:
    try:
        return Base.metadata.tables[name]
    except KeyError:
        raise StorageError(f"Unknown table {name!r}") from None


def _where(table: Table, predicate: Predicate | None) -> list[Any]:
    clauses = []
    for column, value in (predicate or {}).items():
        col = table.c[column]
        if value is None:
            clauses.append(col.is_(None))
        elif isinstance(value, Between):
            if value.low is not None:
                clauses.append(col >= value.low)
            if value.high is not None:
                clauses.append(col <= value.high)
        elif isinstance(value, (list, tuple, set, frozenset)):
            clauses.append(col.in_(list(value)))
        else:
            clauses.append(col == value)
    return clauses


def _order(table: Table, order_by: Sequence[str] | None) -> list[Any]:
    """``"-created_at"`` sorts descending."""
    columns = []
    for name in order_by or ():
        if name.startswith("-"):
            columns.append(table.c[name[1:]].desc())
        else:
            columns.append(table.c[name].asc())
    return columns


class SqlSession(StorageSession):
    """Row operations on one open connection (and so one transaction)."""

    def __init__(self, conn: AsyncConnection) -> None:
        self.conn = conn

    async def _fetch_by_id(self, table: Table, id: Any) -> Row | None:
        result = await self.conn.execute(select(table).where(table.c.id == id))
        row = result.mappings().first()
        return dict(row) if row is not None else None

    async def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        tbl = _table(table)
        try:
            result = await self.conn.execute(insert(tbl).values(**row))
            new_id = result.inserted_primary_key[0]
            stored = await self._fetch_by_id(tbl, new_id)
        except SQLAlchemyError as exc:
            raise StorageError(f"Insert into {table} failed: {exc}") from exc
        if stored is None:
            raise StorageError(f"Inserted row of {table} could not be read back")
        return stored

    async def update(self, table: str, id: Any, patch: Mapping[str, Any]) -> Row:
        tbl = _table(table)
        try:
            if patch:
                result = await self.conn.execute(
                    update(tbl).where(tbl.c.id == id).values(**patch)
                )
                if result.rowcount == 0:
                    raise NotFound(f"{table} {id} not found")
            stored = await self._fetch_by_id(tbl, id)
        except SQLAlchemyError as exc:
            raise StorageError(f"Update of {table} {id} failed: {exc}") from exc
        if stored is None:
            raise NotFound(f"{table} {id} not found")
        return stored

    async def delete_where(self, table: str, predicate: Predicate) -> int:
        tbl = _table(table)
        if not predicate:
            raise StorageError(f"Refusing to delete every row of {table}")
        try:
            result = await self.conn.execute(delete(tbl).where(*_where(tbl, predicate)))
        except SQLAlchemyError as exc:
            raise StorageError(f"Delete from {table} failed: {exc}") from exc
        return result.rowcount

    async def query(
        self,
        table: str,
        predicate: Predicate | None = None,
        order_by: Sequence[str] | None = None,
    ) -> list[Row]:
        tbl = _table(table)
        stmt = select(tbl).where(*_where(tbl, predicate)).order_by(*_order(tbl, order_by))
        try:
            result = await self.conn.execute(stmt)
        except SQLAlchemyError as exc:
            raise StorageError(f"Query on {table} failed: {exc}") from exc
        return [dict(row) for row in result.mappings().all()]


class SqlStorage(Storage):
    """Storage over a SQLAlchemy async engine.

    SQLite allows one writer at a time, so when ``serialize_writes`` is set
    transactions queue on an in-process lock instead of failing with
    "database is locked".
    """

    session_class: type[SqlSession] = SqlSession

    def __init__(self, engine: AsyncEngine, serialize_writes: bool = False) -> None:
        self.engine = engine
        self._write_lock = asyncio.Lock() if serialize_writes else None

    @classmethod
    def from_url(cls, url: str, echo: bool = False) -> SqlStorage:
        return cls(create_engine(url, echo=echo), serialize_writes=is_sqlite_url(url))

    async def create_schema(self) -> None:
        try:
            await create_schema(self.engine)
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not create schema: {exc}") from exc

    async def close(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[StorageSession]:
        guard = self._write_lock if self._write_lock is not None else nullcontext()
        async with guard:
            try:
                async with self.engine.begin() as conn:
                    yield self.session_class(conn)
            except SQLAlchemyError as exc:
                logger.exception("Storage transaction rolled back")
                raise StorageError(f"Transaction failed: {exc}") from exc


async def open_storage(url: str, echo: bool = False) -> SqlStorage:
    """Create a storage for *url* and make sure its tables exist."""
    storage = SqlStorage.from_url(url, echo=echo)
    await storage.create_schema()
    return storage

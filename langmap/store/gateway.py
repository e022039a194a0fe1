import asyncio
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any

import aiosqlite
import structlog

from langmap.database import TABLE_COLUMNS
from langmap.exceptions import StoreError

logger = structlog.get_logger()

Filters = Mapping[str, Any]


class StoreGateway(ABC):
    """Table-oriented access to the relational store.

    Every method addresses a single table with equality filters. There is no
    multi-statement transaction: each write is durable once the call returns,
    and a failure raises StoreError.
    """

    @abstractmethod
    async def query(
        self,
        table: str,
        filters: Filters | None = None,
        *,
        columns: Iterable[str] | None = None,
        order_by: str | None = None,
    ) -> list[dict]: ...

    @abstractmethod
    async def insert(self, table: str, record: Mapping[str, Any]) -> dict: ...

    @abstractmethod
    async def insert_many(
        self, table: str, records: Iterable[Mapping[str, Any]]
    ) -> list[dict]: ...

    @abstractmethod
    async def update(self, table: str, filters: Filters, patch: Mapping[str, Any]) -> int: ...

    @abstractmethod
    async def delete(self, table: str, filters: Filters) -> int: ...


class SQLiteGateway(StoreGateway):
    def __init__(self, db: aiosqlite.Connection, lock: asyncio.Lock | None = None) -> None:
        self._db = db
        # One lock per connection: a rollback discards every uncommitted statement on it.
        self._lock = lock or asyncio.Lock()

    async def query(
        self,
        table: str,
        filters: Filters | None = None,
        *,
        columns: Iterable[str] | None = None,
        order_by: str | None = None,
    ) -> list[dict]:
        selected = list(columns) if columns else ["*"]
        if columns:
            self._check_columns(table, selected)
        else:
            self._check_table(table)

        where_clause, params = self._where(table, filters or {})
        sql = f"SELECT {', '.join(selected)} FROM {table}{where_clause}"

        if order_by:
            descending = order_by.startswith("-")
            order_column = order_by.lstrip("-")
            self._check_columns(table, [order_column])
            sql += f" ORDER BY {order_column} {'DESC' if descending else 'ASC'}"

        try:
            async with self._lock:
                cursor = await self._db.execute(sql, params)
                rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            logger.error("store_query_failed", table=table, error=str(exc))
            raise StoreError(str(exc), table=table) from exc
        return [dict(row) for row in rows]

    async def insert(self, table: str, record: Mapping[str, Any]) -> dict:
        inserted = await self.insert_many(table, [record])
        return inserted[0]

    async def insert_many(
        self, table: str, records: Iterable[Mapping[str, Any]]
    ) -> list[dict]:
        batch = [dict(record) for record in records]
        if not batch:
            return []

        column_names = list(batch[0])
        if not column_names:
            raise StoreError(f"Cannot insert an empty record into '{table}'", table=table)
        self._check_columns(table, column_names)
        for record in batch[1:]:
            if list(record) != column_names:
                raise StoreError(
                    f"All records inserted into '{table}' must share the same columns",
                    table=table,
                )

        placeholders = ", ".join("?" for _ in column_names)
        sql = f"INSERT INTO {table} ({', '.join(column_names)}) VALUES ({placeholders})"
        params = [tuple(record[name] for name in column_names) for record in batch]

        async with self._lock:
            try:
                await self._db.executemany(sql, params)
                await self._db.commit()
            except aiosqlite.Error as exc:
                await self._db.rollback()
                logger.error("store_insert_failed", table=table, rows=len(batch), error=str(exc))
                raise StoreError(str(exc), table=table) from exc

        return batch

    async def update(self, table: str, filters: Filters, patch: Mapping[str, Any]) -> int:
        if not filters:
            raise StoreError(f"Refusing to update '{table}' without filters", table=table)
        if not patch:
            raise StoreError(f"No columns to update in '{table}'", table=table)
        self._check_columns(table, list(patch))

        assignments = ", ".join(f"{name} = ?" for name in patch)
        where_clause, where_params = self._where(table, filters)
        sql = f"UPDATE {table} SET {assignments}{where_clause}"
        params = [*patch.values(), *where_params]

        return await self._write(table, sql, params, "store_update_failed")

    async def delete(self, table: str, filters: Filters) -> int:
        if not filters:
            raise StoreError(f"Refusing to delete from '{table}' without filters", table=table)

        where_clause, params = self._where(table, filters)
        sql = f"DELETE FROM {table}{where_clause}"

        return await self._write(table, sql, params, "store_delete_failed")

    async def _write(self, table: str, sql: str, params: list, event: str) -> int:
        async with self._lock:
            try:
                cursor = await self._db.execute(sql, params)
                await self._db.commit()
            except aiosqlite.Error as exc:
                await self._db.rollback()
                logger.error(event, table=table, error=str(exc))
                raise StoreError(str(exc), table=table) from exc
        return cursor.rowcount

    def _where(self, table: str, filters: Filters) -> tuple[str, list]:
        if not filters:
            return "", []
        self._check_columns(table, list(filters))

        conditions: list[str] = []
        params: list = []
        for name, value in filters.items():
            if value is None:
                conditions.append(f"{name} IS NULL")
            else:
                conditions.append(f"{name} = ?")
                params.append(value)
        return " WHERE " + " AND ".join(conditions), params

    @staticmethod
    def _check_table(table: str) -> frozenset[str]:
        allowed = TABLE_COLUMNS.get(table)
        if allowed is None:
            raise StoreError(f"Unknown table '{table}'", table=table)
        return allowed

    def _check_columns(self, table: str, names: Iterable[str]) -> None:
        allowed = self._check_table(table)
        unknown = sorted(set(names) - allowed)
        if unknown:
            raise StoreError(
                f"Unknown column(s) for '{table}': {', '.join(unknown)}", table=table
            )

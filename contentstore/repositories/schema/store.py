"""Schema store - persisted column definitions of every managed table."""

import json

from loguru import logger

from contentstore.errors import Failure, is_error
from contentstore.models.common import STRUCTURE_DDL
from contentstore.models.schema import TableSchema, dump_schema, parse_schema
from contentstore.repositories.base import BaseRepository
from contentstore.repositories.common.cache import KeyedCache
from contentstore.repositories.db import Database, quote
from contentstore.settings import STRUCTURE_TABLE


class SchemaStore(BaseRepository):
    """Authoritative record of each managed table's shape, cache-fronted.

    The record is what a table *should* look like; it is kept independently of
    the database catalog and only changes after DDL succeeds.
    """

    CACHE_GROUP = "table_structure"

    def __init__(self, db: Database, cache: KeyedCache):
        super().__init__(db, cache)
        self._table = quote(db.table_name(STRUCTURE_TABLE))
        self._group = cache.group(self.CACHE_GROUP)

    async def configure(self) -> bool | Failure:
        """Create the record table if missing."""
        return await self.execute([STRUCTURE_DDL.format(table=self._table)])

    async def get(self, table: str) -> TableSchema | Failure:
        """Stored schema of a table."""
        schema = await self.find(table)
        if schema is None:
            return Failure("Table does not exist.")
        return schema

    async def find(self, table: str) -> TableSchema | None | Failure:
        """Like ``get``, but a missing record is None rather than a Failure."""
        cached = self._group.get(table)
        if cached is not None:
            return dict(cached)

        row = await self.fetchone(f'SELECT "columns" FROM {self._table} WHERE "table" = ?', [table])
        if row is None or is_error(row):
            return row

        try:
            schema = parse_schema(json.loads(row["columns"] or "{}"))
        except ValueError as e:
            logger.warning("Corrupt schema record for {}: {}", table, e)
            return Failure(f"Invalid schema record for {table}: {e}")

        self._group.set(table, schema)
        logger.debug("Cache miss: {}:{}", self.CACHE_GROUP, table)
        return dict(schema)

    async def exists(self, table: str) -> bool:
        schema = await self.find(table)
        return schema is not None and not is_error(schema)

    async def put(self, table: str, schema: TableSchema) -> bool | Failure:
        """Record the schema of a newly created table."""
        self._group.clear(table)
        result = await self.fetchall(
            f'INSERT OR REPLACE INTO {self._table} ("table", "columns") VALUES (?, ?)',
            [table, self._serialize(schema)],
        )
        if is_error(result):
            return result
        return True

    async def update(self, table: str, schema: TableSchema, rename_from: str | None = None) -> bool | Failure:
        """Persist a changed schema, optionally moving it from an old table name."""
        self._group.clear(rename_from or table)
        self._group.clear(table)

        if rename_from and rename_from != table:
            # the record key is the primary key, so move it rather than update it
            dropped = await self.drop(rename_from)
            if is_error(dropped):
                return dropped
            return await self.put(table, schema)

        result = await self.fetchall(
            f'UPDATE {self._table} SET "columns" = ? WHERE "table" = ?',
            [self._serialize(schema), table],
        )
        if is_error(result):
            return result
        return True

    async def drop(self, table: str) -> bool | Failure:
        """Forget a table's schema."""
        self._group.clear(table)
        result = await self.fetchall(f'DELETE FROM {self._table} WHERE "table" = ?', [table])
        if is_error(result):
            return result
        return True

    async def tables(self) -> list[str] | Failure:
        """Names of all managed tables."""
        rows = await self.fetchall(f'SELECT "table" FROM {self._table} ORDER BY "table"')
        if is_error(rows):
            return rows
        return [r["table"] for r in rows]

    @staticmethod
    def _serialize(schema: TableSchema) -> str:
        return json.dumps(dump_schema(schema))

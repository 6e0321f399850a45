"""Schema migrator - creates, alters, renames and drops managed tables."""

from collections.abc import Iterable, Mapping
from typing import Any

from loguru import logger

from contentstore.errors import Failure, is_error
from contentstore.models.schema import SchemaDiff, TableSchema, diff_schema, parse_schema
from contentstore.repositories.common.cache import KeyedCache
from contentstore.repositories.db import Database
from contentstore.repositories.query.executor import rows_group
from contentstore.repositories.schema.store import SchemaStore
from contentstore.services.schema import ddl


def _parse(table: str, columns: Mapping[str, Any]) -> TableSchema | Failure:
    try:
        return parse_schema(columns)
    except ValueError as e:
        return Failure(f"Invalid schema for {table}: {e}")


class SchemaMigrator:
    """Keeps live tables and their schema records in step.

    DDL runs first; the schema record only changes once every statement of
    the batch succeeded. A batch that fails halfway leaves the statements
    already applied in place and the record untouched, so the two can
    diverge until the table is reconciled again. There is no lock around a
    reconcile: two concurrent ones on the same table race.
    """

    def __init__(self, db: Database, store: SchemaStore, cache: KeyedCache):
        self._db = db
        self._store = store
        self._cache = cache
        logger.debug("SchemaMigrator initialized")

    def _invalidate(self, *tables: str) -> None:
        for table in tables:
            self._cache.clear(rows_group(table))

    async def get_table_structure(self, table: str) -> TableSchema | Failure:
        return await self._store.get(table)

    async def create_table(self, table: str, columns: Mapping[str, Any]) -> bool | Failure:
        """Create a table and record its schema."""
        if not table:
            return Failure("Table name is required.")
        if not columns:
            return Failure("Table columns is required.")

        schema = _parse(table, columns)
        if is_error(schema):
            return schema

        physical = self._db.table_name(table)
        sequences = await self._free_sequences(physical, schema)
        if is_error(sequences):
            return sequences

        result = await self._db.execute_all(ddl.create_statements(physical, schema, sequences))
        if is_error(result):
            return result

        self._invalidate(table)
        logger.info("Table created: {}", table)
        return await self._store.put(table, schema)

    async def reconcile(self, table: str, columns: Mapping[str, Any]) -> bool | Failure:
        """Converge a table to the desired schema with the minimal DDL.

        Creates the table when it has no record; does nothing when the stored
        schema already matches.
        """
        desired = _parse(table, columns)
        if is_error(desired):
            return desired

        stored = await self._store.find(table)
        if is_error(stored):
            return stored
        if stored is None:
            return await self.create_table(table, desired)

        diff = diff_schema(stored, desired)
        if diff.is_empty:
            logger.debug("reconcile({}): up to date", table)
            return True

        return await self._alter(table, stored, diff, desired)

    async def update_table(
        self,
        table: str,
        added: Mapping[str, Any] | None = None,
        changed: Mapping[str, Any] | None = None,
        dropped: Iterable[str] | None = None,
    ) -> bool | Failure:
        """Apply explicit column additions, changes and drops."""
        if not (added or changed or dropped):
            return Failure("Specify the column to insert, update, or delete.")

        stored = await self._store.get(table)
        if is_error(stored):
            return stored

        added = _parse(table, added or {})
        if is_error(added):
            return added
        changed = _parse(table, changed or {})
        if is_error(changed):
            return changed

        diff = SchemaDiff(
            added={name: col for name, col in added.items() if name not in stored},
            changed={name: col for name, col in changed.items() if name in stored and stored[name] != col},
            dropped=[name for name in dropped or [] if name in stored],
        )
        if diff.is_empty:
            return True

        result = dict(stored)
        result.update(diff.added)
        result.update(diff.changed)
        for name in diff.dropped:
            del result[name]

        checked = _parse(table, result)
        if is_error(checked):
            return checked
        return await self._alter(table, stored, diff, checked)

    async def _alter(self, table: str, stored: TableSchema, diff: SchemaDiff, result: TableSchema) -> bool | Failure:
        blocked = ddl.constrained_changes(stored, diff)
        if blocked:
            return Failure(
                f"Cannot drop or retype constrained columns of {table}: {', '.join(blocked)}. "
                "Create a new table instead."
            )

        statements = ddl.alter_statements(self._db.table_name(table), stored, diff, result)
        outcome = await self._db.execute_all(statements)
        self._invalidate(table)
        if is_error(outcome):
            logger.warning("Altering {} failed, schema record left unchanged: {}", table, outcome.message)
            return outcome

        logger.info(
            "Table altered: {} (added={}, changed={}, dropped={})",
            table,
            list(diff.added),
            list(diff.changed),
            diff.dropped,
        )
        return await self._store.update(table, result)

    async def rename_table(self, table: str, new_table: str) -> bool | Failure:
        """Rename a table and move its schema record.

        Auto-increment columns keep feeding from the sequence created with the
        table; sequences are not renamed.
        """
        if not table:
            return Failure("Table name is required.")
        if not new_table:
            return Failure("New table name is required.")

        stored = await self._store.get(table)
        if is_error(stored):
            return stored

        statements = ddl.rename_statements(self._db.table_name(table), self._db.table_name(new_table), stored)
        result = await self._db.execute_all(statements)
        if is_error(result):
            return result

        self._invalidate(table, new_table)
        logger.info("Table renamed: {} -> {}", table, new_table)
        return await self._store.update(new_table, stored, rename_from=table)

    async def drop_table(self, table: str) -> bool | Failure:
        """Drop a table and forget its schema."""
        if not table:
            return Failure("No table name.")

        stored = await self._store.find(table)
        if is_error(stored):
            return stored

        physical = self._db.table_name(table)
        sequences = await self._db.default_sequences(physical)
        if is_error(sequences) or not sequences:
            sequences = [ddl.sequence_name(physical, name) for name, col in (stored or {}).items() if col.auto_increment]

        result = await self._db.execute_all([ddl.drop_table(physical)])
        if is_error(result):
            return result
        self._invalidate(table)

        for sequence in sequences:
            # a sequence still feeding another table stays
            dropped = await self._db.query(ddl.drop_sequence(sequence))
            if is_error(dropped):
                logger.warning("Sequence {} of {} kept: {}", sequence, table, dropped.message)

        logger.info("Table dropped: {}", table)
        return await self._store.drop(table)

    async def _free_sequences(self, table: str, schema: TableSchema) -> dict[str, str] | Failure:
        """Unused sequence names for the auto-increment columns of a new table.

        A renamed table keeps the sequence it was created with, so the plain
        name can already be taken by a table that once had this name.
        """
        columns = [name for name, col in schema.items() if col.auto_increment]
        if not columns:
            return {}

        taken = await self._db.sequence_names()
        if is_error(taken):
            return taken

        sequences = {}
        for column in columns:
            base = name = ddl.sequence_name(table, column)
            n = 2
            while name.lower() in taken:
                name = f"{base}_{n}"
                n += 1
            sequences[column] = name
        return sequences

"""Table-schema composer - derives and maintains the tables of an entity type."""

from loguru import logger

from contentstore.errors import Failure, is_error
from contentstore.models.schema import CURRENT_TIMESTAMP, ColumnDefinition, EntityKind, EntityType, TableSchema
from contentstore.repositories.schema.store import SchemaStore
from contentstore.services.hooks import HookRegistry
from contentstore.services.schema.migrator import SchemaMigrator

C = ColumnDefinition

CONTENT_FIELDS: TableSchema = {
    "title": C(kind="string", length=200, required=True),
    "status": C(kind="enum", enum_values=["public", "private", "pending", "draft"], default="draft", required=True),
    "summary": C(kind="string", length=255),
    "description": C(kind="string", length=1000),
    "author": C(kind="bigint", index=True),
    "slug": C(kind="string", length=200, required=True, index=True),
    "thumb": C(kind="bigint"),
}

GROUP_FIELDS: TableSchema = {
    "name": C(kind="string", length=200, required=True, index=True),
    "description": C(kind="string", length=255),
    "slug": C(kind="string", length=200, required=True, index=True),
    "thumb": C(kind="bigint"),
}

META_TABLE: TableSchema = {
    "name": C(kind="string", length=160, required=True, index=True),
    "value": C(kind="object"),
    "contentId": C(kind="bigint", required=True, index=True),
}

COMMENTS_TABLE: TableSchema = {
    "ID": C(kind="bigint", required=True, primary=True, auto_increment=True, index=True),
    "parent": C(kind="bigint", default=0),
    "contentId": C(kind="bigint", required=True, index=True),
    "comment": C(kind="string", length=1000, required=True),
    "status": C(kind="enum", enum_values=["public", "private", "pending", "spam"], default="pending"),
    "authorId": C(kind="bigint"),
    "author": C(kind="string"),
    "authorEmail": C(kind="string", length=160),
    "authorUrl": C(kind="string", length=160),
    "date": C(kind="timestamp", default=CURRENT_TIMESTAMP),
}

ID_COLUMN = C(kind="bigint", auto_increment=True, primary=True, index=True)
TIMESTAMP_COLUMN = C(kind="timestamp", default=CURRENT_TIMESTAMP)
PARENT_COLUMN = C(kind="bigint", default=0)
COMMENTS_COLUMN = C(kind="enum", enum_values=["open", "close", "disabled"], default="open")

SUFFIXES = ("content", "meta", "comments")


def table_names(slug: str) -> dict[str, str]:
    """Every table an entity slug can own, keyed by suffix."""
    return {suffix: f"{slug}_{suffix}" for suffix in SUFFIXES}


class TableComposer:
    """Turns an entity type into table schemas and keeps them in place.

    Hooks:
        content_columns (filter): columns of the content table.
        entity_tables (filter): every derived table schema.
        tables_created / tables_updated / tables_dropped (events).
    """

    def __init__(self, migrator: SchemaMigrator, store: SchemaStore, hooks: HookRegistry):
        self._migrator = migrator
        self._store = store
        self._hooks = hooks
        logger.debug("TableComposer initialized")

    async def content_columns(self, entity: EntityType) -> TableSchema | Failure:
        columns: TableSchema = {"ID": ID_COLUMN}

        if entity.columns:
            fields = entity.columns
        elif entity.kind is EntityKind.GROUP:
            fields = GROUP_FIELDS
        else:
            fields = CONTENT_FIELDS
        columns.update((name, col) for name, col in fields.items() if name != "ID")

        # system columns override caller fields of the same name
        columns["created"] = TIMESTAMP_COLUMN
        columns["updated"] = TIMESTAMP_COLUMN
        if entity.hierarchical:
            columns["parent"] = PARENT_COLUMN
        if entity.comments:
            columns["comments"] = COMMENTS_COLUMN

        return await self._hooks.apply_filters("content_columns", columns, entity)

    async def derive_tables(self, entity: EntityType) -> dict[str, TableSchema] | Failure:
        """Table schemas of an entity, keyed by table name."""
        columns = await self.content_columns(entity)
        if is_error(columns):
            return columns

        names = table_names(entity.slug)
        tables = {names["content"]: columns, names["meta"]: dict(META_TABLE)}
        if entity.comments:
            tables[names["comments"]] = dict(COMMENTS_TABLE)

        return await self._hooks.apply_filters("entity_tables", tables, entity)

    async def create(self, entity: EntityType) -> bool | Failure:
        tables = await self.derive_tables(entity)
        if is_error(tables):
            return tables

        for table, schema in tables.items():
            result = await self._migrator.create_table(table, schema)
            if is_error(result):
                return result

        logger.info("Created {} tables for {}", len(tables), entity.slug)
        return await self._trigger("tables_created", entity, list(tables))

    async def update(self, entity: EntityType, old: EntityType) -> bool | Failure:
        """Move the tables of ``old`` to the shape of ``entity``.

        Old tables with no counterpart are dropped, the rest are renamed when
        the slug changed, then every new table is reconciled.
        """
        new_tables = await self.derive_tables(entity)
        if is_error(new_tables):
            return new_tables
        old_tables = await self.derive_tables(old)
        if is_error(old_tables):
            return old_tables

        old_prefix = f"{old.slug}_"
        for old_table in old_tables:
            target = entity.slug + "_" + old_table.removeprefix(old_prefix)
            if not await self._store.exists(old_table):
                continue
            if target not in new_tables:
                result = await self._migrator.drop_table(old_table)
            elif target != old_table:
                result = await self._migrator.rename_table(old_table, target)
            else:
                continue
            if is_error(result):
                return result

        for table, schema in new_tables.items():
            result = await self._migrator.reconcile(table, schema)
            if is_error(result):
                return result

        return await self._trigger("tables_updated", entity, old, list(new_tables))

    async def drop(self, entity: EntityType) -> bool | Failure:
        tables = await self.derive_tables(entity)
        if is_error(tables):
            return tables

        dropped = []
        for table in tables:
            if not await self._store.exists(table):
                continue
            result = await self._migrator.drop_table(table)
            if is_error(result):
                return result
            dropped.append(table)

        return await self._trigger("tables_dropped", entity, dropped)

    async def _trigger(self, event: str, *args) -> bool | Failure:
        result = await self._hooks.trigger(event, *args)
        if is_error(result):
            return result
        return True

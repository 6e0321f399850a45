"""Schema models - column definitions, table schemas, entity types."""

from contentstore.models.schema.column import (
    CURRENT_TIMESTAMP,
    ColumnDefinition,
    ColumnKind,
    SchemaDiff,
    TableSchema,
    auto_increment_column,
    diff_schema,
    dump_schema,
    parse_schema,
)
from contentstore.models.schema.entity import EntityKind, EntityType

__all__ = [
    "CURRENT_TIMESTAMP",
    "ColumnDefinition",
    "ColumnKind",
    "SchemaDiff",
    "TableSchema",
    "auto_increment_column",
    "diff_schema",
    "dump_schema",
    "parse_schema",
    "EntityKind",
    "EntityType",
]

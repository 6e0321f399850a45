"""Schema services - DDL planning, migration and table composition."""

from contentstore.services.schema import ddl
from contentstore.services.schema.migrator import SchemaMigrator
from contentstore.services.schema.composer import TableComposer

__all__ = [
    "ddl",
    "SchemaMigrator",
    "TableComposer",
]

"""Models package - schema descriptions and parsed conditions."""

from contentstore.models.common import STRUCTURE_DDL
from contentstore.models.query import AllOf, AnyOf, Operator, Predicate
from contentstore.models.schema import (
    ColumnDefinition,
    ColumnKind,
    EntityKind,
    EntityType,
    SchemaDiff,
    TableSchema,
)

__all__ = [
    # Common
    "STRUCTURE_DDL",
    # Schema
    "ColumnDefinition",
    "ColumnKind",
    "EntityKind",
    "EntityType",
    "SchemaDiff",
    "TableSchema",
    # Query
    "AllOf",
    "AnyOf",
    "Operator",
    "Predicate",
]

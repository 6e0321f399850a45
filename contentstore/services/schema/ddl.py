"""DDL builder - DuckDB statements for managed tables.

DuckDB accepts a single action per ALTER TABLE and refuses to alter a table
that still carries secondary indexes, so alterations are emitted as an ordered
batch that drops the table's indexes first and recreates them last.
"""

from collections.abc import Mapping

from loguru import logger

from contentstore.models.schema import CURRENT_TIMESTAMP, ColumnDefinition, ColumnKind, SchemaDiff, TableSchema
from contentstore.repositories.db import quote, quote_literal

MAX_VARCHAR = 255

_TRUE_STRINGS = ("1", "true", "yes", "on")


def sequence_name(table: str, column: str) -> str:
    return f"{table}_{column}_seq"


def index_name(table: str, column: str) -> str:
    return f"idx_{table}_{column}"


def column_type(col: ColumnDefinition) -> str:
    """Storage type of a column."""
    kind = col.kind
    if kind is ColumnKind.BIGINT or (kind is ColumnKind.INT and col.auto_increment):
        return "BIGINT"
    if kind is ColumnKind.INT:
        return "INTEGER"
    if kind is ColumnKind.STRING:
        if col.length and col.length > MAX_VARCHAR:
            return "TEXT"
        return f"VARCHAR({col.length})" if col.length else "VARCHAR"
    if kind in (ColumnKind.OBJECT, ColumnKind.ARRAY):
        return "TEXT"
    if kind is ColumnKind.ENUM:
        return "ENUM(" + ", ".join(quote_literal(v) for v in col.enum_values) + ")"
    if kind is ColumnKind.BOOL:
        return "SMALLINT"
    if kind is ColumnKind.TIMESTAMP:
        return "TIMESTAMP"
    raise ValueError(f"Unsupported column kind: {kind}")


def _truthy(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def default_sql(table: str, name: str, col: ColumnDefinition, sequence: str | None = None) -> str | None:
    """DEFAULT expression of a column, or None."""
    if col.auto_increment:
        return f"nextval({quote_literal(sequence or sequence_name(table, name))})"
    if col.kind is ColumnKind.BOOL:
        return "1" if col.default is not None and _truthy(col.default) else "0"
    if col.default is None:
        return None
    if col.kind is ColumnKind.TIMESTAMP and str(col.default).upper() == CURRENT_TIMESTAMP:
        return CURRENT_TIMESTAMP
    return quote_literal(col.default)


def column_clause(table: str, name: str, col: ColumnDefinition, sequence: str | None = None) -> str:
    """Full column definition as used by CREATE TABLE."""
    parts = [quote(name), column_type(col)]
    if col.required:
        parts.append("NOT NULL")
    if col.unique and not col.primary:
        parts.append("UNIQUE")
    if col.primary:
        parts.append("PRIMARY KEY")
    default = default_sql(table, name, col, sequence)
    if default is not None:
        parts.append(f"DEFAULT {default}")
    return " ".join(parts)


def create_sequence(name: str) -> str:
    return f"CREATE SEQUENCE IF NOT EXISTS {quote(name)}"


def drop_sequence(name: str) -> str:
    return f"DROP SEQUENCE IF EXISTS {quote(name)}"


def create_index(table: str, column: str) -> str:
    return f"CREATE INDEX IF NOT EXISTS {quote(index_name(table, column))} ON {quote(table)} ({quote(column)})"


def drop_index(table: str, column: str) -> str:
    return f"DROP INDEX IF EXISTS {quote(index_name(table, column))}"


def create_statements(table: str, schema: TableSchema, sequences: Mapping[str, str] | None = None) -> list[str]:
    """Sequences, the table itself, then its secondary indexes.

    ``sequences`` maps auto-increment columns to the sequence feeding them;
    unmapped columns use ``sequence_name``.
    """
    sequences = {
        name: (sequences or {}).get(name) or sequence_name(table, name)
        for name, col in schema.items()
        if col.auto_increment
    }
    statements = [create_sequence(seq) for seq in sequences.values()]
    clauses = ", ".join(column_clause(table, name, col, sequences.get(name)) for name, col in schema.items())
    statements.append(f"CREATE TABLE IF NOT EXISTS {quote(table)} ({clauses})")
    statements.extend(create_index(table, name) for name, col in schema.items() if col.has_index)
    return statements


def _constraints_changed(table: str, name: str, old: ColumnDefinition, new: ColumnDefinition) -> None:
    if (old.unique, old.primary) != (new.unique, new.primary):
        logger.warning("{}.{}: UNIQUE/PRIMARY KEY cannot be altered in place, recorded only", table, name)


def _add_statements(table: str, name: str, col: ColumnDefinition) -> list[str]:
    statements = []
    if col.auto_increment:
        statements.append(create_sequence(sequence_name(table, name)))

    clause = f"{quote(name)} {column_type(col)}"
    default = default_sql(table, name, col)
    if default is not None:
        clause += f" DEFAULT {default}"
    statements.append(f"ALTER TABLE {quote(table)} ADD COLUMN {clause}")

    # constraints are not accepted by ADD COLUMN
    if col.required:
        statements.append(f"ALTER TABLE {quote(table)} ALTER COLUMN {quote(name)} SET NOT NULL")
    if col.unique or col.primary:
        logger.warning("{}.{}: UNIQUE/PRIMARY KEY cannot be added to an existing table, recorded only", table, name)
    return statements


def _change_statements(table: str, name: str, old: ColumnDefinition, new: ColumnDefinition) -> list[str]:
    alter = f"ALTER TABLE {quote(table)} ALTER COLUMN {quote(name)}"
    statements = []

    new_type = column_type(new)
    if column_type(old) != new_type:
        statements.append(f"{alter} TYPE {new_type}")

    old_default, new_default = default_sql(table, name, old), default_sql(table, name, new)
    if old_default != new_default:
        statements.append(f"{alter} SET DEFAULT {new_default}" if new_default is not None else f"{alter} DROP DEFAULT")

    if old.required != new.required:
        statements.append(f"{alter} {'SET' if new.required else 'DROP'} NOT NULL")

    _constraints_changed(table, name, old, new)
    return statements


def constrained_changes(stored: TableSchema, diff: SchemaDiff) -> list[str]:
    """Drops and type changes DuckDB refuses on UNIQUE/PRIMARY KEY columns."""
    blocked = [name for name in diff.dropped if stored[name].unique or stored[name].primary]
    blocked.extend(
        name
        for name, col in diff.changed.items()
        if (stored[name].unique or stored[name].primary) and column_type(stored[name]) != column_type(col)
    )
    return blocked


def alter_statements(table: str, stored: TableSchema, diff: SchemaDiff, result: TableSchema) -> list[str]:
    """Ordered batch turning ``stored`` into ``result``.

    Every stored secondary index is dropped up front, so a dropped indexed
    column always loses its index before its DROP COLUMN.
    """
    statements = [drop_index(table, name) for name, col in stored.items() if col.has_index]

    for name, col in diff.added.items():
        statements.extend(_add_statements(table, name, col))

    for name, col in diff.changed.items():
        statements.extend(_change_statements(table, name, stored[name], col))

    statements.extend(f"ALTER TABLE {quote(table)} DROP COLUMN {quote(name)}" for name in diff.dropped)

    statements.extend(create_index(table, name) for name, col in result.items() if col.has_index)
    return statements


def rename_statements(table: str, new_table: str, schema: TableSchema) -> list[str]:
    """Rename a table, moving its secondary indexes to the new name."""
    indexed = [name for name, col in schema.items() if col.has_index]
    statements = [drop_index(table, name) for name in indexed]
    statements.append(f"ALTER TABLE {quote(table)} RENAME TO {quote(new_table)}")
    statements.extend(create_index(new_table, name) for name in indexed)
    return statements


def drop_table(table: str) -> str:
    return f"DROP TABLE IF EXISTS {quote(table)}"

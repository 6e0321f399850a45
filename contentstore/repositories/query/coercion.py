"""Value coercion between Python rows and stored columns."""

import json
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from contentstore.errors import ValidationError
from contentstore.models.schema import ColumnKind, TableSchema
from contentstore.models.schema.column import JSON_KINDS


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def prepare_row(schema: TableSchema, row: Mapping[str, Any], require_all: bool) -> dict[str, Any]:
    """Validate and encode a row for writing.

    With ``require_all`` (inserts), every required column without a default
    must be present and timestamp columns with a default are stamped when
    absent. Keys unknown to the schema are dropped. On updates an explicit
    None is written as NULL.
    """
    values: dict[str, Any] = {}

    for column, col in schema.items():
        value = row.get(column)

        if column not in row or (require_all and value is None):
            if not require_all:
                continue
            if col.kind is ColumnKind.TIMESTAMP and col.default is not None:
                values[column] = _now()
                continue
            if col.required and col.default is None and not col.auto_increment:
                raise ValidationError(f"{column} is required")
            continue

        if value is not None:
            if col.kind in JSON_KINDS:
                value = json.dumps(value)
            elif col.kind is ColumnKind.BOOL:
                value = 1 if value else 0

        values[column] = value

    return values


def _unserialize(value: str) -> Any:
    # text written before the column became object/array is not JSON
    try:
        return json.loads(value)
    except ValueError:
        return value


def decode_row(schema: TableSchema, row: dict[str, Any]) -> dict[str, Any]:
    """Decode JSON and bool columns of a fetched row in place."""
    for column, value in row.items():
        col = schema.get(column)
        if col is None:
            continue
        if col.kind in JSON_KINDS and isinstance(value, str):
            row[column] = _unserialize(value)
        elif col.kind is ColumnKind.BOOL:
            row[column] = bool(value)
    return row

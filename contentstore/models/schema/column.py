"""Column and table schema model."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, TypeAdapter, field_validator, model_validator

CURRENT_TIMESTAMP = "CURRENT_TIMESTAMP"


class ColumnKind(str, Enum):
    """Column kind vocabulary stored in schema records."""

    INT = "int"
    BIGINT = "bigint"
    STRING = "string"
    ENUM = "enum"
    BOOL = "bool"
    TIMESTAMP = "timestamp"
    OBJECT = "object"
    ARRAY = "array"


INTEGER_KINDS = (ColumnKind.INT, ColumnKind.BIGINT)
JSON_KINDS = (ColumnKind.OBJECT, ColumnKind.ARRAY)


class ColumnDefinition(BaseModel):
    """Declarative description of one column."""

    kind: ColumnKind
    length: int | None = None
    required: bool = False
    unique: bool = False
    primary: bool = False
    auto_increment: bool = Field(default=False, alias="autoIncrement")
    default: bool | int | float | str | None = None
    index: bool = False
    enum_values: list[str] | None = Field(default=None, alias="enumValues")

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("kind", mode="before")
    @classmethod
    def _legacy_kind(cls, value: Any) -> Any:
        # "str" is the older spelling still found in stored records
        if value == "str":
            return ColumnKind.STRING
        return value

    @model_validator(mode="after")
    def _check_invariants(self) -> "ColumnDefinition":
        if self.auto_increment:
            if not self.primary:
                raise ValueError("autoIncrement requires primary")
            if self.kind not in INTEGER_KINDS:
                raise ValueError("autoIncrement requires an integer kind")
        if self.kind is ColumnKind.ENUM and not self.enum_values:
            raise ValueError("enum columns require enumValues")
        return self

    @property
    def has_index(self) -> bool:
        """Whether the column gets its own secondary index.

        Primary and unique columns are indexed by their constraint already.
        """
        return self.index and not self.primary and not self.unique

    def to_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys, omitting default-valued fields."""
        return self.model_dump(by_alias=True, exclude_defaults=True, mode="json")


TableSchema = dict[str, ColumnDefinition]

_schema_adapter = TypeAdapter(dict[str, ColumnDefinition])


def parse_schema(raw: Mapping[str, Any]) -> TableSchema:
    """Validate a mapping of column name -> definition (dicts or models)."""
    schema = _schema_adapter.validate_python(dict(raw))
    primaries = [name for name, col in schema.items() if col.primary]
    if len(primaries) > 1:
        raise ValueError(f"Only one primary column is allowed, got: {', '.join(primaries)}")
    return schema


def dump_schema(schema: TableSchema) -> dict[str, dict[str, Any]]:
    """Plain-dict form of a schema, as persisted."""
    return {name: col.to_dict() for name, col in schema.items()}


def auto_increment_column(schema: TableSchema) -> str | None:
    """Name of the auto-increment column, if any."""
    return next((name for name, col in schema.items() if col.auto_increment), None)


@dataclass
class SchemaDiff:
    """Column-level difference between a stored and a desired schema."""

    added: TableSchema = field(default_factory=dict)
    changed: TableSchema = field(default_factory=dict)
    dropped: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.changed or self.dropped)


def diff_schema(stored: TableSchema, desired: TableSchema) -> SchemaDiff:
    """Compute added, changed and dropped columns by name."""
    diff = SchemaDiff()
    for name, col in desired.items():
        if name not in stored:
            diff.added[name] = col
        elif stored[name] != col:
            diff.changed[name] = col
    diff.dropped = [name for name in stored if name not in desired]
    return diff

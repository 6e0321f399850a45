"""Entity type descriptor consumed by the table composer."""

from enum import Enum

from pydantic import BaseModel, Field

from contentstore.models.schema.column import ColumnDefinition


class EntityKind(str, Enum):
    """Kind of logical entity a set of tables is derived for."""

    CONTENT = "content"
    GROUP = "group"


class EntityType(BaseModel):
    """Logical entity type (e.g. a blog, a category set)."""

    slug: str = Field(min_length=1)
    kind: EntityKind = EntityKind.CONTENT
    hierarchical: bool = False
    comments: bool = False
    columns: dict[str, ColumnDefinition] | None = Field(default=None, alias="fields")

    class Config:
        populate_by_name = True

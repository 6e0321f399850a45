"""Schema repositories."""

from contentstore.repositories.schema.store import SchemaStore

__all__ = [
    "SchemaStore",
]

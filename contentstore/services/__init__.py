"""Services package - service class exports."""

from contentstore.services.hooks import Hook, HookRegistry
from contentstore.services.schema import SchemaMigrator, TableComposer

__all__ = [
    "Hook",
    "HookRegistry",
    "SchemaMigrator",
    "TableComposer",
]

"""Dependency container - builds the shared cache, hooks and components once."""

from loguru import logger

from contentstore.errors import Failure, is_error
from contentstore.repositories.common.cache import KeyedCache
from contentstore.repositories.db import Database
from contentstore.repositories.query.executor import QueryExecutor
from contentstore.repositories.schema.store import SchemaStore
from contentstore.services.hooks import HookRegistry
from contentstore.services.schema.composer import TableComposer
from contentstore.services.schema.migrator import SchemaMigrator
from contentstore.settings import DB_PATH, TABLE_PREFIX


class Container:
    """Holds one instance of every component, sharing a single cache and hook registry."""

    def __init__(self, db_path: str = DB_PATH, table_prefix: str = TABLE_PREFIX):
        self.cache = KeyedCache()
        self.hooks = HookRegistry()
        self.db = Database(db_path, table_prefix)

        # Repositories
        self.store = SchemaStore(self.db, self.cache)
        self.executor = QueryExecutor(self.db, self.cache, self.store)

        # Services
        self.migrator = SchemaMigrator(self.db, self.store, self.cache)
        self.composer = TableComposer(self.migrator, self.store, self.hooks)

        logger.debug("Container initialized: {} (prefix={!r})", db_path, table_prefix)

    async def install(self) -> bool | Failure:
        """Check the connection and create the schema record table."""
        result = await self.db.check_connection()
        if is_error(result):
            return result
        return await self.store.configure()

    def close(self) -> None:
        self.db.close()

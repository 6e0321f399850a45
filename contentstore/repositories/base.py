"""Base repository class."""

import copy
from collections.abc import Awaitable, Callable, Hashable
from typing import Any

from loguru import logger

from contentstore.errors import Failure, is_error
from contentstore.repositories.common.cache import KeyedCache
from contentstore.repositories.db import Database, Row


class BaseRepository:
    """Base repository with shared database and cache access."""

    def __init__(self, db: Database, cache: KeyedCache):
        self._db = db
        self._cache = cache
        logger.debug("{} initialized", self.__class__.__name__)

    @property
    def db(self) -> Database:
        return self._db

    @property
    def cache(self) -> KeyedCache:
        return self._cache

    def table_name(self, table: str) -> str:
        return self._db.table_name(table)

    async def _cached(self, group: str, key: Hashable, fn: Callable[[], Awaitable[Any]]) -> Any:
        """Get from cache or compute; failures are never cached.

        Callers always receive their own copy, never the cached object.
        """
        if self._cache.has(group, key):
            return copy.deepcopy(self._cache.get(group, key))
        result = await fn()
        if not is_error(result):
            self._cache.set(group, key, copy.deepcopy(result))
            logger.debug("Cache miss: {}:{}", group, key)
        return result

    async def execute(self, statements: list[str]) -> bool | Failure:
        """Execute statements in order, stopping at the first failure."""
        return await self._db.execute_all(statements)

    async def fetchall(self, query: str, params: list | None = None) -> list[Row] | Failure:
        """Execute and fetch all rows."""
        return await self._db.query(query, params)

    async def fetchone(self, query: str, params: list | None = None) -> Row | None | Failure:
        """Execute and fetch the first row."""
        rows = await self._db.query(query, params)
        if is_error(rows):
            return rows
        return rows[0] if rows else None

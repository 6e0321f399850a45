"""Repositories package - data access layer for managed tables."""

from contentstore.repositories.base import BaseRepository
from contentstore.repositories.common import KeyedCache, QueryKey, gen_key
from contentstore.repositories.db import Database, qualify, quote, quote_literal
from contentstore.repositories.query import JoinDirection, QueryExecutor, compile_condition
from contentstore.repositories.schema import SchemaStore

__all__ = [
    # DB
    "Database",
    "quote",
    "qualify",
    "quote_literal",
    # Base
    "BaseRepository",
    # Common
    "KeyedCache",
    "QueryKey",
    "gen_key",
    # Schema
    "SchemaStore",
    # Query
    "compile_condition",
    "JoinDirection",
    "QueryExecutor",
]

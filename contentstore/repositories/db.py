"""DuckDB connection management."""

import asyncio
import re
from pathlib import Path
from typing import Any

import duckdb
from loguru import logger

from contentstore.errors import Failure, is_error
from contentstore.settings import DB_PATH, TABLE_PREFIX

Row = dict[str, Any]

_NEXTVAL = re.compile(r"nextval\('([^']+)'", re.IGNORECASE)


def quote(name: str) -> str:
    """Quote an identifier."""
    return '"' + str(name).replace('"', '""') + '"'


def qualify(column: str, table: str | None = None) -> str:
    """Quote a column, prefixed with its table when given."""
    if table:
        return f"{quote(table)}.{quote(column)}"
    return quote(column)


def quote_literal(value: Any) -> str:
    """Render a value as a SQL string literal."""
    return "'" + str(value).replace("'", "''") + "'"


class Database:
    """DuckDB database with one cursor per statement.

    Every statement runs on its own cursor (a separate connection to the same
    database) in a worker thread, so the event loop is never blocked and no
    connection is held across statements.
    """

    def __init__(self, path: str = DB_PATH, prefix: str = TABLE_PREFIX, read_only: bool = False):
        self._path = path
        self._prefix = prefix
        self._read_only = read_only
        self._conn: duckdb.DuckDBPyConnection | None = None

    @property
    def path(self) -> str:
        return self._path

    @property
    def prefix(self) -> str:
        return self._prefix

    def exists(self) -> bool:
        """Check if database file exists."""
        return self._path == ":memory:" or Path(self._path).exists()

    def table_name(self, table: str) -> str:
        """Physical name of a managed table."""
        return f"{self._prefix}{table}"

    def connect(self) -> duckdb.DuckDBPyConnection:
        """Open the root connection once; cursors are derived from it."""
        if self._conn is None:
            if not self.exists():
                logger.warning("DB not found: {}. Creating empty DB.", self._path)
            self._conn = duckdb.connect(self._path, read_only=self._read_only)
            logger.debug("DB connected: {} (read_only={})", self._path, self._read_only)
        return self._conn

    def close(self) -> None:
        """Close the root connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug("DB connection closed")

    @staticmethod
    def _run(cursor: duckdb.DuckDBPyConnection, sql: str, params: list | None) -> list[Row]:
        try:
            if params:
                cursor.execute(sql, params)
            else:
                cursor.execute(sql)
            if cursor.description is None:
                return []
            names = [d[0] for d in cursor.description]
            return [dict(zip(names, row)) for row in cursor.fetchall()]
        finally:
            cursor.close()

    async def query(self, sql: str, params: list | None = None) -> list[Row] | Failure:
        """Execute one statement; backend errors come back as a Failure."""
        logger.bind(sql=True).debug("SQL: {} {}", sql, params or "")
        try:
            cursor = self.connect().cursor()
            return await asyncio.to_thread(self._run, cursor, sql, params)
        except duckdb.Error as e:
            logger.warning("Statement failed: {} ({})", e, sql)
            return Failure(str(e))

    async def execute_all(self, statements: list[str]) -> bool | Failure:
        """Run statements in order, stopping at the first failure.

        Statements that already ran stay applied.
        """
        for sql in statements:
            result = await self.query(sql)
            if is_error(result):
                return result
        return True

    async def check_connection(self) -> bool | Failure:
        """Round-trip a trivial statement."""
        result = await self.query("SELECT 1 AS ok")
        if is_error(result):
            return result
        return True

    async def sequence_names(self) -> set[str] | Failure:
        """Lower-cased names of every sequence in the catalog."""
        rows = await self.query("SELECT sequence_name FROM duckdb_sequences()")
        if is_error(rows):
            return rows
        return {r["sequence_name"].lower() for r in rows}

    async def default_sequences(self, table: str) -> list[str] | Failure:
        """Sequences feeding the column defaults of a table."""
        rows = await self.query(
            "SELECT column_default FROM duckdb_columns() WHERE table_name = ? AND column_default IS NOT NULL",
            [table],
        )
        if is_error(rows):
            return rows
        names = []
        for row in rows:
            match = _NEXTVAL.search(row["column_default"])
            if match:
                names.append(match.group(1).strip('"').split(".")[-1])
        return names

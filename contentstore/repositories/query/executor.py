"""Query executor - CRUD and join statements over managed tables."""

from collections.abc import Mapping
from enum import Enum
from typing import Any

from loguru import logger

from contentstore.errors import Failure, ValidationError, is_error
from contentstore.models.schema import auto_increment_column
from contentstore.repositories.base import BaseRepository
from contentstore.repositories.common.cache import KeyedCache, QueryKey
from contentstore.repositories.db import Database, Row, qualify, quote
from contentstore.repositories.query.coercion import decode_row, prepare_row
from contentstore.repositories.query.conditions import Condition, compile_condition
from contentstore.repositories.schema.store import SchemaStore

Columns = str | list[str] | tuple[str, ...]


class JoinDirection(str, Enum):
    LEFT = "LEFT"
    RIGHT = "RIGHT"


def rows_group(table: str) -> str:
    """Cache group holding memoized selects of a table."""
    return f"rows:{table}"


def _columns_sql(columns: Columns, table: str | None = None) -> str:
    if isinstance(columns, str):
        columns = [columns]
    parts = []
    for column in columns:
        if column == "*":
            parts.append(f"{quote(table)}.*" if table else "*")
        else:
            parts.append(qualify(column, table))
    return ", ".join(parts)


def _order_sql(order: str | None) -> str:
    order = (order or "ASC").upper()
    if order not in ("ASC", "DESC"):
        raise ValidationError(f"Invalid order: {order}")
    return order


def _limit_sql(page: int | None, per_page: int | None) -> str:
    if not per_page or per_page <= 0:
        return ""
    page = page or 1
    if page < 1:
        raise ValidationError(f"Invalid page: {page}")
    return f" LIMIT {int(per_page)} OFFSET {(int(page) - 1) * int(per_page)}"


class QueryExecutor(BaseRepository):
    """Builds and runs SELECT/INSERT/UPDATE/DELETE/JOIN statements.

    Filters go through the condition compiler; values are coerced using the
    table's stored schema. Every method returns a Failure instead of raising.
    """

    def __init__(self, db: Database, cache: KeyedCache, store: SchemaStore):
        super().__init__(db, cache)
        self._store = store

    async def get(
        self,
        table: str,
        columns: Columns = "*",
        condition: Condition | None = None,
        group_by: Columns | None = None,
        order_by: str | None = None,
        order: str | None = None,
        page: int = 1,
        per_page: int = 0,
    ) -> list[Row] | int | Failure:
        """Select rows; ``columns="count"`` returns the number of matching rows."""
        physical = quote(self.table_name(table))
        counting = columns == "count"

        try:
            where, params = compile_condition(condition)
            if counting:
                sql = f'SELECT COUNT(*) AS "count" FROM {physical}'
            else:
                sql = f"SELECT {_columns_sql(columns)} FROM {physical}"
            if where:
                sql += f" WHERE {where}"
            if group_by:
                sql += f" GROUP BY {_columns_sql(group_by)}"
            if order_by and not counting:
                sql += f" ORDER BY {quote(order_by)} {_order_sql(order)}"
            if not counting:
                sql += _limit_sql(page, per_page)
        except ValidationError as e:
            return Failure.from_exception(e)

        rows = await self.fetchall(sql, params)
        if is_error(rows):
            return rows

        if counting:
            return int(rows[0]["count"]) if rows else 0

        schema = await self._store.get(table)
        if is_error(schema):
            # unmanaged table, rows are returned as stored
            return rows
        return [decode_row(schema, row) for row in rows]

    async def get_cached(
        self,
        table: str,
        columns: Columns = "*",
        condition: Condition | None = None,
        group_by: Columns | None = None,
        order_by: str | None = None,
        order: str | None = None,
        page: int = 1,
        per_page: int = 0,
    ) -> list[Row] | int | Failure:
        """Memoized ``get``; cleared by every write to the table."""
        key = QueryKey.build(table, columns, condition, group_by, order_by, order, page, per_page)

        async def fetch():
            return await self.get(table, columns, condition, group_by, order_by, order, page, per_page)

        return await self._cached(rows_group(table), key, fetch)

    async def get_row(self, table: str, columns: Columns = "*", condition: Condition | None = None) -> Row | Failure:
        """First row matching the condition."""
        rows = await self.get(table, columns, condition, per_page=1)
        if is_error(rows):
            return rows
        if not rows:
            return Failure("No row found.")
        return rows[0]

    async def get_value(self, table: str, column: str, condition: Condition | None = None, default: Any = None) -> Any:
        """Value of one column of the first matching row, or the default."""
        row = await self.get_row(table, [column], condition)
        if is_error(row) or row.get(column) is None:
            return default
        return row[column]

    async def insert(self, table: str, row: Mapping[str, Any]) -> int | bool | Failure:
        """Insert a row; returns the generated id, or True when there is none."""
        schema = await self._store.get(table)
        if is_error(schema):
            return schema

        try:
            values = prepare_row(schema, row, require_all=True)
        except ValidationError as e:
            return Failure.from_exception(e)

        physical = quote(self.table_name(table))
        if values:
            names = ", ".join(quote(c) for c in values)
            marks = ", ".join("?" for _ in values)
            sql = f"INSERT INTO {physical} ({names}) VALUES ({marks})"
        else:
            sql = f"INSERT INTO {physical} DEFAULT VALUES"

        auto = auto_increment_column(schema)
        if auto:
            sql += f" RETURNING {quote(auto)}"

        result = await self.fetchall(sql, list(values.values()))
        if is_error(result):
            return result

        self._cache.clear(rows_group(table))
        if auto and result:
            return result[0][auto]
        return True

    async def update(self, table: str, row: Mapping[str, Any], condition: Condition) -> bool | Failure:
        """Update matching rows with the supplied columns.

        Returns True even when no row matched: an update that touches nothing
        is a successful no-op, not a "not found".
        """
        if not condition:
            return Failure("No specified conditions.")

        schema = await self._store.get(table)
        if is_error(schema):
            return schema

        try:
            values = prepare_row(schema, row, require_all=False)
            where, params = compile_condition(condition)
        except ValidationError as e:
            return Failure.from_exception(e)

        if not values:
            return Failure("No columns to update.")
        if not where:
            return Failure("No specified conditions.")

        assignments = ", ".join(f"{quote(c)} = ?" for c in values)
        sql = f"UPDATE {quote(self.table_name(table))} SET {assignments} WHERE {where}"

        result = await self.fetchall(sql, list(values.values()) + params)
        if is_error(result):
            return result

        self._cache.clear(rows_group(table))
        logger.debug("update({}): {}", table, result[0] if result else "done")
        return True

    async def delete(
        self,
        table: str,
        condition: Condition | None = None,
        offset: int = 0,
        limit: int = 0,
    ) -> bool | Failure:
        """Delete matching rows, optionally only a window of them."""
        physical = quote(self.table_name(table))
        try:
            where, params = compile_condition(condition)
        except ValidationError as e:
            return Failure.from_exception(e)

        where_sql = f" WHERE {where}" if where else ""
        if limit and limit > 0:
            # no DELETE ... LIMIT in DuckDB; pick the window by rowid
            window = f"SELECT rowid FROM {physical}{where_sql} LIMIT {int(limit)} OFFSET {int(offset or 0)}"
            sql = f"DELETE FROM {physical} WHERE rowid IN ({window})"
        else:
            sql = f"DELETE FROM {physical}{where_sql}"

        result = await self.fetchall(sql, params)
        if is_error(result):
            return result

        self._cache.clear(rows_group(table))
        return True

    async def join(
        self,
        direction: JoinDirection | str,
        tables: Mapping[str, Columns | bool],
        where: Mapping[str, Condition | bool] | None,
        relation: Mapping[str, str],
        group_by: str | Mapping[str, str] | None = None,
        order_by: str | None = None,
        order: str | None = None,
        page: int = 1,
        per_page: int = 0,
    ) -> list[Row] | Failure:
        """Select across tables joined in a chain.

        The first table is the anchor. Each following table is joined on
        ``previous.relation[previous] = table.relation[table]``.
        """
        if not isinstance(direction, JoinDirection):
            try:
                direction = JoinDirection(str(direction).upper().removesuffix(" JOIN"))
            except ValueError:
                return Failure(f"Invalid join direction: {direction}")

        if not tables:
            return Failure("Table names is required.")

        names = list(tables)
        missing = [t for t in names if t not in relation]
        if len(names) > 1 and missing:
            return Failure(f"Specify the relationship between tables: {', '.join(missing)}")

        anchor = self.table_name(names[0])
        selected: list[str] = []
        joins = [quote(anchor)]
        previous = None

        for name in names:
            physical = self.table_name(name)
            columns = tables[name]
            if columns and columns is not True:
                selected.append(_columns_sql(columns, physical))

            if name not in relation:
                continue
            current = qualify(relation[name], physical)
            if previous is not None:
                joins.append(f"{direction.value} JOIN {quote(physical)} ON {previous} = {current}")
            previous = current

        sql = f"SELECT {', '.join(selected) or '*'} FROM {' '.join(joins)}"
        params: list = []

        try:
            clauses = []
            for name, condition in (where or {}).items():
                if condition is True or not condition:
                    continue
                clause, values = compile_condition(condition, self.table_name(name))
                if clause:
                    clauses.append(clause)
                    params.extend(values)
            if clauses:
                sql += " WHERE " + " AND ".join(clauses)

            if group_by:
                if isinstance(group_by, Mapping):
                    groups = [qualify(col, self.table_name(t)) for t, col in group_by.items()]
                else:
                    groups = [qualify(group_by, anchor)]
                sql += f" GROUP BY {', '.join(groups)}"

            if order_by:
                sql += f" ORDER BY {qualify(order_by, anchor)} {_order_sql(order)}"

            sql += _limit_sql(page, per_page)
        except ValidationError as e:
            return Failure.from_exception(e)

        return await self.fetchall(sql, params)

    async def left_join(self, tables, where, relation, *args, **kwargs) -> list[Row] | Failure:
        return await self.join(JoinDirection.LEFT, tables, where, relation, *args, **kwargs)

    async def right_join(self, tables, where, relation, *args, **kwargs) -> list[Row] | Failure:
        return await self.join(JoinDirection.RIGHT, tables, where, relation, *args, **kwargs)

    async def raw_query(self, sql: str, params: list | None = None) -> list[Row] | Failure:
        """Run a hand-written statement."""
        if not sql:
            return Failure("No query statement specified.")
        return await self.fetchall(sql, params)

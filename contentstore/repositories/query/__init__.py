"""Query repositories - condition compiler and executor."""

from contentstore.repositories.query.conditions import compile_condition, parse_condition, render
from contentstore.repositories.query.executor import JoinDirection, QueryExecutor, rows_group

__all__ = [
    "compile_condition",
    "parse_condition",
    "render",
    "JoinDirection",
    "QueryExecutor",
    "rows_group",
]

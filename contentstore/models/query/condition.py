"""Condition tree - the parsed form of a declarative filter."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from contentstore.errors import ConditionError


class Operator(Enum):
    """Comparison operators, keyed by their filter token."""

    EQ = ("", "=")
    NE = ("$not", "!=")
    GT = ("$gt", ">")
    GTE = ("$gte", ">=")
    LT = ("$lt", "<")
    LTE = ("$lte", "<=")
    IN = ("$in", "IN")
    NOT_IN = ("$notin", "NOT IN")
    LIKE = ("$like", "LIKE")
    NOT_LIKE = ("$notlike", "NOT LIKE")
    BETWEEN = ("$between", "BETWEEN")

    def __init__(self, token: str, keyword: str):
        self.token = token
        self.keyword = keyword

    @classmethod
    def from_token(cls, token: str) -> "Operator":
        """Resolve a `$` token to its operator."""
        op = _BY_TOKEN.get(token)
        if op is None:
            raise ConditionError(f"Unknown operator: {token}")
        return op


_BY_TOKEN = {op.token: op for op in Operator if op.token}

LIST_OPERATORS = (Operator.IN, Operator.NOT_IN)


@dataclass(frozen=True)
class Predicate:
    """Single `column <op> value` comparison."""

    field: str
    op: Operator
    value: Any


@dataclass(frozen=True)
class AllOf:
    """Parts joined with AND; parenthesized when grouped."""

    parts: tuple["Node", ...]
    grouped: bool = True


@dataclass(frozen=True)
class AnyOf:
    """Parts joined with OR, always parenthesized."""

    parts: tuple["Node", ...]


Node = Union[Predicate, AllOf, AnyOf]

"""Condition compiler - declarative filters to parameterized SQL predicates.

A condition is parsed once into a tree of resolved operators, then rendered
left to right so that parameters line up with their placeholders.
"""

from collections.abc import Mapping
from typing import Any

from contentstore.errors import ConditionError
from contentstore.models.query import LIST_OPERATORS, AllOf, AnyOf, Node, Operator, Predicate
from contentstore.repositories.db import qualify

Condition = Mapping[str, Any]

COMBINATORS = ("$and", "$or")


def parse_condition(condition: Condition | None) -> AllOf:
    """Parse a condition; top-level parts are AND-ed without parentheses."""
    if condition is None:
        return AllOf((), grouped=False)
    if not isinstance(condition, Mapping):
        raise ConditionError("Condition must be a mapping")
    return AllOf(tuple(_parts(condition)), grouped=False)


def _parts(condition: Condition) -> list[Node]:
    parts: list[Node] = []
    for key, value in condition.items():
        if key in COMBINATORS:
            node = _combinator(key, value)
            if node.parts:
                parts.append(node)
        elif str(key).startswith("$"):
            raise ConditionError(f"Unknown combinator: {key}")
        else:
            predicates = _predicates(key, value)
            parts.append(predicates[0] if len(predicates) == 1 else AllOf(tuple(predicates)))
    return parts


def _group(condition: Any) -> Node | None:
    if not isinstance(condition, Mapping):
        raise ConditionError("Sub-condition must be a mapping")
    parts = _parts(condition)
    if not parts:
        return None
    if len(parts) == 1:
        return parts[0]
    return AllOf(tuple(parts))


def _combinator(key: str, value: Any) -> AllOf | AnyOf:
    if isinstance(value, Mapping):
        subs = [{k: v} for k, v in value.items()]
    elif isinstance(value, (list, tuple)):
        subs = list(value)
    else:
        raise ConditionError(f"{key} expects a list or a mapping")

    nodes = tuple(node for node in map(_group, subs) if node is not None)
    return AllOf(nodes) if key == "$and" else AnyOf(nodes)


def _predicates(field: str, value: Any) -> list[Predicate]:
    if isinstance(value, Mapping):
        if not value:
            raise ConditionError(f"No operator given for {field}")
        return [_operator(field, token, operand) for token, operand in value.items()]
    if isinstance(value, (list, tuple, set, frozenset)):
        return [Predicate(field, Operator.IN, tuple(value))]
    return [Predicate(field, Operator.EQ, value)]


def _operator(field: str, token: str, operand: Any) -> Predicate:
    op = Operator.from_token(token)

    if op is Operator.BETWEEN:
        if not isinstance(operand, (list, tuple)) or len(operand) != 2:
            raise ConditionError(f"$between on {field} needs exactly two values")
        return Predicate(field, op, tuple(operand))

    if op in LIST_OPERATORS:
        if not isinstance(operand, (list, tuple, set, frozenset)):
            operand = [operand]
        return Predicate(field, op, tuple(operand))

    if isinstance(operand, (Mapping, list, tuple, set, frozenset)):
        raise ConditionError(f"{token} on {field} needs a scalar value")
    return Predicate(field, op, operand)


def _param(value: Any) -> Any:
    # bool columns are stored as 0/1
    if isinstance(value, bool):
        return int(value)
    return value


def _render_predicate(node: Predicate, table: str | None) -> tuple[str, list]:
    column = qualify(node.field, table)
    op = node.op

    if node.value is None and op in (Operator.EQ, Operator.NE):
        return f"{column} IS {'NOT ' if op is Operator.NE else ''}NULL", []

    if op in LIST_OPERATORS:
        if not node.value:
            return ("1 = 0" if op is Operator.IN else "1 = 1"), []
        marks = ", ".join("?" for _ in node.value)
        return f"{column} {op.keyword} ({marks})", [_param(v) for v in node.value]

    if op is Operator.BETWEEN:
        low, high = node.value
        return f"{column} BETWEEN ? AND ?", [_param(low), _param(high)]

    return f"{column} {op.keyword} ?", [_param(node.value)]


def render(node: Node, table: str | None = None) -> tuple[str, list]:
    """Render a parsed condition to (clause, params)."""
    if isinstance(node, Predicate):
        return _render_predicate(node, table)

    clauses: list[str] = []
    params: list = []
    for part in node.parts:
        clause, values = render(part, table)
        clauses.append(clause)
        params.extend(values)

    glue = " OR " if isinstance(node, AnyOf) else " AND "
    clause = glue.join(clauses)
    if clause and (isinstance(node, AnyOf) or node.grouped):
        clause = f"({clause})"
    return clause, params


def compile_condition(condition: Condition | None, table: str | None = None) -> tuple[str, list]:
    """Compile a condition to a WHERE fragment and its parameters.

    Returns ("", []) for an empty condition.
    """
    return render(parse_condition(condition), table)

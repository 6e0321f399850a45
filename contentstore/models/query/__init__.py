"""Query models - parsed conditions."""

from contentstore.models.query.condition import (
    LIST_OPERATORS,
    AllOf,
    AnyOf,
    Node,
    Operator,
    Predicate,
)

__all__ = [
    "LIST_OPERATORS",
    "AllOf",
    "AnyOf",
    "Node",
    "Operator",
    "Predicate",
]

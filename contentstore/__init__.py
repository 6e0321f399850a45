"""Runtime-managed relational tables with declarative queries."""

from contentstore.container import Container
from contentstore.errors import Failure, is_error

__all__ = [
    "Container",
    "Failure",
    "is_error",
]

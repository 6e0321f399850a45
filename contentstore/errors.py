"""Errors and the tagged failure value returned by store operations."""

from dataclasses import dataclass, field
from typing import Any


class StoreError(Exception):
    """Base class for errors raised inside the store."""

    def __init__(self, message: str = "Store error"):
        self.message = message
        super().__init__(self.message)


class ValidationError(StoreError):
    """Input rejected before any SQL is issued."""

    def __init__(self, message: str = "Validation error"):
        super().__init__(message)


class ConditionError(ValidationError):
    """Malformed filter condition."""

    def __init__(self, message: str = "Invalid condition"):
        super().__init__(message)


@dataclass(frozen=True)
class Failure:
    """Tagged error result.

    Public operations return this instead of raising; callers check
    ``is_error`` before using a result.
    """

    message: str
    is_error: bool = field(default=True, init=False)

    @classmethod
    def from_exception(cls, exc: BaseException) -> "Failure":
        return cls(getattr(exc, "message", None) or str(exc))

    def __str__(self) -> str:
        return self.message


def is_error(value: Any) -> bool:
    """Check whether a result is a Failure."""
    return isinstance(value, Failure)

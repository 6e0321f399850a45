"""Common models - tables shared by every managed schema."""

from contentstore.models.common.structure import STRUCTURE_DDL

__all__ = [
    "STRUCTURE_DDL",
]

"""Keyed cache - namespaced in-process memoization.

Entries have no TTL and are never evicted; the write path that owns a group
is responsible for clearing it.
"""

import json
from collections.abc import Hashable, Mapping
from dataclasses import dataclass
from typing import Any

from loguru import logger


def _render(value: Any) -> str:
    if isinstance(value, Mapping):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        return "{" + "-".join(f"{k}_{_render(v)}" for k, v in items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + "-".join(_render(v) for v in value) + "]"
    if isinstance(value, (set, frozenset)):
        return "[" + "-".join(sorted(_render(v) for v in value)) + "]"
    return json.dumps(value, default=str)


def gen_key(obj: Any) -> str:
    """Canonical cache key for an arbitrary filter object.

    Mapping keys are emitted sorted so that field order does not change the
    key; sequence order is kept. Scalars are JSON-encoded, so 1 and "1" differ.
    """
    if isinstance(obj, Mapping):
        return _render(obj)[1:-1]
    return _render(obj)


@dataclass(frozen=True)
class QueryKey:
    """Hashable descriptor of a select, used as a memoization key."""

    table: str
    columns: str
    condition: str
    group_by: str = ""
    order_by: str = ""
    order: str = ""
    page: int = 1
    per_page: int = 0

    @classmethod
    def build(
        cls,
        table: str,
        columns: Any = "*",
        condition: Any = None,
        group_by: Any = None,
        order_by: Any = None,
        order: str | None = None,
        page: int = 1,
        per_page: int = 0,
    ) -> "QueryKey":
        return cls(
            table=table,
            columns=gen_key(columns),
            condition=gen_key(condition or {}),
            group_by=gen_key(group_by) if group_by else "",
            order_by=gen_key(order_by) if order_by else "",
            order=(order or "").upper(),
            page=page or 1,
            per_page=per_page or 0,
        )


class CacheGroup:
    """Cache view bound to a single group."""

    def __init__(self, cache: "KeyedCache", name: str):
        self._cache = cache
        self.name = name

    def get(self, key: Hashable | None = None, default: Any = None) -> Any:
        return self._cache.get(self.name, key, default)

    def has(self, key: Hashable) -> bool:
        return self._cache.has(self.name, key)

    def set(self, key: Hashable, value: Any) -> None:
        self._cache.set(self.name, key, value)

    def clear(self, key: Hashable | None = None) -> None:
        self._cache.clear(self.name, key)

    @staticmethod
    def gen_key(obj: Any) -> str:
        return gen_key(obj)


class KeyedCache:
    """Process-wide cache of groups of key/value entries."""

    def __init__(self):
        self._groups: dict[str, dict[Hashable, Any]] = {}

    def group(self, name: str) -> CacheGroup:
        return CacheGroup(self, name)

    def get(self, group: str, key: Hashable | None = None, default: Any = None) -> Any:
        """Get an entry, or a copy of the whole group when no key is given."""
        entries = self._groups.get(group, {})
        if key is None:
            return dict(entries)
        return entries.get(key, default)

    def has(self, group: str, key: Hashable) -> bool:
        return key in self._groups.get(group, {})

    def set(self, group: str, key: Hashable, value: Any) -> None:
        self._groups.setdefault(group, {})[key] = value

    def clear(self, group: str, key: Hashable | None = None) -> None:
        """Remove one entry, or the entire group when no key is given."""
        if key is None:
            if self._groups.pop(group, None) is not None:
                logger.debug("Cache cleared: {}", group)
            return
        self._groups.get(group, {}).pop(key, None)

    def clear_all(self) -> None:
        self._groups.clear()
        logger.debug("All cache cleared")

    def groups(self) -> list[str]:
        return list(self._groups)

    @staticmethod
    def gen_key(obj: Any) -> str:
        return gen_key(obj)

"""Common repositories - shared cache."""

from contentstore.repositories.common.cache import CacheGroup, KeyedCache, QueryKey, gen_key

__all__ = [
    "CacheGroup",
    "KeyedCache",
    "QueryKey",
    "gen_key",
]

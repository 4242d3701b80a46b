"""Core record store modules."""

from .cache import QueryCache, CacheEntry

__all__ = [
    'QueryCache',
    'CacheEntry',
]

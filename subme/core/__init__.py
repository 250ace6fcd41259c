"""
Core primitives shared by the translation pipeline and the API client.
"""

from subme.core.cache import BoundedTTLCache, CacheEntry, CacheStats
from subme.core.mutex import KeyedMutex, MutexKey

__all__ = [
    "BoundedTTLCache",
    "CacheEntry",
    "CacheStats",
    "KeyedMutex",
    "MutexKey",
]

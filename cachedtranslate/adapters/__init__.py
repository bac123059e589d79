"""Cache store adapters.

Every adapter implements the `CacheStore` interface and can be swapped
without changes to the cache protocol or the orchestrator.
"""

from .base import CacheStore
from .memory import MemoryCacheStore
from .sqlite import SQLiteCacheStore

__all__ = ["CacheStore", "MemoryCacheStore", "SQLiteCacheStore"]

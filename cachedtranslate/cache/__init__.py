"""Cache key scheme and cache protocol."""

from .keys import cache_key_for, has_resource_info, hash_key, hash_text, resource_key
from .protocol import CacheProtocol

__all__ = [
    "CacheProtocol",
    "cache_key_for",
    "has_resource_info",
    "hash_key",
    "hash_text",
    "resource_key",
]

"""Shared typed data models for cachedtranslate.

This package contains dataclasses used across cache, provider, and
orchestration modules to avoid cross-module coupling and circular imports.
"""

from .datatypes import (
    BatchRequest,
    CacheEntry,
    CacheEntryDraft,
    CacheLookup,
    CacheStats,
    InvalidationScope,
    LanguageDetection,
    ManualOverride,
    ProviderTranslation,
    ResourceField,
    TranslateRequest,
    TranslateResult,
)

__all__ = [
    "BatchRequest",
    "CacheEntry",
    "CacheEntryDraft",
    "CacheLookup",
    "CacheStats",
    "InvalidationScope",
    "LanguageDetection",
    "ManualOverride",
    "ProviderTranslation",
    "ResourceField",
    "TranslateRequest",
    "TranslateResult",
]

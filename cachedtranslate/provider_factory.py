"""Factory helpers for translation providers and cache stores.

Responsibilities:
- Resolve provider identifiers to concrete provider implementations.
- Resolve cache backend identifiers to concrete store adapters.
- Keep orchestration independent from concrete class construction.

Notes:
- Only the `openai` provider is implemented at the moment.
- Factory mappings are explicit to simplify future additions.
"""

from __future__ import annotations

from pathlib import Path

from .adapters.base import CacheStore
from .adapters.memory import MemoryCacheStore
from .adapters.sqlite import SQLiteCacheStore
from .providers.base import TranslationProvider
from .providers.openai_provider import OpenAITranslationProvider


class ProviderFactory:
    """Factory for provider-backed clients and cache stores."""

    @staticmethod
    def create_provider(
        provider_id: str,
        model: str,
        api_key: str | None = None,
        temperature: float = 0.3,
    ) -> TranslationProvider:
        """Create a translation provider for a configured provider identifier."""

        if provider_id == "openai":
            return OpenAITranslationProvider(
                model=model,
                provider_id=provider_id,
                api_key=api_key,
                temperature=temperature,
            )
        raise ValueError(f"Unsupported translation provider `{provider_id}`.")

    @staticmethod
    def create_cache_store(backend: str, path: Path | None = None) -> CacheStore:
        """Create a cache store for a configured backend identifier."""

        if backend == "memory":
            return MemoryCacheStore()
        if backend == "sqlite":
            if path is None:
                raise ValueError("The `sqlite` cache backend requires a database path.")
            return SQLiteCacheStore(path)
        raise ValueError(f"Unsupported cache backend `{backend}`.")

"""Core datatypes shared across cachedtranslate modules.

Responsibilities:
- Represent immutable records exchanged between the orchestrator, the cache
  protocol, store adapters, and providers.
- Keep field names explicit so store adapters can map them to physical schemas.

Key types:
- `CacheEntry`, `CacheEntryDraft`, `CacheLookup`, `CacheStats`,
  `TranslateRequest`, `BatchRequest`, `TranslateResult`, `ManualOverride`,
  `ResourceField`, `ProviderTranslation`, `LanguageDetection`,
  and `InvalidationScope`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Sequence


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """One resolved translation persisted by a cache store.

    Attributes:
        id: Cache key; either a `hash:` or a `res:` key.
        source_text: Original text that was translated.
        source_language: Detected or declared source language (`manual` for overrides).
        target_language: Target language code.
        translated_text: Translated text.
        resource_type: Optional resource type (set together with id and field).
        resource_id: Optional resource identifier.
        field: Optional resource field name.
        is_manual_override: Whether the entry was written by a human override.
        provider: Provider identifier that produced the entry.
        model: Optional model identifier.
        created_at: First insert timestamp.
        updated_at: Last upsert timestamp.
        last_used_at: Last cache hit timestamp.
    """

    id: str
    source_text: str
    source_language: str
    target_language: str
    translated_text: str
    resource_type: str | None
    resource_id: str | None
    field: str | None
    is_manual_override: bool
    provider: str
    model: str | None
    created_at: datetime
    updated_at: datetime
    last_used_at: datetime


@dataclass(frozen=True, slots=True)
class CacheEntryDraft:
    """Cache entry payload without timestamps, as accepted by `CacheStore.set`."""

    id: str
    source_text: str
    source_language: str
    target_language: str
    translated_text: str
    provider: str
    model: str | None = None
    resource_type: str | None = None
    resource_id: str | None = None
    field: str | None = None
    is_manual_override: bool = False

    def stamp(
        self,
        created_at: datetime,
        updated_at: datetime,
        last_used_at: datetime,
    ) -> CacheEntry:
        """Return a persisted entry carrying the given store timestamps."""

        return CacheEntry(
            id=self.id,
            source_text=self.source_text,
            source_language=self.source_language,
            target_language=self.target_language,
            translated_text=self.translated_text,
            resource_type=self.resource_type,
            resource_id=self.resource_id,
            field=self.field,
            is_manual_override=self.is_manual_override,
            provider=self.provider,
            model=self.model,
            created_at=created_at,
            updated_at=updated_at,
            last_used_at=last_used_at,
        )


@dataclass(frozen=True, slots=True)
class CacheLookup:
    """Cache hit payload returned by the cache protocol."""

    translated_text: str
    source_language: str
    is_manual_override: bool = False


@dataclass(frozen=True, slots=True)
class CacheStats:
    """Aggregate cache statistics reported by a store."""

    total_entries: int
    by_language: Mapping[str, int] = field(default_factory=dict)
    manual_overrides: int = 0


@dataclass(frozen=True, slots=True)
class TranslateRequest:
    """Single-text translation request.

    Attributes:
        text: Source text.
        to: Target language code.
        source_language: Optional declared source language; detected when omitted.
        context: Optional free-form hint passed to the provider.
        resource_type: Optional resource type for per-field caching.
        resource_id: Optional resource identifier.
        field: Optional resource field name.
    """

    text: str
    to: str
    source_language: str | None = None
    context: str | None = None
    resource_type: str | None = None
    resource_id: str | None = None
    field: str | None = None


@dataclass(frozen=True, slots=True)
class BatchRequest:
    """Batch translation request sharing one target language."""

    texts: Sequence[str]
    to: str
    source_language: str | None = None
    context: str | None = None


@dataclass(frozen=True, slots=True)
class TranslateResult:
    """Translation outcome returned to application code."""

    text: str
    source_language: str
    to: str
    cached: bool
    is_manual_override: bool = False


@dataclass(frozen=True, slots=True)
class ManualOverride:
    """Human-provided translation pinned to one resource field."""

    text: str
    translated_text: str
    to: str
    resource_type: str
    resource_id: str
    field: str


@dataclass(frozen=True, slots=True)
class ResourceField:
    """Resource field coordinates used to clear a manual override."""

    resource_type: str
    resource_id: str
    field: str
    to: str


@dataclass(frozen=True, slots=True)
class ProviderTranslation:
    """Raw provider translation output."""

    text: str
    source_language: str


@dataclass(frozen=True, slots=True)
class LanguageDetection:
    """Provider language detection output."""

    language: str
    confidence: float


@dataclass(frozen=True, slots=True)
class InvalidationScope:
    """Scope of a cache invalidation request.

    Attributes:
        kind: One of `resource`, `language`, or `all`.
        resource_type: Resource type for `resource` scope.
        resource_id: Resource identifier for `resource` scope.
        language: Target language for `language` scope.
    """

    kind: str
    resource_type: str | None = None
    resource_id: str | None = None
    language: str | None = None

    @classmethod
    def for_resource(cls, resource_type: str, resource_id: str) -> InvalidationScope:
        """Build a scope removing every entry of one resource."""

        return cls(kind="resource", resource_type=resource_type, resource_id=resource_id)

    @classmethod
    def for_language(cls, language: str) -> InvalidationScope:
        """Build a scope removing every entry of one target language."""

        return cls(kind="language", language=language)

    @classmethod
    def everything(cls) -> InvalidationScope:
        """Build a scope removing every entry."""

        return cls(kind="all")

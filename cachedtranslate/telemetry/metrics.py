"""Counters and analytics events for translation activity.

Responsibilities:
- Track cache hits, misses, provider calls, coalesced waits, and cache write
  failures for one orchestrator.
- Describe analytics events delivered to application observers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock


@dataclass(frozen=True, slots=True)
class AnalyticsEvent:
    """One observable translation event.

    Attributes:
        type: `cache_hit`, `translation`, `detection`, or `error`.
        text: Source text of the request.
        to: Target language, when applicable.
        source_language: Source language, when known.
        translated_text: Resulting text for hits and translations.
        cached: Whether the result came from the cache.
        duration_ms: Elapsed wall time in milliseconds.
        provider: Provider identifier for provider-backed events.
        model: Model identifier for provider-backed events.
        error: Error message for `error` events.
        resource_type: Optional resource type of the request.
        resource_id: Optional resource id of the request.
        field: Optional resource field of the request.
    """

    type: str
    text: str
    to: str | None = None
    source_language: str | None = None
    translated_text: str | None = None
    cached: bool = False
    duration_ms: float = 0.0
    provider: str | None = None
    model: str | None = None
    error: str | None = None
    resource_type: str | None = None
    resource_id: str | None = None
    field: str | None = None


@dataclass(slots=True)
class TranslationMetrics:
    """Thread-safe run-level counters for one orchestrator instance."""

    cache_hits: int = 0
    cache_misses: int = 0
    provider_calls: int = 0
    coalesced_waits: int = 0
    write_failures: int = 0
    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def increment(self, counter: str, amount: int = 1) -> None:
        """Increase one named counter."""

        with self._lock:
            setattr(self, counter, getattr(self, counter) + amount)

    def hit_rate(self) -> float:
        """Return cache hit rate over all lookups."""

        with self._lock:
            total = self.cache_hits + self.cache_misses
            if total == 0:
                return 0.0
            return self.cache_hits / float(total)

    def summary(self) -> dict[str, float]:
        """Return a summary dictionary for reporting."""

        hit_rate = self.hit_rate()
        with self._lock:
            return {
                "cache_hits": self.cache_hits,
                "cache_misses": self.cache_misses,
                "provider_calls": self.provider_calls,
                "coalesced_waits": self.coalesced_waits,
                "write_failures": self.write_failures,
                "cache_hit_rate": hit_rate,
            }

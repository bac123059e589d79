"""In-memory cache store.

Responsibilities:
- Keep cache entries in a process-local dictionary.
- Provide strongly consistent, thread-safe store operations for tests and
  short-lived processes.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import RLock
from typing import Callable

from ..models.datatypes import CacheEntry, CacheEntryDraft, CacheStats
from .base import CacheStore


def utc_now() -> datetime:
    """Return the current timezone-aware UTC timestamp."""

    return datetime.now(timezone.utc)


class MemoryCacheStore(CacheStore):
    """Dictionary-backed cache store guarded by a re-entrant lock."""

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        """Initialize empty storage with an injectable timestamp source."""

        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = RLock()

    def get(self, entry_id: str) -> CacheEntry | None:
        """Return the stored entry for a key, if any."""

        with self._lock:
            return self._entries.get(entry_id)

    def set(self, draft: CacheEntryDraft) -> None:
        """Upsert an entry, keeping `created_at` of an existing entry."""

        now = self._clock()
        with self._lock:
            existing = self._entries.get(draft.id)
            created_at = existing.created_at if existing is not None else now
            self._entries[draft.id] = draft.stamp(
                created_at=created_at,
                updated_at=max(now, created_at),
                last_used_at=max(now, created_at),
            )

    def touch(self, entry_id: str) -> None:
        """Refresh `last_used_at` for an existing entry."""

        now = self._clock()
        with self._lock:
            existing = self._entries.get(entry_id)
            if existing is None:
                return
            self._entries[entry_id] = replace(
                existing, last_used_at=max(now, existing.created_at)
            )

    def delete(self, entry_id: str) -> None:
        """Remove one entry when present."""

        with self._lock:
            self._entries.pop(entry_id, None)

    def delete_by_resource(self, resource_type: str, resource_id: str) -> int:
        """Remove every entry belonging to one resource."""

        return self._delete_matching(
            lambda entry: entry.resource_type == resource_type
            and entry.resource_id == resource_id
        )

    def delete_by_language(self, target_language: str) -> int:
        """Remove every entry for one target language."""

        return self._delete_matching(lambda entry: entry.target_language == target_language)

    def delete_all(self) -> int:
        """Remove every entry."""

        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def get_stats(self) -> CacheStats:
        """Aggregate entry counts by target language and manual override flag."""

        with self._lock:
            entries = list(self._entries.values())

        by_language: dict[str, int] = {}
        manual_overrides = 0
        for entry in entries:
            by_language[entry.target_language] = by_language.get(entry.target_language, 0) + 1
            if entry.is_manual_override:
                manual_overrides += 1
        return CacheStats(
            total_entries=len(entries),
            by_language=by_language,
            manual_overrides=manual_overrides,
        )

    def _delete_matching(self, predicate: Callable[[CacheEntry], bool]) -> int:
        """Remove entries matching a predicate in one locked pass."""

        with self._lock:
            doomed = [key for key, entry in self._entries.items() if predicate(entry)]
            for key in doomed:
                del self._entries[key]
            return len(doomed)

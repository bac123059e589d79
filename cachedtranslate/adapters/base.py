"""Cache store interface consumed by the cache protocol.

Responsibilities:
- Define the exact operation set every cache store adapter implements.
- Document the consistency contract the core relies on.

Contract:
- `set` is an upsert keyed by `CacheEntryDraft.id`; stores set `created_at`
  on insert, keep it on update, and refresh `updated_at` and `last_used_at`.
- `get` reflects the latest completed `set` for the same key within the
  adapter's consistency model.
- All operations are safe to call concurrently for distinct keys.
"""

from __future__ import annotations

from ..models.datatypes import CacheEntry, CacheEntryDraft, CacheStats


class CacheStore:
    """Interface for durable or in-memory cache entry storage."""

    def get(self, entry_id: str) -> CacheEntry | None:
        """Return the entry stored under `entry_id`, or `None` when missing."""

        raise NotImplementedError

    def set(self, draft: CacheEntryDraft) -> None:
        """Insert or update one entry and refresh its timestamps."""

        raise NotImplementedError

    def touch(self, entry_id: str) -> None:
        """Refresh `last_used_at` for an existing entry; missing keys are ignored."""

        raise NotImplementedError

    def delete(self, entry_id: str) -> None:
        """Delete one entry; missing keys are ignored."""

        raise NotImplementedError

    def delete_by_resource(self, resource_type: str, resource_id: str) -> int:
        """Delete every entry of one resource and return the removed count."""

        raise NotImplementedError

    def delete_by_language(self, target_language: str) -> int:
        """Delete every entry of one target language and return the removed count."""

        raise NotImplementedError

    def delete_all(self) -> int:
        """Delete every entry and return the removed count."""

        raise NotImplementedError

    def get_stats(self) -> CacheStats:
        """Return entry totals, per-language counts, and manual override count."""

        raise NotImplementedError

    def close(self) -> None:
        """Release store resources; stores without any keep the default no-op."""

        return None

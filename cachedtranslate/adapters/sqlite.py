"""SQLite-backed cache store.

Responsibilities:
- Persist cache entries in a single `translation_cache` table.
- Implement atomic upserts that keep `created_at` and refresh the other
  timestamps.
- Report accurate row counts for bulk invalidation.

The store holds one connection shared across threads and serializes access
with a lock, so every operation observes the latest completed write.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
import sqlite3
from threading import Lock
from typing import Callable

from ..models.datatypes import CacheEntry, CacheEntryDraft, CacheStats
from .base import CacheStore
from .memory import utc_now


_SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS translation_cache (
        id TEXT PRIMARY KEY,
        source_text TEXT NOT NULL,
        source_language TEXT NOT NULL,
        target_language TEXT NOT NULL,
        translated_text TEXT NOT NULL,
        resource_type TEXT,
        resource_id TEXT,
        field TEXT,
        is_manual_override INTEGER NOT NULL DEFAULT 0,
        provider TEXT NOT NULL,
        model TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        last_used_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS tc_target_lang_idx ON translation_cache (target_language)",
    """
    CREATE INDEX IF NOT EXISTS tc_resource_idx
    ON translation_cache (resource_type, resource_id, field)
    """,
    "CREATE INDEX IF NOT EXISTS tc_manual_idx ON translation_cache (is_manual_override)",
)

_UPSERT_SQL = """
INSERT INTO translation_cache (
    id, source_text, source_language, target_language, translated_text,
    resource_type, resource_id, field, is_manual_override, provider, model,
    created_at, updated_at, last_used_at
)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT(id) DO UPDATE SET
    source_text = excluded.source_text,
    source_language = excluded.source_language,
    target_language = excluded.target_language,
    translated_text = excluded.translated_text,
    resource_type = excluded.resource_type,
    resource_id = excluded.resource_id,
    field = excluded.field,
    is_manual_override = excluded.is_manual_override,
    provider = excluded.provider,
    model = excluded.model,
    updated_at = excluded.updated_at,
    last_used_at = excluded.last_used_at
"""

_SELECT_COLUMNS = (
    "id, source_text, source_language, target_language, translated_text, "
    "resource_type, resource_id, field, is_manual_override, provider, model, "
    "created_at, updated_at, last_used_at"
)


class SQLiteCacheStore(CacheStore):
    """Cache store persisted in a local SQLite database file."""

    def __init__(
        self,
        db_path: Path | str,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Open the database, creating parent directories and schema when missing."""

        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._clock = clock
        self._lock = Lock()
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._init_db()

    def get(self, entry_id: str) -> CacheEntry | None:
        """Load one entry by id."""

        with self._lock:
            row = self._conn.execute(
                f"SELECT {_SELECT_COLUMNS} FROM translation_cache WHERE id = ?",
                (entry_id,),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_entry(row)

    def set(self, draft: CacheEntryDraft) -> None:
        """Upsert one entry in a single statement."""

        timestamp = self._clock().isoformat()
        with self._lock, self._conn:
            self._conn.execute(
                _UPSERT_SQL,
                (
                    draft.id,
                    draft.source_text,
                    draft.source_language,
                    draft.target_language,
                    draft.translated_text,
                    draft.resource_type,
                    draft.resource_id,
                    draft.field,
                    1 if draft.is_manual_override else 0,
                    draft.provider,
                    draft.model,
                    timestamp,
                    timestamp,
                    timestamp,
                ),
            )

    def touch(self, entry_id: str) -> None:
        """Refresh `last_used_at` for an existing entry."""

        timestamp = self._clock().isoformat()
        with self._lock, self._conn:
            self._conn.execute(
                "UPDATE translation_cache SET last_used_at = ? WHERE id = ?",
                (timestamp, entry_id),
            )

    def delete(self, entry_id: str) -> None:
        """Delete one entry by id."""

        self._execute_delete("DELETE FROM translation_cache WHERE id = ?", (entry_id,))

    def delete_by_resource(self, resource_type: str, resource_id: str) -> int:
        """Delete every entry of one resource."""

        return self._execute_delete(
            "DELETE FROM translation_cache WHERE resource_type = ? AND resource_id = ?",
            (resource_type, resource_id),
        )

    def delete_by_language(self, target_language: str) -> int:
        """Delete every entry of one target language."""

        return self._execute_delete(
            "DELETE FROM translation_cache WHERE target_language = ?",
            (target_language,),
        )

    def delete_all(self) -> int:
        """Delete every entry."""

        return self._execute_delete("DELETE FROM translation_cache", ())

    def get_stats(self) -> CacheStats:
        """Aggregate totals with SQL grouping queries."""

        with self._lock:
            language_rows = self._conn.execute(
                "SELECT target_language, COUNT(*) FROM translation_cache "
                "GROUP BY target_language ORDER BY target_language"
            ).fetchall()
            manual_row = self._conn.execute(
                "SELECT COUNT(*) FROM translation_cache WHERE is_manual_override = 1"
            ).fetchone()

        by_language = {str(language): int(count) for language, count in language_rows}
        return CacheStats(
            total_entries=sum(by_language.values()),
            by_language=by_language,
            manual_overrides=int(manual_row[0]) if manual_row else 0,
        )

    def close(self) -> None:
        """Close the underlying database connection."""

        with self._lock:
            self._conn.close()

    def _init_db(self) -> None:
        """Create the cache table and indices when missing."""

        with self._lock, self._conn:
            for statement in _SCHEMA_STATEMENTS:
                self._conn.execute(statement)

    def _execute_delete(self, sql: str, params: tuple[str, ...]) -> int:
        """Run a delete statement in one transaction and return affected rows."""

        with self._lock, self._conn:
            cursor = self._conn.execute(sql, params)
            return max(cursor.rowcount, 0)

    @staticmethod
    def _row_to_entry(row: tuple) -> CacheEntry:
        """Convert a selected row into a `CacheEntry`."""

        return CacheEntry(
            id=row[0],
            source_text=row[1],
            source_language=row[2],
            target_language=row[3],
            translated_text=row[4],
            resource_type=row[5],
            resource_id=row[6],
            field=row[7],
            is_manual_override=bool(row[8]),
            provider=row[9],
            model=row[10],
            created_at=datetime.fromisoformat(row[11]),
            updated_at=datetime.fromisoformat(row[12]),
            last_used_at=datetime.fromisoformat(row[13]),
        )

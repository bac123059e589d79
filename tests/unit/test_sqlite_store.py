"""Unit tests for the SQLite cache store."""

from __future__ import annotations

from pathlib import Path
import sqlite3

from cachedtranslate.adapters.sqlite import SQLiteCacheStore
from cachedtranslate.models.datatypes import CacheEntryDraft


def _draft(entry_id: str = "hash:abc:he", **overrides: object) -> CacheEntryDraft:
    """Build a cache entry draft with test defaults."""

    values: dict[str, object] = {
        "id": entry_id,
        "source_text": "Hello",
        "source_language": "en",
        "target_language": "he",
        "translated_text": "שלום",
        "provider": "fake",
        "model": None,
    }
    values.update(overrides)
    return CacheEntryDraft(**values)  # type: ignore[arg-type]


def test_store_creates_schema_and_indices(tmp_path: Path, clock) -> None:  # type: ignore[no-untyped-def]
    """Opening a store should create the table and its three indices."""

    db_path = tmp_path / "nested" / "cache.sqlite3"
    store = SQLiteCacheStore(db_path, clock=clock)
    store.close()

    with sqlite3.connect(db_path) as conn:
        indices = {
            row[0]
            for row in conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'index' "
                "AND tbl_name = 'translation_cache'"
            )
        }
    assert {"tc_target_lang_idx", "tc_resource_idx", "tc_manual_idx"} <= indices


def test_upsert_roundtrip_preserves_created_at(clock) -> None:  # type: ignore[no-untyped-def]
    """Upserts should replace content while keeping the first creation timestamp."""

    store = SQLiteCacheStore(":memory:", clock=clock)
    store.set(_draft(translated_text="first"))
    first = store.get("hash:abc:he")
    store.set(_draft(translated_text="second", model="m-2"))
    second = store.get("hash:abc:he")

    assert first is not None and second is not None
    assert second.translated_text == "second"
    assert second.model == "m-2"
    assert second.created_at == first.created_at
    assert second.updated_at > first.updated_at
    assert store.get_stats().total_entries == 1
    store.close()


def test_entries_persist_across_store_instances(tmp_path: Path, clock) -> None:  # type: ignore[no-untyped-def]
    """Entries written by one store should be readable by a new store on the same file."""

    db_path = tmp_path / "cache.sqlite3"
    writer = SQLiteCacheStore(db_path, clock=clock)
    writer.set(
        _draft(
            "res:property:1:title:he",
            resource_type="property",
            resource_id="1",
            field="title",
            is_manual_override=True,
        )
    )
    writer.close()

    reader = SQLiteCacheStore(db_path, clock=clock)
    entry = reader.get("res:property:1:title:he")
    reader.close()

    assert entry is not None
    assert entry.is_manual_override is True
    assert entry.resource_type == "property"
    assert entry.model is None


def test_touch_and_bulk_deletes(clock) -> None:  # type: ignore[no-untyped-def]
    """Touch should refresh `last_used_at`; deletes should report row counts."""

    store = SQLiteCacheStore(":memory:", clock=clock)
    store.set(_draft("res:p:1:title:he", resource_type="p", resource_id="1", field="title"))
    store.set(_draft("res:p:1:body:he", resource_type="p", resource_id="1", field="body"))
    store.set(_draft("hash:x:es", target_language="es"))
    before = store.get("hash:x:es")
    store.touch("hash:x:es")
    after = store.get("hash:x:es")

    assert before is not None and after is not None
    assert after.last_used_at > before.last_used_at
    assert dict(store.get_stats().by_language) == {"es": 1, "he": 2}
    assert store.delete_by_resource("p", "1") == 2
    assert store.delete_by_language("es") == 1
    assert store.delete_all() == 0
    store.delete("missing")
    store.close()

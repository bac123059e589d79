"""Unit tests for the in-memory cache store."""

from __future__ import annotations

from cachedtranslate.adapters.memory import MemoryCacheStore
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
        "model": "fake-model",
    }
    values.update(overrides)
    return CacheEntryDraft(**values)  # type: ignore[arg-type]


def test_set_then_get_returns_stamped_entry(memory_store: MemoryCacheStore) -> None:
    """A stored draft should be readable with all three timestamps set."""

    memory_store.set(_draft())
    entry = memory_store.get("hash:abc:he")

    assert entry is not None
    assert entry.translated_text == "שלום"
    assert entry.created_at <= entry.updated_at
    assert entry.updated_at == entry.last_used_at
    assert memory_store.get("missing") is None


def test_upsert_keeps_created_at_and_advances_updated_at(memory_store: MemoryCacheStore) -> None:
    """Writing the same key twice should keep one entry with the original creation time."""

    memory_store.set(_draft(translated_text="first"))
    first = memory_store.get("hash:abc:he")
    memory_store.set(_draft(translated_text="second"))
    second = memory_store.get("hash:abc:he")

    assert first is not None and second is not None
    assert second.translated_text == "second"
    assert second.created_at == first.created_at
    assert second.updated_at > first.updated_at
    assert memory_store.get_stats().total_entries == 1


def test_touch_refreshes_last_used_only(memory_store: MemoryCacheStore) -> None:
    """Touch should move `last_used_at` forward and leave content untouched."""

    memory_store.set(_draft())
    before = memory_store.get("hash:abc:he")
    memory_store.touch("hash:abc:he")
    memory_store.touch("missing")
    after = memory_store.get("hash:abc:he")

    assert before is not None and after is not None
    assert after.last_used_at > before.last_used_at
    assert after.updated_at == before.updated_at
    assert after.translated_text == before.translated_text


def test_bulk_deletes_report_removed_counts(memory_store: MemoryCacheStore) -> None:
    """Resource, language, and full deletes should return accurate counts."""

    memory_store.set(
        _draft("res:property:1:title:he", resource_type="property", resource_id="1", field="title")
    )
    memory_store.set(
        _draft("res:property:1:body:he", resource_type="property", resource_id="1", field="body")
    )
    memory_store.set(_draft("hash:abc:es", target_language="es"))
    memory_store.set(_draft("hash:def:he"))

    assert memory_store.delete_by_resource("property", "1") == 2
    assert memory_store.delete_by_resource("property", "1") == 0
    assert memory_store.delete_by_language("es") == 1
    assert memory_store.delete_all() == 1
    assert memory_store.get_stats().total_entries == 0


def test_stats_group_by_language_and_count_overrides(memory_store: MemoryCacheStore) -> None:
    """Stats should aggregate per target language and manual override flag."""

    memory_store.set(_draft("hash:a:he"))
    memory_store.set(_draft("hash:b:es", target_language="es"))
    memory_store.set(
        _draft(
            "res:property:1:title:he",
            resource_type="property",
            resource_id="1",
            field="title",
            is_manual_override=True,
        )
    )

    stats = memory_store.get_stats()

    assert stats.total_entries == 3
    assert dict(stats.by_language) == {"he": 2, "es": 1}
    assert stats.manual_overrides == 1


def test_delete_missing_entry_is_noop(memory_store: MemoryCacheStore) -> None:
    """Deleting an unknown key should not raise."""

    memory_store.delete("missing")
    assert memory_store.get_stats().total_entries == 0

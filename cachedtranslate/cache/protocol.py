"""Cache lookup and write protocol layered over a cache store.

Responsibilities:
- Resolve requests with resource-key priority and content-hash fallback.
- Build and persist cache entries under the correct key scheme.
- Maintain manual overrides and scoped invalidation.

Lookups refresh `last_used_at` through detached touches; detached writes
never fail the caller and report failures through the task runner.
"""

from __future__ import annotations

from ..adapters.base import CacheStore
from ..background import DetachedTaskRunner
from ..errors import CacheWriteFailure, InvalidParamsError
from ..models.datatypes import (
    CacheEntry,
    CacheEntryDraft,
    CacheLookup,
    CacheStats,
    InvalidationScope,
    ManualOverride,
    ResourceField,
)
from .keys import cache_key_for, has_resource_info, hash_key, resource_key


MANUAL_SOURCE_LANGUAGE = "manual"
MANUAL_PROVIDER = "manual"


class CacheProtocol:
    """Two-tier cache protocol over one `CacheStore`."""

    def __init__(self, store: CacheStore, tasks: DetachedTaskRunner) -> None:
        """Bind the protocol to a store and a detached task runner."""

        self.store = store
        self.tasks = tasks

    def lookup(
        self,
        text: str,
        to: str,
        resource_type: str | None = None,
        resource_id: str | None = None,
        field: str | None = None,
    ) -> CacheLookup | None:
        """Return the best cache hit for a request, or `None` on a miss.

        Resource keys are consulted first; the hash key is the fallback. Hash
        hits never report a manual override. A failed resource read is
        reported and counts as a resource miss; a failed hash read raises
        `CacheWriteFailure`.
        """

        if has_resource_info(resource_type, resource_id, field):
            key = resource_key(str(resource_type), str(resource_id), str(field), to)
            try:
                entry = self._get(key)
            except CacheWriteFailure as failure:
                self.tasks.report(failure)
                entry = None
            if entry is not None:
                self._touch_detached(key)
                return CacheLookup(
                    translated_text=entry.translated_text,
                    source_language=entry.source_language,
                    is_manual_override=entry.is_manual_override,
                )

        key = hash_key(text, to)
        entry = self._get(key)
        if entry is None:
            return None
        self._touch_detached(key)
        return CacheLookup(
            translated_text=entry.translated_text,
            source_language=entry.source_language,
            is_manual_override=False,
        )

    @staticmethod
    def build_draft(
        *,
        source_text: str,
        source_language: str,
        target_language: str,
        translated_text: str,
        provider: str,
        model: str | None = None,
        resource_type: str | None = None,
        resource_id: str | None = None,
        field: str | None = None,
        is_manual_override: bool = False,
    ) -> CacheEntryDraft:
        """Build a draft under the resource key when possible, else the hash key."""

        with_resource = has_resource_info(resource_type, resource_id, field)
        return CacheEntryDraft(
            id=cache_key_for(source_text, target_language, resource_type, resource_id, field),
            source_text=source_text,
            source_language=source_language,
            target_language=target_language,
            translated_text=translated_text,
            provider=provider,
            model=model,
            resource_type=resource_type if with_resource else None,
            resource_id=resource_id if with_resource else None,
            field=field if with_resource else None,
            is_manual_override=is_manual_override and with_resource,
        )

    def write(self, draft: CacheEntryDraft) -> None:
        """Upsert a draft, raising `CacheWriteFailure` when the store fails."""

        try:
            self.store.set(draft)
        except Exception as exc:
            raise CacheWriteFailure(
                f"Cache `set` failed for key `{draft.id}`: {exc}",
                operation="set",
                key=draft.id,
            ) from exc

    def write_detached(self, draft: CacheEntryDraft) -> None:
        """Schedule a write without waiting for it to complete."""

        self.tasks.submit("set", draft.id, self.write, draft)

    def set_manual_override(self, override: ManualOverride) -> None:
        """Pin a human translation to one resource field."""

        self._require_resource_info(
            override.resource_type,
            override.resource_id,
            override.field,
            operation="set_manual_override",
        )
        self.write(
            CacheEntryDraft(
                id=resource_key(
                    override.resource_type,
                    override.resource_id,
                    override.field,
                    override.to,
                ),
                source_text=override.text,
                source_language=MANUAL_SOURCE_LANGUAGE,
                target_language=override.to,
                translated_text=override.translated_text,
                provider=MANUAL_PROVIDER,
                model=None,
                resource_type=override.resource_type,
                resource_id=override.resource_id,
                field=override.field,
                is_manual_override=True,
            )
        )

    def clear_manual_override(self, resource: ResourceField) -> None:
        """Delete the resource entry of one field; missing entries are a no-op."""

        self._require_resource_info(
            resource.resource_type,
            resource.resource_id,
            resource.field,
            operation="clear_manual_override",
        )
        key = resource_key(resource.resource_type, resource.resource_id, resource.field, resource.to)
        try:
            self.store.delete(key)
        except Exception as exc:
            raise CacheWriteFailure(
                f"Cache `delete` failed for key `{key}`: {exc}",
                operation="delete",
                key=key,
            ) from exc

    def invalidate(self, scope: InvalidationScope) -> int:
        """Delete entries within a scope and return the removed count."""

        if scope.kind == "resource":
            if not scope.resource_type or not scope.resource_id:
                raise InvalidParamsError(
                    "Resource invalidation requires `resource_type` and `resource_id`."
                )
            return self.store.delete_by_resource(scope.resource_type, scope.resource_id)
        if scope.kind == "language":
            if not scope.language:
                raise InvalidParamsError("Language invalidation requires `language`.")
            return self.store.delete_by_language(scope.language)
        if scope.kind == "all":
            return self.store.delete_all()
        raise InvalidParamsError(
            f"Unsupported invalidation scope `{scope.kind}`; "
            "expected `resource`, `language`, or `all`."
        )

    def stats(self) -> CacheStats:
        """Return store statistics."""

        return self.store.get_stats()

    def _get(self, key: str) -> CacheEntry | None:
        """Read one entry, mapping store failures to `CacheWriteFailure`."""

        try:
            return self.store.get(key)
        except Exception as exc:
            raise CacheWriteFailure(
                f"Cache `get` failed for key `{key}`: {exc}",
                operation="get",
                key=key,
            ) from exc

    def _touch_detached(self, key: str) -> None:
        """Refresh `last_used_at` in the background."""

        self.tasks.submit("touch", key, self.store.touch, key)

    @staticmethod
    def _require_resource_info(
        resource_type: str | None,
        resource_id: str | None,
        field: str | None,
        *,
        operation: str,
    ) -> None:
        """Reject override operations without complete resource info."""

        if has_resource_info(resource_type, resource_id, field):
            return
        raise InvalidParamsError(
            f"`{operation}` requires non-empty `resource_type`, `resource_id`, and `field`.",
            hint="Manual overrides are always stored per resource field.",
        )

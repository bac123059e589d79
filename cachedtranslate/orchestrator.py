"""Translation orchestration over the cache protocol and request coalescing.

Responsibilities:
- Serve single-text and batch translation requests from cache or provider.
- Coalesce concurrent cache misses for the same cache key into one provider call.
- Schedule cache writes without blocking results and report cache failures.
- Expose manual overrides, detection, invalidation, and statistics.

Key public API:
- `TranslationOrchestrator`: the application-facing translator.
- `create_translator`: build an orchestrator from `TranslateConfig`.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import sys
from time import perf_counter
from typing import Any, Callable, Mapping, Sequence

from .adapters.base import CacheStore
from .background import CacheErrorObserver, DetachedTaskRunner
from .cache.keys import cache_key_for
from .cache.protocol import CacheProtocol
from .coalescing import RequestCoalescer
from .config import TranslateConfig
from .errors import CacheWriteFailure, InvalidParamsError, ProviderFailure
from .models.datatypes import (
    BatchRequest,
    CacheLookup,
    CacheStats,
    InvalidationScope,
    LanguageDetection,
    ManualOverride,
    ResourceField,
    TranslateRequest,
    TranslateResult,
)
from .provider_factory import ProviderFactory
from .providers.base import TranslationProvider, is_rtl
from .telemetry.logger import EventLogger
from .telemetry.metrics import AnalyticsEvent, TranslationMetrics


EventObserver = Callable[[AnalyticsEvent], None]


class TranslationOrchestrator:
    """Cache-first translator with per-key provider call coalescing."""

    def __init__(
        self,
        store: CacheStore,
        provider: TranslationProvider,
        *,
        coalescer: RequestCoalescer[TranslateResult] | None = None,
        tasks: DetachedTaskRunner | None = None,
        on_cache_error: CacheErrorObserver | None = None,
        on_event: EventObserver | None = None,
        logger: EventLogger | None = None,
        languages: Sequence[str] = (),
        default_language: str = "en",
        batch_workers: int = 4,
        write_workers: int = 2,
        owns_store: bool = False,
    ) -> None:
        """Wire the store, provider, coalescer, and detached task runner."""

        if batch_workers <= 0:
            raise ValueError("`batch_workers` must be a positive integer.")
        self.provider = provider
        self.logger = logger or EventLogger()
        self.metrics = TranslationMetrics()
        self.tasks = tasks or DetachedTaskRunner(
            max_workers=write_workers,
            on_error=on_cache_error,
            logger=self.logger,
            on_failure_counted=lambda: self.metrics.increment("write_failures"),
        )
        self.cache = CacheProtocol(store, self.tasks)
        self._owns_store = owns_store
        self.coalescer: RequestCoalescer[TranslateResult] = coalescer or RequestCoalescer()
        self.default_language = default_language
        self.batch_workers = batch_workers
        self._languages = tuple(languages)
        self._on_event = on_event

    @property
    def languages(self) -> tuple[str, ...]:
        """Return the configured target language allow-list (empty means any)."""

        return self._languages

    def translate_one(self, request: TranslateRequest) -> TranslateResult:
        """Translate one text through cache, coalescer, and provider."""

        started_at = perf_counter()
        text, to = request.text, request.to
        self._require_language(to)

        if not text.strip():
            self.logger.passthrough("blank_text", to)
            return TranslateResult(
                text=text,
                source_language=request.source_language or self.default_language,
                to=to,
                cached=True,
            )

        if request.source_language and request.source_language == to:
            self.logger.passthrough("same_language", to)
            return TranslateResult(text=text, source_language=to, to=to, cached=True)

        key = cache_key_for(text, to, request.resource_type, request.resource_id, request.field)
        hit = self._lookup(request)
        if hit is not None:
            self.metrics.increment("cache_hits")
            self.logger.cache_hit(key, to, hit.is_manual_override)
            if hit.source_language == to:
                return TranslateResult(
                    text=text,
                    source_language=hit.source_language,
                    to=to,
                    cached=True,
                )
            self._emit(
                self._event(
                    "cache_hit",
                    request,
                    started_at,
                    source_language=hit.source_language,
                    translated_text=hit.translated_text,
                    cached=True,
                )
            )
            return TranslateResult(
                text=hit.translated_text,
                source_language=hit.source_language,
                to=to,
                cached=True,
                is_manual_override=hit.is_manual_override,
            )

        self.metrics.increment("cache_misses")
        self.logger.cache_miss(key, to)
        owned: list[bool] = []

        def _start() -> TranslateResult:
            owned.append(True)
            return self._translate_and_store(request, key, started_at)

        result = self.coalescer.acquire_or_join(key, _start)
        if not owned:
            self.metrics.increment("coalesced_waits")
            self.logger.coalesced(key)
        return result

    def translate_batch(self, request: BatchRequest) -> list[TranslateResult]:
        """Translate many texts, running the single-text path once per distinct text."""

        if not request.texts:
            return []
        self._require_language(request.to)

        distinct = list(dict.fromkeys(request.texts))
        results = self._run_concurrently(
            [
                TranslateRequest(
                    text=text,
                    to=request.to,
                    source_language=request.source_language,
                    context=request.context,
                )
                for text in distinct
            ]
        )
        by_text = dict(zip(distinct, results))
        return [by_text[text] for text in request.texts]

    def translate_object(
        self,
        item: Mapping[str, Any],
        fields: Sequence[str],
        to: str,
        *,
        source_language: str | None = None,
        context: str | None = None,
        resource_type: str | None = None,
        resource_id_field: str | None = None,
    ) -> dict[str, Any]:
        """Return a copy of `item` with the named string fields translated."""

        return self.translate_objects(
            [item],
            fields,
            to,
            source_language=source_language,
            context=context,
            resource_type=resource_type,
            resource_id_field=resource_id_field,
        )[0]

    def translate_objects(
        self,
        items: Sequence[Mapping[str, Any]],
        fields: Sequence[str],
        to: str,
        *,
        source_language: str | None = None,
        context: str | None = None,
        resource_type: str | None = None,
        resource_id_field: str | None = None,
    ) -> list[dict[str, Any]]:
        """Translate string fields across mappings.

        When `resource_type` and `resource_id_field` are given, each field is
        cached under its own resource key so manual overrides apply per field.
        Otherwise all field values go through the batch path. Blank and
        non-string values are left unchanged.
        """

        slots: list[tuple[int, str, str, str | None]] = []
        for index, item in enumerate(items):
            raw_id = item.get(resource_id_field) if resource_id_field is not None else None
            resource_id = str(raw_id) if raw_id is not None else None
            for name in fields:
                value = item.get(name)
                if isinstance(value, str) and value.strip():
                    slots.append((index, name, value, resource_id))

        translated = [dict(item) for item in items]
        if not slots:
            return translated

        if resource_type and resource_id_field:
            results = self._run_concurrently(
                [
                    TranslateRequest(
                        text=value,
                        to=to,
                        source_language=source_language,
                        context=context,
                        resource_type=resource_type,
                        resource_id=resource_id,
                        field=name,
                    )
                    for _, name, value, resource_id in slots
                ]
            )
        else:
            results = self.translate_batch(
                BatchRequest(
                    texts=[value for _, _, value, _ in slots],
                    to=to,
                    source_language=source_language,
                    context=context,
                )
            )

        for (index, name, _, _), result in zip(slots, results):
            translated[index][name] = result.text
        return translated

    def set_manual_override(self, override: ManualOverride) -> None:
        """Pin a human translation to one resource field."""

        self._require_language(override.to)
        self.cache.set_manual_override(override)

    def clear_manual_override(self, resource: ResourceField) -> None:
        """Remove a manual override; clearing a missing override is a no-op."""

        self.cache.clear_manual_override(resource)

    def detect_language(self, text: str) -> LanguageDetection:
        """Detect the language of text through the provider."""

        started_at = perf_counter()
        try:
            detection = self.provider.detect_language(text)
        except Exception as exc:
            failure = self._as_provider_failure(exc, "language detection")
            self.logger.provider_failure("detect", self.provider.provider_id, type(exc).__name__)
            self._emit(
                AnalyticsEvent(
                    type="error",
                    text=text,
                    duration_ms=self._elapsed_ms(started_at),
                    provider=self.provider.provider_id,
                    model=self.provider.model,
                    error=str(failure),
                )
            )
            if failure is exc:
                raise
            raise failure from exc

        self._emit(
            AnalyticsEvent(
                type="detection",
                text=text,
                source_language=detection.language,
                duration_ms=self._elapsed_ms(started_at),
                provider=self.provider.provider_id,
                model=self.provider.model,
            )
        )
        return detection

    def invalidate(self, scope: InvalidationScope) -> int:
        """Delete cache entries within a scope and return the removed count."""

        return self.cache.invalidate(scope)

    def clear_cache(self, language: str | None = None) -> int:
        """Delete entries for one target language, or every entry."""

        if language:
            return self.invalidate(InvalidationScope.for_language(language))
        return self.invalidate(InvalidationScope.everything())

    def clear_resource_cache(self, resource_type: str, resource_id: str) -> int:
        """Delete every entry of one resource."""

        return self.invalidate(InvalidationScope.for_resource(resource_type, resource_id))

    def get_stats(self) -> CacheStats:
        """Return cache store statistics."""

        return self.cache.stats()

    @staticmethod
    def is_rtl(language: str) -> bool:
        """Return whether a language is written right-to-left."""

        return is_rtl(language)

    def flush(self, timeout: float | None = None) -> None:
        """Wait for pending detached cache writes and touches."""

        self.tasks.flush(timeout=timeout)

    def close(self) -> None:
        """Stop background workers after flushing, then close an owned store."""

        self.tasks.close()
        if self._owns_store:
            self.cache.store.close()

    def __enter__(self) -> TranslationOrchestrator:
        """Return self for `with` blocks."""

        return self

    def __exit__(self, *_exc_info: object) -> None:
        """Close background workers when leaving a `with` block."""

        self.close()

    def _lookup(self, request: TranslateRequest) -> CacheLookup | None:
        """Look up a request, treating cache read failures as misses."""

        try:
            return self.cache.lookup(
                request.text,
                request.to,
                request.resource_type,
                request.resource_id,
                request.field,
            )
        except CacheWriteFailure as failure:
            self.tasks.report(failure)
            return None

    def _translate_and_store(
        self,
        request: TranslateRequest,
        key: str,
        started_at: float,
    ) -> TranslateResult:
        """Call the provider once for a key and schedule the cache write."""

        provider_id = self.provider.provider_id
        self.metrics.increment("provider_calls")
        self.logger.provider_call(key, provider_id, self.provider.model, request.to)
        try:
            translation = self.provider.translate(
                request.text,
                request.to,
                source_language=request.source_language,
                context=request.context,
            )
        except Exception as exc:
            failure = self._as_provider_failure(exc, "translation")
            self.logger.provider_failure(key, provider_id, type(exc).__name__)
            self._emit(self._event("error", request, started_at, error=str(failure)))
            if failure is exc:
                raise
            raise failure from exc

        if translation.source_language != request.to:
            self.cache.write_detached(
                self.cache.build_draft(
                    source_text=request.text,
                    source_language=translation.source_language,
                    target_language=request.to,
                    translated_text=translation.text,
                    provider=provider_id,
                    model=self.provider.model,
                    resource_type=request.resource_type,
                    resource_id=request.resource_id,
                    field=request.field,
                )
            )

        self._emit(
            self._event(
                "translation",
                request,
                started_at,
                source_language=translation.source_language,
                translated_text=translation.text,
            )
        )
        return TranslateResult(
            text=translation.text,
            source_language=translation.source_language,
            to=request.to,
            cached=False,
        )

    def _run_concurrently(self, requests: list[TranslateRequest]) -> list[TranslateResult]:
        """Run single-text requests on a bounded thread pool, preserving order."""

        if len(requests) <= 1 or self.batch_workers == 1:
            return [self.translate_one(request) for request in requests]
        workers = min(self.batch_workers, len(requests))
        with ThreadPoolExecutor(
            max_workers=workers,
            thread_name_prefix="cachedtranslate-batch",
        ) as pool:
            return list(pool.map(self.translate_one, requests))

    def _require_language(self, language: str) -> None:
        """Reject target languages outside the configured allow-list."""

        if not language or not language.strip():
            raise InvalidParamsError("Target language `to` must be a non-empty string.")
        if self._languages and language not in self._languages:
            allowed = ", ".join(self._languages)
            raise InvalidParamsError(
                f"Target language `{language}` is not enabled; enabled: {allowed}."
            )

    def _as_provider_failure(self, exc: Exception, operation: str) -> ProviderFailure:
        """Return `exc` when it is a provider failure, else wrap it as one."""

        if isinstance(exc, ProviderFailure):
            return exc
        return ProviderFailure(
            f"Provider `{self.provider.provider_id}` {operation} failed: {exc}",
            failure_kind="provider_error",
        )

    def _event(
        self,
        event_type: str,
        request: TranslateRequest,
        started_at: float,
        **fields: Any,
    ) -> AnalyticsEvent:
        """Build an analytics event for one translation request."""

        return AnalyticsEvent(
            type=event_type,
            text=request.text,
            to=request.to,
            duration_ms=self._elapsed_ms(started_at),
            provider=fields.pop("provider", self.provider.provider_id),
            model=fields.pop("model", self.provider.model),
            resource_type=request.resource_type,
            resource_id=request.resource_id,
            field=request.field,
            **fields,
        )

    def _emit(self, event: AnalyticsEvent) -> None:
        """Deliver an analytics event; observer errors never fail the request."""

        if self._on_event is None:
            return
        try:
            self._on_event(event)
        except Exception as exc:
            self.logger.observer_failure("on_event", type(exc).__name__)

    @staticmethod
    def _elapsed_ms(started_at: float) -> float:
        """Return elapsed milliseconds since `started_at`."""

        return (perf_counter() - started_at) * 1000.0


def create_translator(
    config: TranslateConfig,
    *,
    store: CacheStore | None = None,
    provider: TranslationProvider | None = None,
    on_cache_error: CacheErrorObserver | None = None,
    on_event: EventObserver | None = None,
) -> TranslationOrchestrator:
    """Build a ready orchestrator from configuration and optional collaborators."""

    config.validate()
    logger = EventLogger(sink=sys.stderr, level="DEBUG") if config.verbose else EventLogger()
    if provider is None:
        runtime = config.resolved_provider_runtime()
        provider = ProviderFactory.create_provider(
            runtime.provider,
            runtime.model,
            api_key=runtime.api_key,
            temperature=config.temperature,
        )
    owns_store = store is None
    if store is None:
        store = ProviderFactory.create_cache_store(config.cache_backend, config.cache_path)
    return TranslationOrchestrator(
        store,
        provider,
        on_cache_error=on_cache_error,
        on_event=on_event,
        logger=logger,
        languages=config.languages,
        default_language=config.default_language,
        batch_workers=config.batch_workers,
        write_workers=config.write_workers,
        owns_store=owns_store,
    )

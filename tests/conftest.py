"""Shared pytest fixtures for the cachedtranslate test suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import threading
from typing import Callable, Iterator

from loguru import logger
import pytest

from cachedtranslate.adapters.memory import MemoryCacheStore
from cachedtranslate.models.datatypes import LanguageDetection, ProviderTranslation
from cachedtranslate.orchestrator import TranslationOrchestrator


class FakeProvider:
    """Provider double that counts calls and can block on a gate or fail."""

    def __init__(
        self,
        *,
        source_language: str = "en",
        failure: Exception | None = None,
        gate: threading.Event | None = None,
        provider_id: str = "fake",
        model: str | None = "fake-model",
    ) -> None:
        """Initialize deterministic provider behavior."""

        self.provider_id = provider_id
        self.model = model
        self.source_language = source_language
        self.failure = failure
        self.gate = gate
        self.calls: list[tuple[str, str, str | None]] = []
        self.detect_calls: list[str] = []
        self._lock = threading.Lock()

    @property
    def call_count(self) -> int:
        """Return how many translation calls were made."""

        with self._lock:
            return len(self.calls)

    def translate(
        self,
        text: str,
        to: str,
        source_language: str | None = None,
        context: str | None = None,
    ) -> ProviderTranslation:
        """Record the call, optionally wait on the gate, then translate or fail."""

        with self._lock:
            self.calls.append((text, to, source_language))
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.failure is not None:
            raise self.failure
        return ProviderTranslation(
            text=f"[{to}] {text}",
            source_language=source_language or self.source_language,
        )

    def detect_language(self, text: str) -> LanguageDetection:
        """Record the call and return the configured source language."""

        self.detect_calls.append(text)
        if self.failure is not None:
            raise self.failure
        return LanguageDetection(language=self.source_language, confidence=0.9)


class SteppingClock:
    """Clock double returning strictly increasing UTC timestamps."""

    def __init__(self, step: timedelta = timedelta(seconds=1)) -> None:
        """Start at a fixed instant and advance by `step` on every call."""

        self.current = datetime(2026, 1, 1, tzinfo=timezone.utc)
        self.step = step
        self._lock = threading.Lock()

    def __call__(self) -> datetime:
        """Return the next timestamp."""

        with self._lock:
            value = self.current
            self.current += self.step
            return value


@pytest.fixture(autouse=True)
def _reset_loguru_sinks() -> Iterator[None]:
    """Drop sinks added by verbose loggers and disable package logs again."""

    yield
    logger.remove()
    logger.disable("cachedtranslate")


@pytest.fixture
def make_provider() -> Callable[..., FakeProvider]:
    """Provide a factory for configurable provider doubles."""

    return FakeProvider


@pytest.fixture
def fake_provider() -> FakeProvider:
    """Provide a provider double detecting English sources."""

    return FakeProvider()


@pytest.fixture
def clock() -> SteppingClock:
    """Provide a deterministic stepping clock."""

    return SteppingClock()


@pytest.fixture
def memory_store(clock: SteppingClock) -> MemoryCacheStore:
    """Provide an empty in-memory store driven by the stepping clock."""

    return MemoryCacheStore(clock=clock)


@pytest.fixture
def make_translator() -> Iterator[Callable[..., TranslationOrchestrator]]:
    """Provide an orchestrator factory that closes every instance at teardown."""

    created: list[TranslationOrchestrator] = []

    def _make(store, provider, **kwargs) -> TranslationOrchestrator:  # type: ignore[no-untyped-def]
        """Build and track one orchestrator."""

        translator = TranslationOrchestrator(store, provider, **kwargs)
        created.append(translator)
        return translator

    yield _make
    for translator in created:
        translator.close()


@pytest.fixture
def translator(
    make_translator: Callable[..., TranslationOrchestrator],
    memory_store: MemoryCacheStore,
    fake_provider: FakeProvider,
) -> TranslationOrchestrator:
    """Provide an orchestrator over the memory store and provider double."""

    return make_translator(memory_store, fake_provider)

"""Unit tests for event logging and translation counters."""

from __future__ import annotations

import io

import pytest

from cachedtranslate.telemetry.logger import EventLogger
from cachedtranslate.telemetry.metrics import TranslationMetrics


def test_event_logger_emits_sorted_sanitized_context() -> None:
    """Event lines should be deterministic and skip unset context values."""

    sink = io.StringIO()
    logger = EventLogger(sink=sink, level="DEBUG")

    logger.provider_call("hash:abc:he", "openai", None, "he")
    logger.cache_hit("res:property:1:title:he", "he", True)

    lines = sink.getvalue().splitlines()
    assert lines[0] == (
        "[translate] level=INFO event=provider_call key=hash:abc:he provider=openai to=he"
    )
    assert lines[1] == (
        "[translate] level=DEBUG event=cache_hit key=res:property:1:title:he manual=True to=he"
    )


def test_event_logger_respects_level() -> None:
    """Events below the sink level should be filtered."""

    sink = io.StringIO()
    logger = EventLogger(sink=sink, level="INFO")

    logger.cache_miss("hash:abc:he", "he")
    logger.provider_failure("hash:abc:he", "openai", "OpenAIProviderError")

    output = sink.getvalue()
    assert "cache_miss" not in output
    assert "event=provider_failure" in output
    assert "error_type=OpenAIProviderError" in output


def test_metrics_counters_and_summary() -> None:
    """Counters should accumulate and report a hit rate."""

    metrics = TranslationMetrics()
    assert metrics.hit_rate() == 0.0

    metrics.increment("cache_hits", 3)
    metrics.increment("cache_misses")
    metrics.increment("provider_calls")

    summary = metrics.summary()
    assert summary["cache_hits"] == 3
    assert summary["provider_calls"] == 1
    assert summary["cache_hit_rate"] == pytest.approx(0.75)

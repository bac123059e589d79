"""Structured event logging utilities.

Responsibilities:
- Emit concise, deterministic single-line events for cache and provider activity.
- Keep source and translated text out of log lines; only keys, languages,
  and error types are logged.
"""

from __future__ import annotations

from typing import TextIO

from loguru import logger as _loguru_logger


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/", "%"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
        if context[key] is not None
    ]
    if not tokens:
        return ""
    return " " + " ".join(tokens)


class EventLogger:
    """Emit deterministic translation events through loguru."""

    def __init__(self, sink: TextIO | None = None, level: str = "INFO") -> None:
        """Initialize the logger.

        The package is disabled in loguru on import; passing a sink enables it
        and replaces the installed loguru sinks.
        """

        self._logger = _loguru_logger.bind(component="cachedtranslate")
        if sink is not None:
            _loguru_logger.enable("cachedtranslate")
            _loguru_logger.remove()
            _loguru_logger.add(sink, format="{message}", level=level, colorize=False)

    def _emit(self, level: str, event: str, **context: object) -> None:
        """Emit one structured event line."""

        line = f"[translate] level={level} event={event}{_format_context(context)}"
        self._logger.log(level, line)

    def cache_hit(self, key: str, to: str, manual: bool) -> None:
        """Record a cache hit."""

        self._emit("DEBUG", "cache_hit", key=key, to=to, manual=manual)

    def cache_miss(self, key: str, to: str) -> None:
        """Record a cache miss."""

        self._emit("DEBUG", "cache_miss", key=key, to=to)

    def passthrough(self, reason: str, to: str) -> None:
        """Record a request answered without cache or provider access."""

        self._emit("DEBUG", "passthrough", reason=reason, to=to)

    def coalesced(self, key: str) -> None:
        """Record a caller joining an in-flight provider call."""

        self._emit("DEBUG", "coalesced", key=key)

    def provider_call(self, key: str, provider: str, model: str | None, to: str) -> None:
        """Record the start of a provider translation call."""

        self._emit("INFO", "provider_call", key=key, provider=provider, model=model, to=to)

    def provider_failure(self, key: str, provider: str, error_type: str) -> None:
        """Record a provider failure without sensitive payload details."""

        self._emit("ERROR", "provider_failure", key=key, provider=provider, error_type=error_type)

    def cache_write_failure(self, operation: str, key: str | None, error_type: str) -> None:
        """Record a failed cache side effect."""

        self._emit(
            "WARNING",
            "cache_write_failure",
            operation=operation,
            key=key,
            error_type=error_type,
        )

    def observer_failure(self, observer: str, error_type: str) -> None:
        """Record a failing application callback."""

        self._emit("WARNING", "observer_failure", observer=observer, error_type=error_type)

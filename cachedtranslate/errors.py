"""Domain exceptions for translation, cache, and CLI diagnostics.

Responsibilities:
- Separate caller mistakes, provider failures, and cache-side failures.
- Carry enough metadata for operational monitoring without leaking payloads.
"""

from __future__ import annotations


class TranslateCacheError(RuntimeError):
    """Base error for every failure raised by the translation cache core."""

    def __init__(self, detail: str, *, hint: str | None = None) -> None:
        """Initialize an error with a concise detail and optional remediation hint."""

        super().__init__(detail)
        self.detail = detail
        self.hint = hint


class InvalidParamsError(TranslateCacheError, ValueError):
    """Raised synchronously when request parameters are incomplete or invalid."""


class ConfigError(TranslateCacheError):
    """Raised when configuration cannot be loaded or resolved."""


class ProviderFailure(TranslateCacheError):
    """Raised when the translation backend fails or returns unusable output."""

    def __init__(
        self,
        detail: str,
        *,
        failure_kind: str = "unknown",
        status_code: int | None = None,
        provider_code: str | None = None,
        hint: str | None = None,
    ) -> None:
        """Initialize provider error metadata for diagnostics."""

        super().__init__(detail, hint=hint)
        self.failure_kind = failure_kind
        self.status_code = status_code
        self.provider_code = provider_code


class CacheWriteFailure(TranslateCacheError):
    """Raised when a cache store side effect (`set`, `touch`, `delete`) fails."""

    def __init__(self, detail: str, *, operation: str, key: str | None = None) -> None:
        """Initialize a cache failure scoped to the failing store operation."""

        super().__init__(detail)
        self.operation = operation
        self.key = key

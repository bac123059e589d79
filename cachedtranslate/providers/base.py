"""Translation provider interface and language metadata.

Responsibilities:
- Define the protocol consumed by the orchestrator for translation and
  language detection.
- Keep the supported language list and display names in one place.
"""

from __future__ import annotations

from typing import Protocol

from ..models.datatypes import LanguageDetection, ProviderTranslation


SUPPORTED_LANGUAGES: tuple[str, ...] = (
    "en",
    "ar",
    "he",
    "ru",
    "ja",
    "ko",
    "zh",
    "hi",
    "el",
    "th",
    "fr",
    "de",
)

LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "ar": "Arabic",
    "he": "Hebrew",
    "ru": "Russian",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
    "hi": "Hindi",
    "el": "Greek",
    "th": "Thai",
    "fr": "French",
    "de": "German",
}

RTL_LANGUAGES = frozenset({"ar", "he"})


def language_name(code: str) -> str:
    """Return the English display name for a language code, or the code itself."""

    return LANGUAGE_NAMES.get(code, code)


def is_rtl(code: str) -> bool:
    """Return whether a language is written right-to-left."""

    return code in RTL_LANGUAGES


class TranslationProvider(Protocol):
    """Protocol for AI translation and detection backends."""

    provider_id: str
    model: str | None

    def translate(
        self,
        text: str,
        to: str,
        source_language: str | None = None,
        context: str | None = None,
    ) -> ProviderTranslation:
        """Translate text; detect the source language when it is omitted."""

    def detect_language(self, text: str) -> LanguageDetection:
        """Detect the language of text."""

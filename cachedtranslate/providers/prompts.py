"""Prompt template library for provider calls.

Responsibilities:
- Centralize prompt construction for translation, detect-and-translate, and
  language detection.
- Keep prompts deterministic for identical inputs.
"""

from __future__ import annotations

from .base import SUPPORTED_LANGUAGES, language_name


_DEFAULT_CONTEXT = "general content"


class PromptLibrary:
    """Build prompt strings for supported provider tasks."""

    def translation_system_prompt(self) -> str:
        """Return deterministic system prompt for strict translation behavior."""

        return (
            "You are a precise translation assistant. "
            "Return only translated text with no commentary."
        )

    def translate_prompt(
        self,
        source_text: str,
        source_language: str,
        target_language: str,
        context: str | None = None,
    ) -> str:
        """Return translation prompt text for a known source language."""

        target_name = language_name(target_language)
        return (
            f"Translate from {language_name(source_language)} to {target_name}.\n"
            f"Context: {context or _DEFAULT_CONTEXT}\n"
            "Rules: Keep numbers, measurements, proper nouns unchanged. "
            f"Natural {target_name} phrasing.\n"
            "Return ONLY the translation.\n\n"
            f"Text: {source_text}"
        )

    def detect_and_translate_prompt(
        self,
        source_text: str,
        target_language: str,
        context: str | None = None,
    ) -> str:
        """Return a prompt asking for language detection and translation as JSON."""

        target_name = language_name(target_language)
        return (
            f"Detect language and translate to {target_name}.\n"
            f"Context: {context or _DEFAULT_CONTEXT}\n"
            "Rules: Keep numbers, measurements, proper nouns unchanged. "
            f"Natural {target_name} phrasing.\n"
            'Respond as JSON: {"from": "xx", "text": "translation"}\n\n'
            f"Text: {source_text}"
        )

    def detect_language_prompt(self, source_text: str) -> str:
        """Return a prompt asking for a single supported language code."""

        return (
            "What language is this? Reply with only one of: "
            f"{', '.join(SUPPORTED_LANGUAGES)}.\n\n"
            f"Text: {source_text}"
        )

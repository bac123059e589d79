"""OpenAI-backed translation and language detection provider.

Responsibilities:
- Translate with a known source language or detect-and-translate in one call.
- Parse structured detect-and-translate responses into provider results.
- Detect languages with a constrained single-code prompt.
"""

from __future__ import annotations

import json
import re

from ..models.datatypes import LanguageDetection, ProviderTranslation
from ..parsing import normalize_language_code, normalize_optional_string
from .base import SUPPORTED_LANGUAGES
from .openai_client import OpenAIChatClient, OpenAIProviderError
from .prompts import PromptLibrary
from .rate_limiter import RateLimiter


_CODE_FENCE_PATTERN = re.compile(r"```(?:json)?\s*|\s*```")
_FALLBACK_LANGUAGE = "en"
_DETECTION_CONFIDENCE = 0.9


def parse_detect_and_translate(raw_text: str, original_text: str, to: str) -> ProviderTranslation:
    """Parse a `{"from": ..., "text": ...}` reply, tolerating markdown code fences.

    Raises:
        OpenAIProviderError: If the reply is not a JSON object with string
            `from` and `text` values.
    """

    cleaned = _CODE_FENCE_PATTERN.sub("", raw_text).strip()
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise OpenAIProviderError(
            "OpenAI detect-and-translate reply is not valid JSON.",
            failure_kind="malformed_output",
        ) from exc

    if not isinstance(payload, dict):
        raise OpenAIProviderError(
            "OpenAI detect-and-translate reply must be a JSON object.",
            failure_kind="malformed_output",
        )

    source_language = normalize_language_code(payload.get("from"))
    translated = normalize_optional_string(payload.get("text"))
    if source_language is None or translated is None:
        raise OpenAIProviderError(
            "OpenAI detect-and-translate reply is missing `from` or `text`.",
            failure_kind="malformed_output",
        )

    if source_language == to:
        return ProviderTranslation(text=original_text, source_language=source_language)
    return ProviderTranslation(text=translated, source_language=source_language)


class OpenAITranslationProvider:
    """OpenAI chat-completions provider for translation and detection."""

    def __init__(
        self,
        model: str = "gpt-4.1-mini",
        provider_id: str = "openai",
        api_key: str | None = None,
        temperature: float = 0.3,
        rate_limiter: RateLimiter | None = None,
        max_output_tokens: int | None = None,
    ) -> None:
        """Initialize provider settings and OpenAI client dependencies.

        `max_output_tokens` caps translation replies; `None` leaves the length
        to the model.
        """

        self.model = model
        self.max_output_tokens = max_output_tokens
        self.provider_id = provider_id
        self.temperature = temperature
        self.client = OpenAIChatClient(api_key=api_key, rate_limiter=rate_limiter)
        self.prompts = PromptLibrary()

    def translate(
        self,
        text: str,
        to: str,
        source_language: str | None = None,
        context: str | None = None,
    ) -> ProviderTranslation:
        """Translate text, detecting the source language when it is not declared."""

        if source_language:
            if source_language == to:
                return ProviderTranslation(text=text, source_language=source_language)
            translated = self.client.chat_completion_text(
                model=self.model,
                system_prompt=self.prompts.translation_system_prompt(),
                user_prompt=self.prompts.translate_prompt(
                    source_text=text,
                    source_language=source_language,
                    target_language=to,
                    context=context,
                ),
                temperature=self.temperature,
                max_tokens=self.max_output_tokens,
            )
            return ProviderTranslation(text=translated, source_language=source_language)

        raw_reply = self.client.chat_completion_text(
            model=self.model,
            user_prompt=self.prompts.detect_and_translate_prompt(
                source_text=text,
                target_language=to,
                context=context,
            ),
            temperature=self.temperature,
            max_tokens=self.max_output_tokens,
            json_response=True,
        )
        return parse_detect_and_translate(raw_reply, original_text=text, to=to)

    def detect_language(self, text: str) -> LanguageDetection:
        """Detect a supported language code, falling back to English."""

        reply = self.client.chat_completion_text(
            model=self.model,
            user_prompt=self.prompts.detect_language_prompt(text),
            temperature=0.0,
            max_tokens=5,
        )
        detected = normalize_language_code(reply)
        language = detected if detected in SUPPORTED_LANGUAGES else _FALLBACK_LANGUAGE
        return LanguageDetection(language=language, confidence=_DETECTION_CONFIDENCE)

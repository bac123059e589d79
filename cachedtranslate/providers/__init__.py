"""Provider-facing abstractions for translation and language detection.

This package defines the provider protocol, prompt library, rate limiting,
and the OpenAI-backed implementation.
"""

from .base import (
    LANGUAGE_NAMES,
    SUPPORTED_LANGUAGES,
    TranslationProvider,
    is_rtl,
    language_name,
)
from .openai_client import OpenAIChatClient, OpenAIProviderError
from .openai_provider import OpenAITranslationProvider
from .prompts import PromptLibrary
from .rate_limiter import RateLimiter

__all__ = [
    "LANGUAGE_NAMES",
    "OpenAIChatClient",
    "OpenAIProviderError",
    "OpenAITranslationProvider",
    "PromptLibrary",
    "RateLimiter",
    "SUPPORTED_LANGUAGES",
    "TranslationProvider",
    "is_rtl",
    "language_name",
]

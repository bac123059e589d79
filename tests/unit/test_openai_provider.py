"""Unit tests for the OpenAI HTTP client and translation provider."""

from __future__ import annotations

import json
from typing import Any

import pytest
import requests

from cachedtranslate.providers.base import SUPPORTED_LANGUAGES
from cachedtranslate.providers.openai_client import OpenAIChatClient, OpenAIProviderError
from cachedtranslate.providers.openai_provider import (
    OpenAITranslationProvider,
    parse_detect_and_translate,
)
from cachedtranslate.providers.prompts import PromptLibrary
from cachedtranslate.providers.rate_limiter import RateLimiter


class _MockRequestsResponse:
    """Minimal requests response mock for HTTP transport patching."""

    def __init__(self, *, payload: bytes, status_code: int = 200) -> None:
        """Initialize response with payload bytes and status code."""

        self.content = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        """Raise HTTP error when status code indicates failure."""

        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)


class _RecordingRateLimiter:
    """Rate limiter test double that records acquire keys."""

    def __init__(self) -> None:
        """Initialize recording storage."""

        self.keys: list[str] = []

    def acquire(self, key: str) -> None:
        """Record acquisition keys without sleeping."""

        self.keys.append(key)


def _chat_payload(content: str) -> bytes:
    """Encode a chat-completions response with one assistant message."""

    return json.dumps({"choices": [{"message": {"content": content}}]}).encode("utf-8")


def _install_post(
    monkeypatch: pytest.MonkeyPatch,
    replies: list[_MockRequestsResponse],
) -> list[dict[str, Any]]:
    """Patch `requests.post` with queued replies and return captured request bodies."""

    captured: list[dict[str, Any]] = []

    def _mock_post(url: str, **kwargs: Any) -> _MockRequestsResponse:
        """Capture the JSON body and return the next queued reply."""

        captured.append({"url": url, **kwargs["json"]})
        return replies.pop(0)

    monkeypatch.setattr("cachedtranslate.providers.openai_client.requests.post", _mock_post)
    return captured


def test_client_sends_prompts_and_acquires_rate_limit_key(monkeypatch: pytest.MonkeyPatch) -> None:
    """Chat requests should carry messages and acquire the model-scoped limiter key."""

    captured = _install_post(monkeypatch, [_MockRequestsResponse(payload=_chat_payload(" ok "))])
    limiter = _RecordingRateLimiter()
    client = OpenAIChatClient(api_key="key", rate_limiter=limiter)

    result = client.chat_completion_text(
        model="gpt-4.1-mini",
        system_prompt="system",
        user_prompt="user",
        json_response=True,
    )

    assert result == "ok"
    assert limiter.keys == ["openai:chat:gpt-4.1-mini"]
    assert captured[0]["url"].endswith("/chat/completions")
    assert [message["role"] for message in captured[0]["messages"]] == ["system", "user"]
    assert captured[0]["response_format"] == {"type": "json_object"}


def test_client_requires_api_key() -> None:
    """Calls without an API key should fail before any HTTP request."""

    client = OpenAIChatClient(api_key="  ", rate_limiter=RateLimiter(0.0))

    with pytest.raises(OpenAIProviderError) as error:
        client.chat_completion_text(model="gpt-4.1-mini", user_prompt="user")

    assert error.value.failure_kind == "invalid_api_key"
    assert error.value.hint is not None


@pytest.mark.parametrize(
    ("status_code", "body", "failure_kind"),
    [
        (401, b'{"error":{"message":"Incorrect API key provided: sk-abcdefghijkl"}}', "invalid_api_key"),
        (429, b'{"error":{"message":"You exceeded your current quota","code":"insufficient_quota"}}', "insufficient_quota"),
        (429, b'{"error":{"message":"Rate limit reached"}}', "rate_limited"),
        (404, b'{"error":{"message":"The model does not exist","code":"model_not_found"}}', "invalid_model"),
        (500, b"upstream exploded", "http_error"),
    ],
)
def test_client_classifies_http_failures(
    monkeypatch: pytest.MonkeyPatch,
    status_code: int,
    body: bytes,
    failure_kind: str,
) -> None:
    """HTTP failures should map to deterministic failure kinds without leaking keys."""

    _install_post(monkeypatch, [_MockRequestsResponse(payload=body, status_code=status_code)])
    client = OpenAIChatClient(api_key="key", rate_limiter=RateLimiter(0.0))

    with pytest.raises(OpenAIProviderError) as error:
        client.chat_completion_text(model="gpt-4.1-mini", user_prompt="user")

    assert error.value.failure_kind == failure_kind
    assert error.value.status_code == status_code
    assert "sk-abcdefghijkl" not in str(error.value)


def test_client_maps_timeouts_and_malformed_payloads(monkeypatch: pytest.MonkeyPatch) -> None:
    """Transport timeouts and unusable payloads should raise classified errors."""

    def _timeout(_url: str, **_kwargs: object) -> _MockRequestsResponse:
        """Raise a requests timeout."""

        raise requests.Timeout("socket timed out")

    monkeypatch.setattr("cachedtranslate.providers.openai_client.requests.post", _timeout)
    client = OpenAIChatClient(api_key="key", rate_limiter=RateLimiter(0.0))
    with pytest.raises(OpenAIProviderError) as timeout_error:
        client.chat_completion_text(model="gpt-4.1-mini", user_prompt="user")
    assert timeout_error.value.failure_kind == "timeout"

    _install_post(monkeypatch, [_MockRequestsResponse(payload=b'{"choices": []}')])
    with pytest.raises(OpenAIProviderError) as malformed_error:
        client.chat_completion_text(model="gpt-4.1-mini", user_prompt="user")
    assert malformed_error.value.failure_kind == "malformed_output"


def test_parse_detect_and_translate_accepts_fenced_json() -> None:
    """Structured replies wrapped in code fences should parse into provider results."""

    parsed = parse_detect_and_translate(
        '```json\n{"from": "EN", "text": "שלום"}\n```',
        original_text="Hello",
        to="he",
    )

    assert parsed.text == "שלום"
    assert parsed.source_language == "en"


def test_parse_detect_and_translate_returns_original_for_same_language() -> None:
    """A detected source equal to the target should keep the original text."""

    parsed = parse_detect_and_translate(
        '{"from": "he", "text": "something else"}',
        original_text="שלום",
        to="he",
    )

    assert parsed.text == "שלום"
    assert parsed.source_language == "he"


@pytest.mark.parametrize("reply", ["not json", "[1, 2]", '{"text": "x"}', '{"from": "en"}'])
def test_parse_detect_and_translate_rejects_malformed_replies(reply: str) -> None:
    """Unusable structured replies should raise malformed-output provider errors."""

    with pytest.raises(OpenAIProviderError) as error:
        parse_detect_and_translate(reply, original_text="Hello", to="he")

    assert error.value.failure_kind == "malformed_output"


def test_provider_translates_with_known_source(monkeypatch: pytest.MonkeyPatch) -> None:
    """A declared source should use the plain translation prompt."""

    captured = _install_post(monkeypatch, [_MockRequestsResponse(payload=_chat_payload("Bonjour"))])
    provider = OpenAITranslationProvider(api_key="key", rate_limiter=RateLimiter(0.0))

    result = provider.translate("Hello", "fr", source_language="en", context="real estate")

    assert result.text == "Bonjour"
    assert result.source_language == "en"
    assert "Translate from English to French." in captured[0]["messages"][-1]["content"]
    assert "Context: real estate" in captured[0]["messages"][-1]["content"]
    assert "response_format" not in captured[0]
    assert "max_tokens" not in captured[0]


def test_provider_detects_and_translates_in_one_call(monkeypatch: pytest.MonkeyPatch) -> None:
    """An unknown source should use one JSON-mode detect-and-translate call."""

    captured = _install_post(
        monkeypatch,
        [_MockRequestsResponse(payload=_chat_payload('{"from": "en", "text": "Hola"}'))],
    )
    provider = OpenAITranslationProvider(api_key="key", rate_limiter=RateLimiter(0.0))

    result = provider.translate("Hello", "es")

    assert result.text == "Hola"
    assert result.source_language == "en"
    assert len(captured) == 1
    assert captured[0]["response_format"] == {"type": "json_object"}


def test_provider_applies_configured_output_token_cap(monkeypatch: pytest.MonkeyPatch) -> None:
    """A configured output cap should reach both translation request shapes."""

    captured = _install_post(
        monkeypatch,
        [
            _MockRequestsResponse(payload=_chat_payload("Bonjour")),
            _MockRequestsResponse(payload=_chat_payload('{"from": "en", "text": "Bonjour"}')),
        ],
    )
    provider = OpenAITranslationProvider(
        api_key="key",
        rate_limiter=RateLimiter(0.0),
        max_output_tokens=256,
    )

    provider.translate("Hello", "fr", source_language="en")
    provider.translate("Hello", "fr")

    assert [request["max_tokens"] for request in captured] == [256, 256]


def test_provider_skips_call_for_same_declared_language(monkeypatch: pytest.MonkeyPatch) -> None:
    """A declared source equal to the target should not call the API."""

    captured = _install_post(monkeypatch, [])
    provider = OpenAITranslationProvider(api_key="key", rate_limiter=RateLimiter(0.0))

    result = provider.translate("Hola", "es", source_language="es")

    assert result.text == "Hola"
    assert captured == []


@pytest.mark.parametrize(("reply", "expected"), [(" HE ", "he"), ("klingon", "en")])
def test_provider_detect_language_falls_back_to_english(
    monkeypatch: pytest.MonkeyPatch,
    reply: str,
    expected: str,
) -> None:
    """Detection should normalize supported codes and fall back to English."""

    _install_post(monkeypatch, [_MockRequestsResponse(payload=_chat_payload(reply))])
    provider = OpenAITranslationProvider(api_key="key", rate_limiter=RateLimiter(0.0))

    detection = provider.detect_language("שלום")

    assert detection.language == expected
    assert detection.confidence == pytest.approx(0.9)


def test_prompts_are_deterministic_and_list_supported_languages() -> None:
    """Prompt construction should be stable and name the supported codes."""

    prompts = PromptLibrary()

    assert prompts.translate_prompt("Hi", "en", "he") == prompts.translate_prompt("Hi", "en", "he")
    assert "Hebrew" in prompts.translate_prompt("Hi", "en", "he")
    assert '"from"' in prompts.detect_and_translate_prompt("Hi", "he")
    assert ", ".join(SUPPORTED_LANGUAGES) in prompts.detect_language_prompt("Hi")

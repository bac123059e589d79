"""Integration-test fixtures for deterministic provider and credential behavior."""

from __future__ import annotations

from typing import Callable

import pytest

from cachedtranslate.provider_factory import ProviderFactory


class InMemoryCredentialStore:
    """Simple in-memory credential store used for CLI tests."""

    def __init__(self, initial_api_key: str | None = None) -> None:
        """Initialize the store with an optional pre-seeded API key."""

        self._api_key = initial_api_key

    def get_api_key(self) -> str | None:
        """Return currently stored API key value."""

        return self._api_key

    def set_api_key(self, api_key: str) -> None:
        """Persist a normalized API key value."""

        self._api_key = api_key.strip()

    def clear_api_key(self) -> bool:
        """Clear API key and return whether one existed."""

        existed = self._api_key is not None
        self._api_key = None
        return existed


@pytest.fixture
def credential_store(monkeypatch: pytest.MonkeyPatch) -> InMemoryCredentialStore:
    """Replace the CLI keyring store with one shared in-memory store."""

    store = InMemoryCredentialStore()
    monkeypatch.setattr("cachedtranslate.cli.create_credential_store", lambda: store)
    return store


@pytest.fixture
def cli_provider(
    monkeypatch: pytest.MonkeyPatch,
    make_provider: Callable[..., object],
    credential_store: InMemoryCredentialStore,
) -> object:
    """Route every CLI-built translator to one provider double without network access."""

    provider = make_provider()
    captured: dict[str, object] = {}

    def _create_provider(
        provider_id: str,
        model: str,
        api_key: str | None = None,
        temperature: float = 0.3,
    ) -> object:
        """Capture resolved runtime values and return the shared double."""

        captured.update(provider_id=provider_id, model=model, api_key=api_key)
        return provider

    monkeypatch.setattr(ProviderFactory, "create_provider", staticmethod(_create_provider))
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    provider.captured = captured  # type: ignore[attr-defined]
    return provider

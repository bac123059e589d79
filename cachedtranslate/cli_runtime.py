"""CLI provider runtime resolution helpers.

This module isolates API-key prompting, runtime source assembly,
and secure API-key persistence from the command wiring layer.
"""

from __future__ import annotations

from typing import Callable, Protocol

import typer

from .credentials import create_credential_store
from .errors import ConfigError
from .parsing import normalize_optional_string


class CredentialStoreProtocol(Protocol):
    """Protocol for secure credential store operations used by CLI runtime resolution."""

    def get_api_key(self) -> str | None:
        """Return currently stored API key, if available."""

    def set_api_key(self, api_key: str) -> None:
        """Persist API key value in secure storage."""


def _set_runtime_cli_value(
    runtime_cli_values: dict[str, str],
    key: str,
    value: str | None,
) -> None:
    """Set a normalized runtime CLI value when user input is present."""

    normalized = normalize_optional_string(value)
    if normalized is not None:
        runtime_cli_values[key] = normalized


def _prompt_api_key() -> str | None:
    """Prompt for an API key with hidden input; blank input skips."""

    return normalize_optional_string(
        typer.prompt(
            "OpenAI API key (hidden; leave blank to skip)",
            default="",
            hide_input=True,
            show_default=False,
        )
    )


def resolve_provider_runtime_sources(
    provider: str | None,
    model: str | None,
    api_key: str | None,
    prompt_api_key: bool,
    store_api_key: bool,
    credential_store_factory: Callable[[], CredentialStoreProtocol] = create_credential_store,
) -> tuple[dict[str, str], dict[str, str]]:
    """Resolve CLI and secure runtime source mappings for provider configuration."""

    runtime_cli_values: dict[str, str] = {}
    _set_runtime_cli_value(runtime_cli_values, "provider", provider)
    _set_runtime_cli_value(runtime_cli_values, "model", model)
    _set_runtime_cli_value(runtime_cli_values, "api_key", api_key)

    api_key_entered_in_run = "api_key" in runtime_cli_values
    if prompt_api_key and "api_key" not in runtime_cli_values:
        prompted_api_key = _prompt_api_key()
        if prompted_api_key is not None:
            runtime_cli_values["api_key"] = prompted_api_key
            api_key_entered_in_run = True

    credential_store = credential_store_factory()
    runtime_secure_values: dict[str, str] = {}
    stored_api_key = credential_store.get_api_key()
    if stored_api_key is not None:
        runtime_secure_values["api_key"] = stored_api_key

    if api_key_entered_in_run and store_api_key:
        try:
            credential_store.set_api_key(runtime_cli_values["api_key"])
            typer.echo("Stored API key in secure credential storage.")
        except Exception as exc:
            raise ConfigError(
                f"Failed to store API key securely: {exc}",
                hint=(
                    "Install and configure a keyring backend, or rerun without "
                    "`--store-api-key` for one-off usage."
                ),
            ) from exc

    return runtime_cli_values, runtime_secure_values

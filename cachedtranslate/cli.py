"""Command-line interface for cachedtranslate.

Responsibilities:
- Expose user-facing commands for translation, overrides, and cache upkeep.
- Convert CLI arguments into `TranslateConfig` and build the orchestrator.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated, Callable, TypeVar

import typer

from .cli_rendering import (
    echo_batch,
    echo_detection,
    echo_stats,
    echo_translation,
    exit_with_command_error,
)
from .cli_runtime import resolve_provider_runtime_sources
from .config import ConfigLoader, RuntimeConfigSources, TranslateConfig
from .credentials import create_credential_store
from .errors import ConfigError, InvalidParamsError
from .models.datatypes import (
    BatchRequest,
    InvalidationScope,
    ManualOverride,
    ResourceField,
    TranslateRequest,
)
from .orchestrator import TranslationOrchestrator, create_translator
from .parsing import normalize_language_code, normalize_optional_string

app = typer.Typer(
    name="cachedtranslate",
    no_args_is_help=True,
    help="Cached machine translation CLI.",
)

T = TypeVar("T")

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to YAML config file with command defaults."),
]
CachePathOption = Annotated[
    Path | None,
    typer.Option("--cache-path", help="SQLite cache path (overrides config file value)."),
]
ProviderOption = Annotated[
    str | None, typer.Option("--provider", help="Translation provider id.")
]
ModelOption = Annotated[str | None, typer.Option("--model", help="Provider model id override.")]
ApiKeyOption = Annotated[
    str | None,
    typer.Option(
        "--api-key",
        help="Provider API key override. Prefer `--prompt-api-key` to avoid shell history.",
    ),
]
PromptApiKeyOption = Annotated[
    bool,
    typer.Option(
        "--prompt-api-key",
        help="Prompt for API key with hidden input (never echoed).",
    ),
]
StoreApiKeyOption = Annotated[
    bool,
    typer.Option(
        "--store-api-key/--no-store-api-key",
        help="Persist an API key entered in this run to secure credential storage.",
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", help="Print cache and provider event logs to stderr."),
]
TargetOption = Annotated[str, typer.Option("--to", help="Target language code.")]


def _load_yaml_config(config_path: Path | None) -> TranslateConfig | None:
    """Load a YAML config file when requested and map failures to config errors."""

    if config_path is None:
        return None

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise ConfigError(
            f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise ConfigError(
            f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc
    except Exception as exc:
        raise ConfigError(
            f"Failed to load config file `{config_path}`: {exc}",
            hint="Verify YAML syntax and file permissions.",
        ) from exc


def _resolve_command_config(
    config_file: Path | None,
    cache_path: Path | None,
    verbose: bool,
    runtime_cli_values: dict[str, str],
    runtime_secure_values: dict[str, str],
) -> TranslateConfig:
    """Resolve effective command config from YAML or env plus explicit CLI overrides."""

    loaded_config = _load_yaml_config(config_file)
    if loaded_config is None:
        try:
            loaded_config = ConfigLoader.from_env()
        except ValueError as exc:
            raise ConfigError(
                f"Invalid environment configuration: {exc}",
                hint="Fix `CACHEDTRANSLATE_*` environment variables and rerun.",
            ) from exc

    if cache_path is not None:
        loaded_config.cache_path = cache_path
        loaded_config.cache_backend = "sqlite"
    loaded_config.verbose = loaded_config.verbose or verbose
    loaded_config.runtime_sources = RuntimeConfigSources(
        cli=runtime_cli_values,
        secure=runtime_secure_values,
        env=os.environ,
    )
    return loaded_config


def _build_translator(
    config_file: Path | None,
    cache_path: Path | None,
    verbose: bool,
    provider: str | None = None,
    model: str | None = None,
    api_key: str | None = None,
    prompt_api_key: bool = False,
    store_api_key: bool = False,
) -> TranslationOrchestrator:
    """Resolve runtime sources and config, then build the orchestrator."""

    runtime_cli_values, runtime_secure_values = resolve_provider_runtime_sources(
        provider=provider,
        model=model,
        api_key=api_key,
        prompt_api_key=prompt_api_key,
        store_api_key=store_api_key,
        credential_store_factory=create_credential_store,
    )
    config = _resolve_command_config(
        config_file,
        cache_path,
        verbose,
        runtime_cli_values,
        runtime_secure_values,
    )
    try:
        return create_translator(config)
    except ValueError as exc:
        raise ConfigError(
            str(exc),
            hint="Check provider, model, cache, and language settings.",
        ) from exc


def _run_command(
    command_name: str,
    build: Callable[[], TranslationOrchestrator],
    action: Callable[[TranslationOrchestrator], T],
) -> T:
    """Build a translator, run one action, and always flush pending cache work."""

    try:
        translator = build()
    except Exception as exc:
        exit_with_command_error(command_name, exc)

    try:
        with translator:
            return action(translator)
    except Exception as exc:
        exit_with_command_error(command_name, exc)


@app.command("translate")
def translate_command(
    text: Annotated[str, typer.Argument(help="Text to translate.")],
    to: TargetOption,
    source_language: Annotated[
        str | None, typer.Option("--from", help="Declared source language code.")
    ] = None,
    context: Annotated[
        str | None, typer.Option("--context", help="Domain hint passed to the provider.")
    ] = None,
    resource_type: Annotated[
        str | None, typer.Option("--resource-type", help="Resource type for field caching.")
    ] = None,
    resource_id: Annotated[
        str | None, typer.Option("--resource-id", help="Resource id for field caching.")
    ] = None,
    field: Annotated[
        str | None, typer.Option("--field", help="Resource field name for field caching.")
    ] = None,
    config_file: ConfigOption = None,
    cache_path: CachePathOption = None,
    provider: ProviderOption = None,
    model: ModelOption = None,
    api_key: ApiKeyOption = None,
    prompt_api_key: PromptApiKeyOption = False,
    store_api_key: StoreApiKeyOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Translate one text, serving it from cache when possible."""

    request = TranslateRequest(
        text=text,
        to=normalize_language_code(to) or to,
        source_language=normalize_language_code(source_language),
        context=normalize_optional_string(context),
        resource_type=normalize_optional_string(resource_type),
        resource_id=normalize_optional_string(resource_id),
        field=normalize_optional_string(field),
    )
    result = _run_command(
        "translate",
        lambda: _build_translator(
            config_file,
            cache_path,
            verbose,
            provider,
            model,
            api_key,
            prompt_api_key,
            store_api_key,
        ),
        lambda translator: translator.translate_one(request),
    )
    echo_translation(result)


@app.command("batch")
def batch_command(
    texts: Annotated[list[str], typer.Argument(help="Texts to translate, in order.")],
    to: TargetOption,
    source_language: Annotated[
        str | None, typer.Option("--from", help="Declared source language code.")
    ] = None,
    context: Annotated[
        str | None, typer.Option("--context", help="Domain hint passed to the provider.")
    ] = None,
    config_file: ConfigOption = None,
    cache_path: CachePathOption = None,
    provider: ProviderOption = None,
    model: ModelOption = None,
    api_key: ApiKeyOption = None,
    prompt_api_key: PromptApiKeyOption = False,
    store_api_key: StoreApiKeyOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Translate several texts; duplicates are translated once."""

    request = BatchRequest(
        texts=list(texts),
        to=normalize_language_code(to) or to,
        source_language=normalize_language_code(source_language),
        context=normalize_optional_string(context),
    )
    results = _run_command(
        "batch",
        lambda: _build_translator(
            config_file,
            cache_path,
            verbose,
            provider,
            model,
            api_key,
            prompt_api_key,
            store_api_key,
        ),
        lambda translator: translator.translate_batch(request),
    )
    echo_batch(results)


@app.command("detect")
def detect_command(
    text: Annotated[str, typer.Argument(help="Text whose language should be detected.")],
    config_file: ConfigOption = None,
    cache_path: CachePathOption = None,
    provider: ProviderOption = None,
    model: ModelOption = None,
    api_key: ApiKeyOption = None,
    prompt_api_key: PromptApiKeyOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Detect the language of a text through the provider."""

    detection = _run_command(
        "detect",
        lambda: _build_translator(
            config_file,
            cache_path,
            verbose,
            provider,
            model,
            api_key,
            prompt_api_key,
        ),
        lambda translator: translator.detect_language(text),
    )
    echo_detection(detection)


@app.command("override-set")
def override_set_command(
    text: Annotated[str, typer.Argument(help="Original source text.")],
    translated_text: Annotated[str, typer.Argument(help="Human translation to pin.")],
    to: TargetOption,
    resource_type: Annotated[str, typer.Option("--resource-type", help="Resource type.")],
    resource_id: Annotated[str, typer.Option("--resource-id", help="Resource id.")],
    field: Annotated[str, typer.Option("--field", help="Resource field name.")],
    config_file: ConfigOption = None,
    cache_path: CachePathOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Pin a manual translation to one resource field."""

    override = ManualOverride(
        text=text,
        translated_text=translated_text,
        to=normalize_language_code(to) or to,
        resource_type=resource_type,
        resource_id=resource_id,
        field=field,
    )
    _run_command(
        "override-set",
        lambda: _build_translator(config_file, cache_path, verbose),
        lambda translator: translator.set_manual_override(override),
    )
    typer.echo(f"Manual override stored for {resource_type}/{resource_id}/{field} ({override.to}).")


@app.command("override-clear")
def override_clear_command(
    to: TargetOption,
    resource_type: Annotated[str, typer.Option("--resource-type", help="Resource type.")],
    resource_id: Annotated[str, typer.Option("--resource-id", help="Resource id.")],
    field: Annotated[str, typer.Option("--field", help="Resource field name.")],
    config_file: ConfigOption = None,
    cache_path: CachePathOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Remove a manual translation from one resource field."""

    resource = ResourceField(
        resource_type=resource_type,
        resource_id=resource_id,
        field=field,
        to=normalize_language_code(to) or to,
    )
    _run_command(
        "override-clear",
        lambda: _build_translator(config_file, cache_path, verbose),
        lambda translator: translator.clear_manual_override(resource),
    )
    typer.echo(f"Manual override cleared for {resource_type}/{resource_id}/{field} ({resource.to}).")


@app.command("invalidate")
def invalidate_command(
    resource_type: Annotated[
        str | None, typer.Option("--resource-type", help="Resource type to invalidate.")
    ] = None,
    resource_id: Annotated[
        str | None, typer.Option("--resource-id", help="Resource id to invalidate.")
    ] = None,
    language: Annotated[
        str | None, typer.Option("--language", help="Target language to invalidate.")
    ] = None,
    all_entries: Annotated[
        bool, typer.Option("--all", help="Delete every cache entry.")
    ] = False,
    config_file: ConfigOption = None,
    cache_path: CachePathOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Delete cache entries for one resource, one language, or everything."""

    selected = sum(
        (
            resource_type is not None or resource_id is not None,
            language is not None,
            all_entries,
        )
    )
    if selected != 1:
        exit_with_command_error(
            "invalidate",
            InvalidParamsError(
                "Choose exactly one invalidation scope.",
                hint="Use `--resource-type` with `--resource-id`, `--language`, or `--all`.",
            ),
        )

    if (resource_type is None) != (resource_id is None):
        exit_with_command_error(
            "invalidate",
            InvalidParamsError(
                "Resource invalidation requires both `--resource-type` and `--resource-id`.",
                hint="Pass both options to remove every cached field of one resource.",
            ),
        )

    if all_entries:
        scope = InvalidationScope.everything()
    elif language is not None:
        scope = InvalidationScope.for_language(normalize_language_code(language) or language)
    else:
        scope = InvalidationScope.for_resource(resource_type or "", resource_id or "")

    removed = _run_command(
        "invalidate",
        lambda: _build_translator(config_file, cache_path, verbose),
        lambda translator: translator.invalidate(scope),
    )
    typer.echo(f"Removed entries: {removed}")


@app.command("stats")
def stats_command(
    config_file: ConfigOption = None,
    cache_path: CachePathOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Print cache statistics."""

    stats = _run_command(
        "stats",
        lambda: _build_translator(config_file, cache_path, verbose),
        lambda translator: translator.get_stats(),
    )
    echo_stats(stats)


@app.command("credentials")
def credentials_command(
    set_api_key: Annotated[
        bool,
        typer.Option(
            "--set-api-key",
            help="Prompt for API key with hidden input and store it securely.",
        ),
    ] = False,
    clear_api_key: Annotated[
        bool,
        typer.Option(
            "--clear-api-key",
            help="Clear stored API key from secure credential storage.",
        ),
    ] = False,
) -> None:
    """Manage securely stored CLI credentials."""

    if set_api_key and clear_api_key:
        exit_with_command_error(
            "credentials",
            InvalidParamsError(
                "`--set-api-key` and `--clear-api-key` cannot be used together.",
                hint="Run one credentials action per command invocation.",
            ),
        )

    credential_store = create_credential_store()
    if set_api_key:
        prompted_api_key = normalize_optional_string(
            typer.prompt(
                "OpenAI API key (hidden input)",
                default="",
                hide_input=True,
                show_default=False,
            )
        )
        if prompted_api_key is None:
            exit_with_command_error(
                "credentials",
                InvalidParamsError(
                    "No API key entered.",
                    hint="Provide a non-empty API key when using `--set-api-key`.",
                ),
            )
        try:
            credential_store.set_api_key(prompted_api_key)
        except Exception as exc:
            exit_with_command_error(
                "credentials",
                ConfigError(
                    f"Failed to store API key securely: {exc}",
                    hint="Install and configure a keyring backend and retry.",
                ),
            )
        typer.echo("API key stored in secure credential storage.")
        return

    if clear_api_key:
        removed = credential_store.clear_api_key()
        if removed:
            typer.echo("Stored API key cleared from secure credential storage.")
        else:
            typer.echo("No stored API key found in secure credential storage.")
        return

    status = "present" if credential_store.get_api_key() is not None else "not set"
    typer.echo(f"Stored OpenAI API key: {status}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()

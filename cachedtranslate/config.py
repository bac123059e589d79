"""Configuration model and loaders for cachedtranslate.

Responsibilities:
- Define runtime configuration as a typed dataclass.
- Provide deterministic precedence resolution for provider/model/API key.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `TranslateConfig`: normalized settings for one translator instance.
- `ProviderRuntimeConfig`: resolved provider/model runtime values.
- `RuntimeConfigSources`: optional value sources for precedence resolution.
- `ConfigLoader`: static construction helpers for `TranslateConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .parsing import (
    normalize_language_code,
    normalize_optional_string,
    parse_language_list,
    parse_permissive_boolean,
)
from .providers.base import SUPPORTED_LANGUAGES


_DEFAULT_PROVIDER = "openai"
_DEFAULT_MODEL = "gpt-4.1-mini"
_DEFAULT_TEMPERATURE = 0.3
_DEFAULT_LANGUAGE = "en"
_DEFAULT_CACHE_BACKEND = "sqlite"
_DEFAULT_CACHE_PATH = Path(".cachedtranslate") / "cache.sqlite3"
_DEFAULT_BATCH_WORKERS = 4
_DEFAULT_WRITE_WORKERS = 2
_SUPPORTED_PROVIDER_IDS = frozenset({"openai"})
_SUPPORTED_CACHE_BACKENDS = frozenset({"memory", "sqlite"})


@dataclass(frozen=True, slots=True)
class RuntimeConfigSources:
    """Source mappings used for deterministic runtime value precedence.

    Attributes:
        cli: Values explicitly provided by CLI arguments.
        secure: Values loaded from secure local credential storage.
        env: Values loaded from environment variables.
    """

    cli: Mapping[str, str] = field(default_factory=dict)
    secure: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ProviderRuntimeConfig:
    """Resolved runtime provider values for one translator instance.

    Attributes:
        provider: Provider identifier.
        model: Model identifier.
        api_key: Optional provider API key (resolved but never logged).
    """

    provider: str
    model: str
    api_key: str | None = None


@dataclass(slots=True)
class TranslateConfig:
    """Runtime configuration for one translator instance.

    Attributes:
        provider: Translation provider identifier.
        model: Provider model identifier.
        api_key: Optional API key for provider calls.
        temperature: Sampling temperature for translation calls.
        languages: Optional allow-list of target languages.
        default_language: Language assumed for blank pass-through results.
        cache_backend: `sqlite` or `memory`.
        cache_path: SQLite database path for the `sqlite` backend.
        batch_workers: Thread count for batch fan-out.
        write_workers: Thread count for detached cache writes and touches.
        verbose: Whether event logs are printed.
        runtime_sources: Optional runtime source overrides injected by the CLI.
    """

    provider: str = _DEFAULT_PROVIDER
    model: str = _DEFAULT_MODEL
    api_key: str | None = None
    temperature: float = _DEFAULT_TEMPERATURE
    languages: tuple[str, ...] = ()
    default_language: str = _DEFAULT_LANGUAGE
    cache_backend: str = _DEFAULT_CACHE_BACKEND
    cache_path: Path = _DEFAULT_CACHE_PATH
    batch_workers: int = _DEFAULT_BATCH_WORKERS
    write_workers: int = _DEFAULT_WRITE_WORKERS
    verbose: bool = False
    runtime_sources: RuntimeConfigSources = field(default_factory=RuntimeConfigSources)

    def validate(self) -> None:
        """Validate configuration values before building a translator."""

        self._validate_provider_id(self.provider)
        self._require_non_empty(self.model, "model")
        if self.cache_backend not in _SUPPORTED_CACHE_BACKENDS:
            supported = ", ".join(sorted(_SUPPORTED_CACHE_BACKENDS))
            raise ValueError(
                f"Unsupported `cache_backend` value `{self.cache_backend}`; "
                f"supported: {supported}."
            )
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError("`temperature` must be between 0 and 2.")
        if self.batch_workers <= 0:
            raise ValueError("`batch_workers` must be a positive integer.")
        if self.write_workers <= 0:
            raise ValueError("`write_workers` must be a positive integer.")
        unsupported = [code for code in self.languages if code not in SUPPORTED_LANGUAGES]
        if unsupported:
            raise ValueError(f"Unsupported language code(s): {', '.join(unsupported)}.")
        if self.default_language not in SUPPORTED_LANGUAGES:
            raise ValueError(f"Unsupported `default_language` `{self.default_language}`.")

    def resolved_provider_runtime(
        self, sources: RuntimeConfigSources | None = None
    ) -> ProviderRuntimeConfig:
        """Resolve provider settings with deterministic source precedence.

        Precedence for each key is:
        `cli` > `secure` > `env` > config field default.
        """

        resolved_sources = sources if sources is not None else self.runtime_sources

        provider = self._resolve_runtime_value(
            key="provider",
            env_key="CACHEDTRANSLATE_PROVIDER",
            default_value=self.provider,
            sources=resolved_sources,
        )
        model = self._resolve_runtime_value(
            key="model",
            env_key="CACHEDTRANSLATE_MODEL",
            default_value=self.model,
            sources=resolved_sources,
        )
        api_key = self._resolve_optional_runtime_value(
            key="api_key",
            env_key="OPENAI_API_KEY",
            default_value=self.api_key,
            sources=resolved_sources,
        )

        self._validate_provider_id(provider)
        self._require_non_empty(model, "model")
        return ProviderRuntimeConfig(provider=provider, model=model, api_key=api_key)

    def _resolve_runtime_value(
        self,
        key: str,
        env_key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str:
        """Resolve a required runtime value from sources in precedence order."""

        value = self._resolve_optional_runtime_value(key, env_key, default_value, sources)
        if value is None:
            raise ValueError(
                f"`{key}` could not be resolved from CLI, secure storage, env, or defaults."
            )
        return value

    def _resolve_optional_runtime_value(
        self,
        key: str,
        env_key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str | None:
        """Resolve an optional runtime value from sources in precedence order."""

        for mapping, lookup_key in (
            (sources.cli, key),
            (sources.secure, key),
            (sources.env, env_key),
        ):
            value = self._normalized_lookup(mapping, lookup_key)
            if value is not None:
                return value
        return normalize_optional_string(default_value)

    @staticmethod
    def _normalized_lookup(mapping: Mapping[str, str], key: str) -> str | None:
        """Return a stripped mapping value for a key or `None` when missing/blank."""

        if key not in mapping:
            return None
        return normalize_optional_string(mapping.get(key))

    @staticmethod
    def _validate_provider_id(provider_id: str) -> None:
        """Validate provider identifiers against currently supported providers."""

        if provider_id not in _SUPPORTED_PROVIDER_IDS:
            supported = ", ".join(sorted(_SUPPORTED_PROVIDER_IDS))
            raise ValueError(
                f"Unsupported `provider` value `{provider_id}`; supported: {supported}."
            )

    @staticmethod
    def _require_non_empty(value: str, field_name: str) -> None:
        """Validate that runtime string fields are not empty."""

        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"`{field_name}` must be a non-empty string.")


class ConfigLoader:
    """Factory methods for creating `TranslateConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "provider",
            "model",
            "api_key",
            "temperature",
            "languages",
            "default_language",
            "cache_backend",
            "cache_path",
            "batch_workers",
            "write_workers",
            "verbose",
        }
    )
    _RUNTIME_ENV_KEYS = frozenset(
        {
            "CACHEDTRANSLATE_PROVIDER",
            "CACHEDTRANSLATE_MODEL",
            "OPENAI_API_KEY",
        }
    )

    @staticmethod
    def from_yaml(path: Path) -> TranslateConfig:
        """Create a validated config from a YAML file."""

        path_text = path.read_text(encoding="utf-8")
        payload = ConfigLoader._parse_yaml_payload(path_text, path)
        return ConfigLoader._build_config_from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> TranslateConfig:
        """Create a validated config from environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload: dict[str, Any] = {}
        for key in ConfigLoader._SUPPORTED_YAML_KEYS - {"api_key"}:
            env_key = f"CACHEDTRANSLATE_{key.upper()}"
            value = normalize_optional_string(env_map.get(env_key))
            if value is not None:
                payload[key] = value
        api_key = normalize_optional_string(env_map.get("OPENAI_API_KEY"))
        if api_key is not None:
            payload["api_key"] = api_key

        config = ConfigLoader._build_config_from_mapping(payload, source_label="Environment")
        config.runtime_sources = RuntimeConfigSources(
            env={
                key: value
                for key, value in env_map.items()
                if key in ConfigLoader._RUNTIME_ENV_KEYS
                and normalize_optional_string(value) is not None
            }
        )
        return config

    @staticmethod
    def _parse_yaml_payload(raw_text: str, path: Path) -> Mapping[str, Any]:
        """Parse YAML text and enforce a mapping root payload."""

        try:
            payload = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML config `{path}` is not valid YAML: {exc}") from exc

        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return payload

    @staticmethod
    def _build_config_from_mapping(
        payload: Mapping[str, Any], source_label: str
    ) -> TranslateConfig:
        """Build a validated config from a normalized mapping payload."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            raise ValueError(f"{source_label} includes unsupported key(s): {', '.join(unknown)}.")

        cache_path = normalize_optional_string(payload.get("cache_path"))
        try:
            languages = parse_language_list(payload.get("languages"))
        except ValueError as exc:
            raise ValueError(f"{source_label} field `languages`: {exc}") from exc

        config = TranslateConfig(
            provider=normalize_optional_string(payload.get("provider")) or _DEFAULT_PROVIDER,
            model=normalize_optional_string(payload.get("model")) or _DEFAULT_MODEL,
            api_key=normalize_optional_string(payload.get("api_key")),
            temperature=ConfigLoader._optional_float(
                payload, "temperature", source_label, default=_DEFAULT_TEMPERATURE
            ),
            languages=languages,
            default_language=normalize_language_code(payload.get("default_language"))
            or _DEFAULT_LANGUAGE,
            cache_backend=(
                normalize_optional_string(payload.get("cache_backend")) or _DEFAULT_CACHE_BACKEND
            ).lower(),
            cache_path=Path(cache_path) if cache_path is not None else _DEFAULT_CACHE_PATH,
            batch_workers=ConfigLoader._optional_positive_int(
                payload, "batch_workers", source_label, default=_DEFAULT_BATCH_WORKERS
            ),
            write_workers=ConfigLoader._optional_positive_int(
                payload, "write_workers", source_label, default=_DEFAULT_WRITE_WORKERS
            ),
            verbose=ConfigLoader._optional_boolean(
                payload, "verbose", source_label, default=False
            ),
        )
        config.validate()
        return config

    @staticmethod
    def _optional_positive_int(
        payload: Mapping[str, Any], key: str, source_label: str, default: int
    ) -> int:
        """Read and validate a positive integer payload field."""

        if key not in payload:
            return default

        raw_value = payload[key]
        if isinstance(raw_value, bool):
            raise ValueError(f"{source_label} field `{key}` must be a positive integer.")
        if isinstance(raw_value, int):
            parsed = raw_value
        else:
            normalized = normalize_optional_string(raw_value)
            if normalized is None:
                return default
            try:
                parsed = int(normalized)
            except ValueError as exc:
                raise ValueError(
                    f"{source_label} field `{key}` must be a positive integer."
                ) from exc

        if parsed <= 0:
            raise ValueError(f"{source_label} field `{key}` must be a positive integer.")
        return parsed

    @staticmethod
    def _optional_float(
        payload: Mapping[str, Any], key: str, source_label: str, default: float
    ) -> float:
        """Read and validate a numeric payload field."""

        if key not in payload:
            return default

        raw_value = payload[key]
        if isinstance(raw_value, bool):
            raise ValueError(f"{source_label} field `{key}` must be a number.")
        normalized = normalize_optional_string(raw_value)
        if normalized is None:
            return default
        try:
            return float(normalized)
        except ValueError as exc:
            raise ValueError(f"{source_label} field `{key}` must be a number.") from exc

    @staticmethod
    def _optional_boolean(
        payload: Mapping[str, Any], key: str, source_label: str, default: bool
    ) -> bool:
        """Read and validate a boolean field from a payload."""

        if key not in payload:
            return default

        parsed = parse_permissive_boolean(payload[key])
        if parsed is None:
            raise ValueError(
                f"{source_label} field `{key}` must be a boolean value "
                "(`true`/`false`, `1`/`0`, `yes`/`no`)."
            )
        return parsed

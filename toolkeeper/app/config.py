"""Configuration loading for ToolKeeper.

Settings are bound once at startup from layered sources, lowest precedence
first:

1. the base JSON file (``appsettings.json`` by default);
2. an environment overlay ``appsettings.<environment>.json`` next to it;
3. environment variables prefixed ``TOOLKEEPER__`` with ``__`` separating
   nested keys, e.g. ``TOOLKEEPER__APP__MODEL_API__PORT=8001``.

The ``app`` and ``connection_strings`` sections are required. A missing
required section or an invalid value aborts startup with
:class:`ConfigurationError`; nothing is silently defaulted.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from contextvars import ContextVar
from pathlib import Path
from typing import Any

from pydantic import (BaseModel, ConfigDict, Field, ValidationError,
                      field_validator, model_validator)
from pydantic_settings import (BaseSettings, JsonConfigSettingsSource,
                               PydanticBaseSettingsSource, SettingsConfigDict)

ENV_PREFIX = "TOOLKEEPER__"
ENV_DELIMITER = "__"
DEFAULT_CONFIG_FILE = "appsettings.json"
REQUIRED_SECTIONS = ("app", "connection_strings")

# JSON files read while load_settings() runs, lowest precedence first. Outside
# of it, Settings validates only the values it is given.
_config_files: ContextVar[tuple[Path, ...] | None] = ContextVar(
    "toolkeeper_config_files", default=None
)


class ConfigurationError(Exception):
    """Raised when settings cannot be bound from the configuration sources."""


class MissingConfigurationError(ConfigurationError):
    """Raised when a required configuration section is absent."""

    def __init__(self, section: str) -> None:
        super().__init__(f"Required configuration section '{section}' is missing")
        self.section = section


# ---------------------------------------------------------------------------
# Settings tree
# ---------------------------------------------------------------------------


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class ModelApiSettings(_Section):
    """Location of the model API the service depends on."""

    host: str = Field(min_length=1)
    port: int = Field(gt=0, lt=65536)
    health_path: str = "health"
    timeout_seconds: float = Field(default=10.0, gt=0)


class AppSection(_Section):
    model_api: ModelApiSettings


class ConnectionStrings(_Section):
    default: str = Field(min_length=1)


class CorsSettings(_Section):
    allowed_origins: list[str] = Field(default_factory=lambda: ["*"])
    allowed_methods: list[str] = Field(default_factory=lambda: ["*"])
    allowed_headers: list[str] = Field(default_factory=lambda: ["*"])


class LoggingSettings(_Section):
    directory: str = "Logs"
    file_name: str = "toolkeeper.log"
    file_level: str = "WARNING"
    console_level: str = "INFO"
    retention_days: int = Field(default=31, ge=0)

    @field_validator("file_level", "console_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level '{value}'")
        return upper


class ServerSettings(_Section):
    host: str = "0.0.0.0"
    port: int = Field(default=8000, gt=0, lt=65536)


class Settings(BaseSettings):
    """Immutable settings tree shared by every component."""

    model_config = SettingsConfigDict(
        frozen=True,
        extra="forbid",
        env_prefix=ENV_PREFIX,
        env_nested_delimiter=ENV_DELIMITER,
    )

    app: AppSection
    connection_strings: ConnectionStrings
    cors: CorsSettings = Field(default_factory=CorsSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)

    @model_validator(mode="before")
    @classmethod
    def _required_sections(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            for section in REQUIRED_SECTIONS:
                get_required_section(data, section)
        return data

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        files = _config_files.get()
        if files is None:
            return (init_settings,)
        json_sources = [
            JsonConfigSettingsSource(settings_cls, json_file=path, json_file_encoding="utf-8")
            for path in reversed(files)
        ]
        return (init_settings, env_settings, *json_sources)


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


def environment_overlay_path(config_path: Path | str, environment: str) -> Path:
    """Return ``appsettings.<environment>.json`` beside ``config_path``."""

    path = Path(config_path)
    return path.with_name(f"{path.stem}.{environment}{path.suffix}")


def config_files(config_path: Path | str, environment: str | None = None) -> tuple[Path, ...]:
    """Return the JSON files to read, lowest precedence first."""

    files = [Path(config_path)]
    if environment:
        files.append(environment_overlay_path(config_path, environment))
    return tuple(files)


def get_required_section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    """Return the section ``name`` or raise :class:`MissingConfigurationError`."""

    section = raw.get(name)
    if not isinstance(section, Mapping) or not section:
        raise MissingConfigurationError(name)
    return section


def _format_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        problems.append(f"{location}: {error['msg']}")
    return "Invalid configuration: " + "; ".join(problems)


def bind_settings(raw: Mapping[str, Any]) -> Settings:
    """Validate an already merged configuration mapping into :class:`Settings`.

    No file or environment source is consulted.
    """

    try:
        return Settings.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(_format_validation_error(exc)) from exc


def load_settings(
    config_path: Path | str = DEFAULT_CONFIG_FILE,
    *,
    environment: str | None = None,
) -> Settings:
    """Load settings from the layered sources.

    Missing JSON files are skipped, so environment variables alone may
    supply every value.

    Args:
        config_path: Base JSON configuration file.
        environment: Optional environment name selecting an overlay file.

    Returns:
        The bound, immutable settings.

    Raises:
        ConfigurationError: If a source is malformed, a required section is
            missing or a value fails validation.
    """
    token = _config_files.set(config_files(config_path, environment))
    try:
        return Settings()
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON in configuration: {exc}") from exc
    except ValidationError as exc:
        raise ConfigurationError(_format_validation_error(exc)) from exc
    finally:
        _config_files.reset(token)


__all__ = [
    "AppSection",
    "ConfigurationError",
    "ConnectionStrings",
    "CorsSettings",
    "LoggingSettings",
    "MissingConfigurationError",
    "ModelApiSettings",
    "ServerSettings",
    "Settings",
    "bind_settings",
    "config_files",
    "environment_overlay_path",
    "get_required_section",
    "load_settings",
]

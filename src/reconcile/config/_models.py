# pyright: reportExplicitAny=false, reportAny=false
"""Configuration models.

Pydantic models for the configuration sections and the ``Config`` container.
All models are frozen and ignore unknown keys, so a config file shared with
newer versions still loads.
"""

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, field_validator

from reconcile.config._defaults import DEFAULT_CONFIG
from reconcile.config._loader import deep_merge, parse_env_vars, read_toml_file
from reconcile.enums import DiscardPolicy
from reconcile.exceptions import ConfigValidationError


class LogLevel(StrEnum):
    """Log level threshold values, most verbose first."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class ConfigSourceName(StrEnum):
    """Configuration source names, highest precedence first."""

    OVERRIDE = "override"
    ENV = "env"
    PROJECT = "project"
    USER = "user"
    DEFAULT = "default"


@dataclass(frozen=True, slots=True)
class ConfigSource:
    """A configuration source.

    Attributes:
        name: The source type identifier.
        path: Path to the config file, or None for non-file sources.
        exists: Whether the source exists.
        values: Configuration values read from this source.
    """

    name: ConfigSourceName
    path: Path | None
    exists: bool
    values: dict[str, Any]


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to the log file; empty uses the platform log directory.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    file: str = ""


class CheckoutConfig(BaseModel):
    """Checkout configuration section.

    Attributes:
        remote: Tracking remote that resolved references are fetched into.
        preview_limit: Modified files listed before the discard prompt.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    remote: str = Field(default="composer", min_length=1, pattern=r"^[^/\s]+$")
    preview_limit: int = Field(default=10, ge=1)


def _validation_error(error: ValidationError, source: str | None) -> ConfigValidationError:
    first = error.errors()[0]
    key = ".".join(str(part) for part in first["loc"])
    msg = f"Invalid configuration value for {key}: {first['msg']}"
    if source:
        msg = f"{msg} (in {source})"
    return ConfigValidationError(
        msg, key=key, value=first.get("input"), expected=first["msg"], source=source
    )


class Config(BaseModel):
    """Configuration container with typed access.

    Use the factory methods rather than the constructor so defaults and
    sources are merged consistently.

    Example:
        >>> config = Config.from_dict({"discard_changes": "stash"})
        >>> config.discard_changes
        <DiscardPolicy.STASH: 'stash'>
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    discard_changes: DiscardPolicy = DiscardPolicy.NEVER
    interactive: bool | None = None
    checkout: CheckoutConfig = CheckoutConfig()
    logging: LoggingConfig = LoggingConfig()

    _sources: tuple[ConfigSource, ...] = PrivateAttr(default=())

    @field_validator("discard_changes", mode="before")
    @classmethod
    def _coerce_discard_changes(cls, value: Any) -> Any:
        # TOML and env values arrive as real booleans
        if isinstance(value, bool):
            return DiscardPolicy.ALWAYS if value else DiscardPolicy.NEVER
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def sources(self) -> list[ConfigSource]:
        """Sources that contributed to this configuration, highest precedence first."""
        return list(self._sources)

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        *,
        source: str | None = None,
        sources: tuple[ConfigSource, ...] = (),
    ) -> Self:
        """Create configuration from a dictionary merged over the defaults.

        Raises:
            ConfigValidationError: If a value is invalid.
        """
        merged = deep_merge(DEFAULT_CONFIG, data)
        try:
            config = cls.model_validate(merged)
        except ValidationError as e:
            raise _validation_error(e, source) from e
        config._sources = sources
        return config

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Load configuration from a single TOML file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigLoadError: If the file cannot be parsed.
            ConfigValidationError: If a value is invalid.
        """
        data = read_toml_file(path)
        source = ConfigSource(name=ConfigSourceName.PROJECT, path=path, exists=True, values=data)
        return cls.from_dict(data, source=str(path), sources=(source,))

    @classmethod
    def load(
        cls,
        *,
        project_root: Path | None = None,
        include_env: bool = True,
        overrides: dict[str, Any] | None = None,
    ) -> Self:
        """Load merged configuration from every source.

        Sources are merged defaults, user, project, env, then overrides, each
        one overriding the previous.

        Args:
            project_root: Directory holding ``.reconcile.toml``. Searched
                upward from the current directory when None.
            include_env: Include ``RECONCILE_*`` environment variables.
            overrides: Values that override every other source.

        Raises:
            ConfigLoadError: If a config file cannot be parsed.
            ConfigValidationError: If the merged config is invalid.
        """
        # Deferred import to avoid circular dependency
        from reconcile.config._discovery import discover_sources  # noqa: PLC0415

        sources = discover_sources(project_root, include_env=include_env, overrides=overrides)

        merged: dict[str, Any] = {}
        loaded: list[ConfigSource] = []
        for source in reversed(sources):
            values = source.values
            if source.name is ConfigSourceName.ENV:
                values = parse_env_vars()
            elif source.path is not None and source.exists:
                values = read_toml_file(source.path)

            loaded.append(
                ConfigSource(
                    name=source.name, path=source.path, exists=source.exists, values=values
                )
            )
            if values:
                merged = deep_merge(merged, values)

        return cls.from_dict(merged, sources=tuple(reversed(loaded)))

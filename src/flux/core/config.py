"""
Flux configuration.

Parses flux.toml into typed settings: which built-ins to install, extra
constants, default variables for command-line evaluation, and logging.

Example flux.toml:

    [registry]
    builtins = true

    [constants]
    gutter = 8

    [variables]
    psx = 800

    [logging]
    level = "INFO"
"""

from __future__ import annotations

import logging
import tomllib
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from flux.core.errors import ConfigError, LexError, RegistryError
from flux.core.expression_lang.builtins import install_builtins
from flux.core.expression_lang.registry import SymbolRegistry, register_constants
from flux.core.expression_lang.tokenizer import TokenKind, tokenize

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "flux.toml"


class LogLevel(StrEnum):
    """Accepted logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class RegistryConfig(BaseModel):
    """Registry setup options."""

    model_config = ConfigDict(extra="forbid")

    builtins: bool = True


class LoggingConfig(BaseModel):
    """Logging options."""

    model_config = ConfigDict(extra="forbid")

    level: LogLevel = LogLevel.WARNING

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


def _is_identifier(name: str) -> bool:
    """True if the tokenizer reads *name* as exactly one identifier."""
    try:
        tokens = tokenize(name)
    except LexError:
        return False
    return len(tokens) == 1 and tokens[0].kind == TokenKind.IDENTIFIER


class FluxConfig(BaseModel):
    """Complete flux.toml configuration."""

    model_config = ConfigDict(extra="forbid")

    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    constants: dict[str, float] = Field(default_factory=dict)
    variables: dict[str, float] = Field(default_factory=dict)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("constants", "variables")
    @classmethod
    def check_names(cls, values: dict[str, float]) -> dict[str, float]:
        for name in values:
            if not _is_identifier(name):
                raise ValueError(f"{name!r} is not a valid identifier")
        return values

    def build_registry(self, builtins: bool | None = None) -> SymbolRegistry:
        """Create a frozen registry holding the configured symbols.

        Args:
            builtins: Overrides ``[registry] builtins`` when not None.
        """
        registry = SymbolRegistry()
        if self.registry.builtins if builtins is None else builtins:
            install_builtins(registry)
        try:
            register_constants(self.constants, registry)
        except RegistryError as e:
            raise ConfigError(str(e)) from e
        registry.freeze()
        return registry


def load_config(path: Path) -> FluxConfig:
    """
    Load configuration from a flux.toml file.

    Args:
        path: Path to the TOML file

    Returns:
        Validated FluxConfig

    Raises:
        ConfigError: If the file is missing, is not TOML, or fails validation
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}") from None
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    try:
        config = FluxConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}:\n{e}") from e

    logger.debug(
        "Loaded %s: %d constants, %d variables",
        path,
        len(config.constants),
        len(config.variables),
    )
    return config


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for flux.toml."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None

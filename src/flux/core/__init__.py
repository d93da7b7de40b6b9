"""Core Flux functionality: AST, expression language, errors, configuration."""

from . import ir
from .errors import (
    ConfigError,
    EvalError,
    FluxError,
    LexError,
    ParseError,
    RegistryError,
)

__all__ = [
    "ir",
    "ConfigError",
    "EvalError",
    "FluxError",
    "LexError",
    "ParseError",
    "RegistryError",
]

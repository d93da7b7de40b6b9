"""
Flux - numeric expressions stored as strings and evaluated on demand.

Layout code keeps a ``Flux`` wherever it would keep a float; the expression
is parsed once and re-evaluated whenever its inputs change.
"""

from __future__ import annotations

# Re-export commonly used types for convenience
from ._version import get_version
from .core import ir
from .core.errors import ConfigError, EvalError, FluxError, LexError, ParseError, RegistryError
from .core.expression_lang import (
    Flux,
    Flux2,
    Flux3,
    Flux4,
    SymbolRegistry,
    default_registry,
    evaluate,
    install_builtins,
    parse_expr,
    register_constant,
    register_function,
    tokenize,
)

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "ConfigError",
    "EvalError",
    "Flux",
    "Flux2",
    "Flux3",
    "Flux4",
    "FluxError",
    "LexError",
    "ParseError",
    "RegistryError",
    "SymbolRegistry",
    "default_registry",
    "evaluate",
    "install_builtins",
    "parse_expr",
    "register_constant",
    "register_function",
    "tokenize",
]

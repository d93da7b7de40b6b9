"""
Symbol registry for Flux.

Holds the named constants and functions that expressions can reference
beyond their local variables. A registry is filled once during setup,
optionally frozen, and then only read while expressions are evaluated.

Usage:
    registry = SymbolRegistry()
    registry.register_constant("gutter", 8)
    registry.register_function("twice", lambda args: args[0] * 2, arity=1)
    registry.freeze()
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from types import MappingProxyType

from flux.core.errors import InvalidArityError, RegistryError

logger = logging.getLogger(__name__)

FluxFunction = Callable[[list[float]], float]

# int for an exact count, (min, max) for a range, max None for unbounded
Arity = int | tuple[int, int | None]

# Same shape the tokenizer reads as a single identifier
_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_.]*\Z")


class SymbolRegistry:
    """Named constants and functions available to every expression."""

    def __init__(self) -> None:
        self._constants: dict[str, float] = {}
        self._functions: dict[str, FluxFunction] = {}
        self._frozen = False

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return (
            f"SymbolRegistry({len(self._constants)} constants, "
            f"{len(self._functions)} functions, {state})"
        )

    # -- Registration --

    def register_constant(self, name: str, value: float) -> None:
        """Register (or replace) a named constant."""
        self._check_writable(name)
        if name in self._constants:
            logger.debug("Replacing constant %s", name)
        self._constants[name] = float(value)

    def register_function(self, name: str, fn: FluxFunction, arity: Arity | None = None) -> None:
        """Register (or replace) a named function.

        Args:
            name: Name used in call expressions.
            fn: Callable receiving the evaluated arguments as a list.
            arity: If given, the function is wrapped so that a wrong
                argument count raises InvalidArityError before *fn* runs.
                Without it, *fn* is responsible for its own checking.
        """
        self._check_writable(name)
        if not callable(fn):
            raise RegistryError(f"Function {name!r} is not callable")
        if name in self._functions:
            logger.debug("Replacing function %s", name)
        self._functions[name] = with_arity(name, fn, arity) if arity is not None else fn

    def freeze(self) -> None:
        """Make the registry read-only."""
        if not self._frozen:
            logger.debug("Freezing %r", self)
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def copy(self) -> SymbolRegistry:
        """Return an unfrozen registry with the same symbols."""
        clone = SymbolRegistry()
        clone._constants = dict(self._constants)
        clone._functions = dict(self._functions)
        return clone

    def _check_writable(self, name: str) -> None:
        if self._frozen:
            raise RegistryError(f"Cannot register {name!r}: registry is frozen")
        if not isinstance(name, str) or not _NAME_RE.match(name):
            raise RegistryError(f"Invalid symbol name: {name!r}")

    # -- Lookup --

    def has_constant(self, name: str) -> bool:
        return name in self._constants

    def has_function(self, name: str) -> bool:
        return name in self._functions

    def get_constant(self, name: str) -> float:
        return self._constants[name]

    def get_function(self, name: str) -> FluxFunction:
        return self._functions[name]

    @property
    def constants(self) -> Mapping[str, float]:
        """Read-only view of the registered constants."""
        return MappingProxyType(self._constants)

    @property
    def functions(self) -> Mapping[str, FluxFunction]:
        """Read-only view of the registered functions."""
        return MappingProxyType(self._functions)


def with_arity(name: str, fn: FluxFunction, arity: Arity) -> FluxFunction:
    """Wrap *fn* so it rejects argument lists of the wrong length."""
    if isinstance(arity, int):
        low, high = arity, arity
    else:
        low, high = arity
    expected = _describe_arity(low, high)

    def checked(args: list[float]) -> float:
        if len(args) < low or (high is not None and len(args) > high):
            raise InvalidArityError(name, expected, len(args))
        return fn(args)

    checked.__name__ = getattr(fn, "__name__", name)
    checked.__doc__ = fn.__doc__
    checked.arity = (low, high)  # type: ignore[attr-defined]
    return checked


def _describe_arity(low: int, high: int | None) -> str:
    if high is None:
        return f"at least {low}"
    if low == high:
        return str(low)
    return f"{low} to {high}"


def arity_of(fn: FluxFunction) -> tuple[int, int | None] | None:
    """The (min, max) argument count recorded by :func:`with_arity`, if any."""
    return getattr(fn, "arity", None)


# ---------------------------------------------------------------------------
# Process-wide registry
# ---------------------------------------------------------------------------

_default = SymbolRegistry()


def default_registry() -> SymbolRegistry:
    """The registry used when no explicit one is passed."""
    return _default


def register_constant(name: str, value: float) -> None:
    """Register a constant in the process-wide registry."""
    _default.register_constant(name, value)


def register_function(name: str, fn: FluxFunction, arity: Arity | None = None) -> None:
    """Register a function in the process-wide registry."""
    _default.register_function(name, fn, arity)


def register_constants(values: Mapping[str, float], registry: SymbolRegistry | None = None) -> None:
    """Register several constants at once."""
    target = registry if registry is not None else _default
    for name, value in values.items():
        target.register_constant(name, value)


"""
Expression handles: a source string plus its lazily parsed AST.

A ``Flux`` is what layout code stores in place of a plain float. It parses
its source once, on first evaluation, and then re-evaluates the cached tree
against whatever local variables the caller sets before each call:

    width = Flux("psx - 20")
    width.variables = {"psx": 800}
    width.evaluate()  # 780.0

Editing ``source`` does not drop the cached tree; call ``refresh()`` after
changing it. The first evaluation writes the cache, so a handle that will be
shared between threads should be refreshed before it is shared.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Mapping

from flux.core.expression_lang.evaluator import evaluate as evaluate_expr
from flux.core.expression_lang.parser import parse_expr
from flux.core.expression_lang.registry import SymbolRegistry
from flux.core.ir.expressions import Expr, Number

logger = logging.getLogger(__name__)


def _source_for(value: str | float) -> str:
    if isinstance(value, str):
        return value
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"Cannot express {value!r} as a Flux expression")
    return str(Number(value=number))


class Flux:
    """A float stored as an expression and evaluated on demand."""

    __slots__ = ("_source", "_ast", "variables", "registry")

    def __init__(
        self,
        source: str | float = "",
        variables: Mapping[str, float] | None = None,
        registry: SymbolRegistry | None = None,
    ) -> None:
        self._source = _source_for(source)
        self._ast: Expr | None = None
        self.variables: dict[str, float] = dict(variables or {})
        self.registry = registry

    @classmethod
    def from_value(cls, value: float, registry: SymbolRegistry | None = None) -> Flux:
        """Create a handle whose source is the number *value*."""
        return cls(_source_for(value), registry=registry)

    def __repr__(self) -> str:
        return f"Flux({self._source!r})"

    def __float__(self) -> float:
        return self.evaluate()

    @property
    def source(self) -> str:
        return self._source

    @source.setter
    def source(self, value: str) -> None:
        # The cache is kept until refresh()
        self._source = value

    @property
    def is_cached(self) -> bool:
        return self._ast is not None

    @property
    def ast(self) -> Expr | None:
        """The parsed tree, parsing now if needed. None for empty source."""
        if self._ast is None and self._source:
            self.refresh()
        return self._ast

    def refresh(self) -> None:
        """Drop the cached tree and re-parse the current source."""
        self._ast = None
        if not self._source:
            return
        logger.debug("Parsing flux expression %r", self._source)
        self._ast = parse_expr(self._source)

    def evaluate(self, variables: Mapping[str, float] | None = None) -> float:
        """Evaluate the expression.

        Args:
            variables: If given, replaces the handle's local variables
                before evaluating.

        Raises:
            LexError, ParseError: On the first evaluation of bad source.
            EvalError: If the expression cannot be evaluated.
        """
        if variables is not None:
            self.variables = dict(variables)

        # Empty expression is zero
        if not self._source:
            return 0.0

        if self._ast is None:
            self.refresh()
        assert self._ast is not None
        return evaluate_expr(self._ast, self.variables, self.registry)


class _FluxVector:
    """Fixed-size group of Flux components."""

    _COMPONENTS: tuple[str, ...] = ()

    __slots__ = ("_parts",)

    def __init__(self, *values: str | float | Flux, registry: SymbolRegistry | None = None) -> None:
        names = self._COMPONENTS
        if len(values) == 1 and not isinstance(values[0], Flux):
            # One template for every component; {} becomes the component name
            template = values[0]
            if isinstance(template, str):
                values = tuple(template.replace("{}", name) for name in names)
            else:
                values = (template,) * len(names)
        elif len(values) != len(names):
            raise TypeError(
                f"{type(self).__name__} takes 1 or {len(names)} values, got {len(values)}"
            )

        self._parts: tuple[Flux, ...] = tuple(
            value if isinstance(value, Flux) else Flux(value, registry=registry)
            for value in values
        )

    def __repr__(self) -> str:
        sources = ", ".join(repr(part.source) for part in self._parts)
        return f"{type(self).__name__}({sources})"

    def __iter__(self) -> Iterator[Flux]:
        return iter(self._parts)

    def __len__(self) -> int:
        return len(self._parts)

    def __getitem__(self, index: int) -> Flux:
        return self._parts[index]

    def set_variables(self, variables: Mapping[str, float]) -> None:
        """Replace the local variables of every component."""
        for part in self._parts:
            part.variables = dict(variables)

    def refresh(self) -> None:
        for part in self._parts:
            part.refresh()

    def evaluate(self) -> tuple[float, ...]:
        return tuple(part.evaluate() for part in self._parts)


class Flux2(_FluxVector):
    """Two Flux components, x and y."""

    _COMPONENTS = ("x", "y")
    __slots__ = ()

    @property
    def x(self) -> Flux:
        return self._parts[0]

    @property
    def y(self) -> Flux:
        return self._parts[1]


class Flux3(Flux2):
    """Three Flux components, x, y and z."""

    _COMPONENTS = ("x", "y", "z")
    __slots__ = ()

    @property
    def z(self) -> Flux:
        return self._parts[2]


class Flux4(Flux3):
    """Four Flux components, x, y, z and w."""

    _COMPONENTS = ("x", "y", "z", "w")
    __slots__ = ()

    @property
    def w(self) -> Flux:
        return self._parts[3]

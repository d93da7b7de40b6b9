"""
Built-in constants and functions for Flux.

Nothing here is registered automatically: call :func:`install_builtins`
(or the two halves separately) during setup. Functions behave like their
C library counterparts, so math domain errors produce NaN or an infinity
instead of raising.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable

from flux.core.expression_lang.evaluator import fmod, int_result, power, round_half_away
from flux.core.expression_lang.registry import Arity, SymbolRegistry, default_registry

logger = logging.getLogger(__name__)

BUILTIN_CONSTANTS: dict[str, float] = {
    "e": math.e,
    "log2e": 1.0 / math.log(2.0),
    "log10e": 1.0 / math.log(10.0),
    "pi": math.pi,
    "inv_pi": 1.0 / math.pi,
    "inv_sqrtpi": 1.0 / math.sqrt(math.pi),
    "ln2": math.log(2.0),
    "ln10": math.log(10.0),
    "sqrt2": math.sqrt(2.0),
    "sqrt3": math.sqrt(3.0),
    "inv_sqrt3": 1.0 / math.sqrt(3.0),
    "egamma": 0.5772156649015329,
    "phi": (1.0 + math.sqrt(5.0)) / 2.0,
}


# ---------------------------------------------------------------------------
# C-style wrappers
# ---------------------------------------------------------------------------


def _c_math(fn: Callable[..., float], odd: bool = False) -> Callable[..., float]:
    """Map Python's math exceptions onto C results (NaN / infinity).

    Overflow gives +inf, or for an *odd* function an infinity carrying the
    sign of the first argument.
    """

    def call(*args: float) -> float:
        try:
            return float(fn(*args))
        except ValueError:
            return math.nan
        except OverflowError:
            return math.copysign(math.inf, args[0]) if odd else math.inf

    return call


def _integral(fn: Callable[[float], int]) -> Callable[[float], float]:
    """Rounding functions pass NaN and infinities through unchanged."""

    def call(x: float) -> float:
        return float(fn(x)) if math.isfinite(x) else x

    return call


def _log(fn: Callable[[float], float], pole: float) -> Callable[[float], float]:
    """Logarithms: -inf at the pole, NaN below it."""

    def call(x: float) -> float:
        if x == pole:
            return -math.inf
        if x < pole:
            return math.nan
        return _c_math(fn)(x)

    return call


def _atanh(x: float) -> float:
    if abs(x) == 1.0:
        return math.copysign(math.inf, x)
    return _c_math(math.atanh)(x)


def _tgamma(x: float) -> float:
    # Pole at zero keeps the sign of the zero; negative integers are NaN
    if x == 0.0:
        return math.copysign(math.inf, x)
    return _c_math(math.gamma)(x)


def _lgamma(x: float) -> float:
    try:
        return math.lgamma(x)
    except ValueError:
        # Poles at zero and the negative integers
        return math.inf
    except OverflowError:
        return math.inf


def _dim(x: float, y: float) -> float:
    if math.isnan(x) or math.isnan(y):
        return math.nan
    return x - y if x > y else 0.0


def _midpoint(a: float, b: float) -> float:
    total = a + b
    if math.isfinite(total):
        return total / 2.0
    return a / 2.0 + b / 2.0


def _round_half_even(x: float) -> float:
    return float(round(x)) if math.isfinite(x) else x


def _round_half_away(x: float) -> float:
    return float(round_half_away(x)) if math.isfinite(x) else x


def _gcd(x: float, y: float) -> float:
    return float(math.gcd(round_half_away(x, "gcd"), round_half_away(y, "gcd")))


def _lcm(x: float, y: float) -> float:
    return int_result(math.lcm(round_half_away(x, "lcm"), round_half_away(y, "lcm")))


def _remainder(x: float, y: float) -> float:
    if y == 0.0 or math.isinf(x) or math.isnan(y):
        return math.nan
    return math.remainder(x, y)


# name -> (implementation taking positional floats, arity)
_FUNCTIONS: dict[str, tuple[Callable[..., float], Arity]] = {
    "abs": (abs, 1),
    "acos": (_c_math(math.acos), 1),
    "acosh": (_c_math(math.acosh), 1),
    "asin": (_c_math(math.asin), 1),
    "asinh": (_c_math(math.asinh), 1),
    "atan": (_c_math(math.atan), 1),
    "atan2": (_c_math(math.atan2), 2),  # (y, x)
    "atanh": (_atanh, 1),
    "ceil": (_integral(math.ceil), 1),
    "cbrt": (_c_math(math.cbrt), 1),
    "cos": (_c_math(math.cos), 1),
    "cosh": (_c_math(math.cosh), 1),
    "dim": (_dim, 2),
    "erf": (math.erf, 1),
    "erfc": (math.erfc, 1),
    "exp": (_c_math(math.exp), 1),
    "exp2": (_c_math(math.exp2), 1),
    "expm1": (_c_math(math.expm1), 1),
    "fma": (lambda x, y, z: x * y + z, 3),
    "floor": (_integral(math.floor), 1),
    "gcd": (_gcd, 2),
    "hypot": (math.hypot, 2),
    "lgamma": (_lgamma, 1),
    "lcm": (_lcm, 2),
    "lerp": (lambda a, b, t: a + t * (b - a), 3),  # (start, end, t)
    "log": (_log(math.log, 0.0), 1),
    "log1p": (_log(math.log1p, -1.0), 1),
    "log10": (_log(math.log10, 0.0), 1),
    "log2": (_log(math.log2, 0.0), 1),
    "max": (max, 2),
    "midpoint": (_midpoint, 2),
    "min": (lambda *values: min(values), (1, None)),
    "mod": (fmod, 2),
    "nan": (lambda: math.nan, 0),
    "nearbyint": (_round_half_even, 1),
    "pow": (power, 2),
    "remainder": (_remainder, 2),
    "rint": (_round_half_even, 1),
    "round": (_round_half_away, 1),
    "sin": (_c_math(math.sin), 1),
    "sinh": (_c_math(math.sinh, odd=True), 1),
    "sqrt": (_c_math(math.sqrt), 1),
    "tan": (_c_math(math.tan), 1),
    "tanh": (math.tanh, 1),
    "tgamma": (_tgamma, 1),
    "trunc": (_integral(math.trunc), 1),
}

BUILTIN_FUNCTION_NAMES: tuple[str, ...] = tuple(sorted(_FUNCTIONS))


def _spread(fn: Callable[..., float]) -> Callable[[list[float]], float]:
    """Adapt a positional-argument function to the list calling convention."""

    def call(args: list[float]) -> float:
        return fn(*args)

    call.__name__ = getattr(fn, "__name__", "builtin")
    return call


def add_builtin_constants(registry: SymbolRegistry | None = None) -> None:
    """Register e, pi, phi and the other mathematical constants."""
    target = registry if registry is not None else default_registry()
    for name, value in BUILTIN_CONSTANTS.items():
        target.register_constant(name, value)
    logger.debug("Registered %d built-in constants", len(BUILTIN_CONSTANTS))


def add_builtin_functions(registry: SymbolRegistry | None = None) -> None:
    """Register the standard math functions (sin, sqrt, min, lerp, ...)."""
    target = registry if registry is not None else default_registry()
    for name, (fn, arity) in _FUNCTIONS.items():
        target.register_function(name, _spread(fn), arity)
    logger.debug("Registered %d built-in functions", len(_FUNCTIONS))


def install_builtins(registry: SymbolRegistry | None = None) -> None:
    """Register every built-in constant and function."""
    add_builtin_constants(registry)
    add_builtin_functions(registry)

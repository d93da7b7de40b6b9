"""
Expression evaluator for Flux.

Evaluates expression AST nodes against a mapping of local variables and a
symbol registry. Pure evaluation: no I/O, no side effects beyond what
registered functions do. Does NOT use Python's eval().

Arithmetic follows IEEE-754 doubles the way C does: dividing by zero gives
an infinity or NaN instead of raising.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping

from flux.core.errors import (
    NonFiniteOperandError,
    UnknownFunctionError,
    UnknownIdentifierError,
    UnsupportedOperatorError,
)
from flux.core.expression_lang.registry import SymbolRegistry, default_registry
from flux.core.ir.expressions import (
    BinaryExpr,
    BinaryOp,
    Call,
    Conditional,
    Expr,
    Number,
    UnaryExpr,
    UnaryOp,
    Variable,
)


def evaluate(
    expr: Expr,
    variables: Mapping[str, float] | None = None,
    registry: SymbolRegistry | None = None,
) -> float:
    """Evaluate an expression to a float.

    Args:
        expr: Parsed expression AST.
        variables: Local variables; these shadow registry constants.
        registry: Constants and functions. Defaults to the process-wide
            registry.

    Returns:
        The computed value.

    Raises:
        EvalError: If a name cannot be resolved, a function rejects its
            arguments, or an operator cannot be applied.
    """
    if registry is None:
        registry = default_registry()
    return _interpret(expr, variables or {}, registry)


def _interpret(expr: Expr, ctx: Mapping[str, float], registry: SymbolRegistry) -> float:
    """Dispatch evaluation to the appropriate handler."""
    if isinstance(expr, Number):
        return expr.value

    if isinstance(expr, Variable):
        return _interpret_variable(expr, ctx, registry)

    if isinstance(expr, BinaryExpr):
        left = _interpret(expr.left, ctx, registry)
        right = _interpret(expr.right, ctx, registry)
        return apply_binary(expr.op, left, right)

    if isinstance(expr, UnaryExpr):
        return apply_unary(expr.op, _interpret(expr.operand, ctx, registry))

    if isinstance(expr, Call):
        return _interpret_call(expr, ctx, registry)

    if isinstance(expr, Conditional):
        if _interpret(expr.condition, ctx, registry) != 0.0:
            return _interpret(expr.then_expr, ctx, registry)
        return _interpret(expr.else_expr, ctx, registry)

    raise UnsupportedOperatorError(type(expr).__name__)


def _interpret_variable(
    expr: Variable, ctx: Mapping[str, float], registry: SymbolRegistry
) -> float:
    """Resolve a name: locals first, then registry constants."""
    if expr.name in ctx:
        return float(ctx[expr.name])
    if registry.has_constant(expr.name):
        return registry.get_constant(expr.name)
    raise UnknownIdentifierError(expr.name)


def _interpret_call(expr: Call, ctx: Mapping[str, float], registry: SymbolRegistry) -> float:
    """Evaluate every argument, then hand them to the registered function."""
    values = [_interpret(arg, ctx, registry) for arg in expr.args]
    if not registry.has_function(expr.name):
        raise UnknownFunctionError(expr.name)
    return float(registry.get_function(expr.name)(values))


# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


def apply_unary(op: UnaryOp | str, value: float) -> float:
    """Apply a prefix operator to an evaluated operand."""
    if op == UnaryOp.PLUS or op == UnaryOp.IDENTITY:
        return value
    if op == UnaryOp.NEG:
        return -value
    if op == UnaryOp.RECIPROCAL:
        return divide(1.0, value)
    if op == UnaryOp.NOT:
        return _truth(value == 0.0)
    if op == UnaryOp.BIT_NOT:
        return int_result(~round_half_away(value, op))
    raise UnsupportedOperatorError(str(op))


def apply_binary(op: BinaryOp | str, left: float, right: float) -> float:
    """Apply a binary operator to two evaluated operands."""
    handler = _BINARY_HANDLERS.get(op)
    if handler is None:
        raise UnsupportedOperatorError(str(op))
    return handler(left, right)


def _truth(flag: bool) -> float:
    return 1.0 if flag else 0.0


def divide(left: float, right: float) -> float:
    """IEEE-754 division: x/0 is a signed infinity, 0/0 is NaN."""
    if right == 0.0:
        if left == 0.0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def fmod(left: float, right: float) -> float:
    """Truncating remainder; the sign follows the dividend."""
    if right == 0.0 or math.isinf(left) or math.isnan(right):
        return math.nan
    return math.fmod(left, right)


def _wrap_mod(left: float, right: float) -> float:
    result = fmod(left, right)
    return result + right if result < 0 else result


def _floor_div(left: float, right: float) -> float:
    quotient = divide(left, right)
    return float(math.floor(quotient)) if math.isfinite(quotient) else quotient


def power(base: float, exponent: float) -> float:
    """C ``pow``: domain errors give NaN and overflow gives an infinity."""
    try:
        return math.pow(base, exponent)
    except ValueError:
        if base == 0.0 and exponent < 0:
            return math.copysign(math.inf, base) if _is_odd_integer(exponent) else math.inf
        return math.nan
    except OverflowError:
        if base < 0 and _is_odd_integer(exponent):
            return -math.inf
        return math.inf


def _is_odd_integer(value: float) -> bool:
    return math.isfinite(value) and value.is_integer() and int(value) % 2 == 1


def round_half_away(value: float, op: str = "round") -> int:
    """Round to the nearest integer, halfway cases away from zero."""
    if not math.isfinite(value):
        raise NonFiniteOperandError(str(op), value)
    whole = math.trunc(value)
    # value - whole is exact for doubles
    if abs(value - whole) >= 0.5:
        whole += 1 if value > 0 else -1
    return whole


def int_result(value: int) -> float:
    """Convert an integer result back to float, saturating to an infinity."""
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


_MAX_SHIFT = 2048


def _bitwise(op: BinaryOp, fn: Callable[[int, int], int]) -> Callable[[float, float], float]:
    def apply(left: float, right: float) -> float:
        return int_result(fn(round_half_away(left, op), round_half_away(right, op)))

    return apply


def _shift_left(value: int, count: int) -> int:
    if count < 0:
        return value >> -count
    # Anything past this overflows a double anyway
    return value << min(count, _MAX_SHIFT)


def _shift_right(value: int, count: int) -> int:
    if count < 0:
        return _shift_left(value, -count)
    return value >> count


_BINARY_HANDLERS: dict[str, Callable[[float, float], float]] = {
    # Arithmetic
    BinaryOp.ADD: lambda a, b: a + b,
    BinaryOp.SUB: lambda a, b: a - b,
    BinaryOp.MUL: lambda a, b: a * b,
    BinaryOp.DIV: divide,
    BinaryOp.MOD: fmod,
    BinaryOp.WRAP_MOD: _wrap_mod,
    BinaryOp.POW: power,
    BinaryOp.FLOOR_DIV: _floor_div,
    # Relational
    BinaryOp.EQ: lambda a, b: _truth(a == b),
    BinaryOp.NE: lambda a, b: _truth(a != b),
    BinaryOp.LT: lambda a, b: _truth(a < b),
    BinaryOp.GT: lambda a, b: _truth(a > b),
    BinaryOp.LE: lambda a, b: _truth(a <= b),
    BinaryOp.GE: lambda a, b: _truth(a >= b),
    BinaryOp.NOT_LT: lambda a, b: _truth(not a < b),
    BinaryOp.NOT_GT: lambda a, b: _truth(not a > b),
    BinaryOp.NOT_LE: lambda a, b: _truth(not a <= b),
    BinaryOp.NOT_GE: lambda a, b: _truth(not a >= b),
    # Logical; both sides were already evaluated
    BinaryOp.AND: lambda a, b: _truth(a != 0.0 and b != 0.0),
    BinaryOp.OR: lambda a, b: _truth(a != 0.0 or b != 0.0),
    BinaryOp.IMPLIES: lambda a, b: _truth(a == 0.0 or b != 0.0),
    # Bitwise
    BinaryOp.BIT_AND: _bitwise(BinaryOp.BIT_AND, lambda a, b: a & b),
    BinaryOp.BIT_OR: _bitwise(BinaryOp.BIT_OR, lambda a, b: a | b),
    BinaryOp.BIT_XOR: _bitwise(BinaryOp.BIT_XOR, lambda a, b: a ^ b),
    BinaryOp.SHL: _bitwise(BinaryOp.SHL, _shift_left),
    BinaryOp.SHR: _bitwise(BinaryOp.SHR, _shift_right),
    # Min / max, absolute difference, coalesce
    BinaryOp.MIN: lambda a, b: min(a, b),
    BinaryOp.MAX: lambda a, b: max(a, b),
    BinaryOp.ABS_DIFF: lambda a, b: abs(a - b),
    BinaryOp.COALESCE: lambda a, b: a if a != 0.0 else b,
}

"""
Expression AST types for Flux.

Every Flux expression evaluates to exactly one float. The tree is built
from six node kinds:

- Number literals: 42, 3.5, 1'000
- Variable references: psx, csy, pi
- Function calls: max(a, b), sqrt(w * 2)
- Unary operations: -x, !x, ~x, /x
- Binary operations: a + b, w <? 100, mask & 4
- Conditionals: cond ? a : b

Nodes are immutable and own their children; there are no parent links.
"""

from __future__ import annotations

import math
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


class UnaryOp(StrEnum):
    """Prefix operators."""

    PLUS = "+"
    NEG = "-"
    IDENTITY = "*"
    RECIPROCAL = "/"
    NOT = "!"
    BIT_NOT = "~"


class BinaryOp(StrEnum):
    """Binary operators."""

    # Bitwise (integer-coercing)
    BIT_AND = "&"
    BIT_OR = "|"
    BIT_XOR = "^"
    SHL = "<<"
    SHR = ">>"
    # Arithmetic
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    WRAP_MOD = "%%"
    POW = "**"
    FLOOR_DIV = "//"
    # Min / max
    MIN = "<?"
    MAX = ">?"
    # Relational
    EQ = "=="
    NE = "!="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="
    NOT_LT = "!<"
    NOT_GT = "!>"
    NOT_LE = "!<="
    NOT_GE = "!>="
    # Logical (never short-circuit)
    AND = "&&"
    OR = "||"
    IMPLIES = "=>"
    # Misc
    COALESCE = "??"
    ABS_DIFF = "!!"


# Binary precedence levels, loosest-binding first. ``!!`` has no level:
# it can be evaluated but not written in source text.
BINARY_PRECEDENCE: tuple[tuple[BinaryOp, ...], ...] = (
    (BinaryOp.BIT_AND, BinaryOp.BIT_OR, BinaryOp.BIT_XOR),
    (BinaryOp.SHL, BinaryOp.SHR),
    (BinaryOp.ADD, BinaryOp.SUB),
    (BinaryOp.MUL, BinaryOp.DIV),
    (BinaryOp.MOD, BinaryOp.WRAP_MOD),
    (BinaryOp.POW, BinaryOp.FLOOR_DIV),
    (BinaryOp.MIN, BinaryOp.MAX),
    (
        BinaryOp.EQ,
        BinaryOp.NE,
        BinaryOp.LT,
        BinaryOp.GT,
        BinaryOp.LE,
        BinaryOp.GE,
        BinaryOp.NOT_LT,
        BinaryOp.NOT_GT,
        BinaryOp.NOT_LE,
        BinaryOp.NOT_GE,
    ),
    (BinaryOp.AND, BinaryOp.OR),
    (BinaryOp.IMPLIES,),
    (BinaryOp.COALESCE,),
)


# ---------------------------------------------------------------------------
# AST node types
# ---------------------------------------------------------------------------


class Number(BaseModel):
    """A numeric literal."""

    value: float = Field(description="The literal value")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        text = repr(self.value)
        if "e" in text and math.isfinite(self.value):
            # Source text has no exponent syntax
            text = format(Decimal(text), "f")
        return text


class Variable(BaseModel):
    """
    Reference to a local variable or a registered constant.

    Locals shadow constants of the same name. Names are case-sensitive and
    may contain dots (``layout.gap``).
    """

    name: str = Field(description="Variable or constant name")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.name


class Call(BaseModel):
    """
    Function call: name(arg1, arg2, ...).

    The callee comes from the symbol registry and checks its own arity.
    """

    name: str = Field(description="Function name")
    args: list[Expr] = Field(default_factory=list, description="Arguments")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        args_str = ", ".join(str(a) for a in self.args)
        return f"{self.name}({args_str})"


class UnaryExpr(BaseModel):
    """Unary operation: op operand."""

    op: UnaryOp
    operand: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"({self.op.value} {self.operand})"


class BinaryExpr(BaseModel):
    """Binary operation: left op right."""

    op: BinaryOp
    left: Expr
    right: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"({self.left} {self.op.value} {self.right})"


class Conditional(BaseModel):
    """
    Ternary conditional: condition ? then_expr : else_expr.

    Only the selected branch is evaluated.
    """

    condition: Expr = Field(description="Condition, true when nonzero")
    then_expr: Expr = Field(description="Value when condition is nonzero")
    else_expr: Expr = Field(description="Value when condition is zero")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"({self.condition} ? {self.then_expr} : {self.else_expr})"


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

Expr = Number | Variable | Call | UnaryExpr | BinaryExpr | Conditional

# Rebuild models for recursive forward references
Call.model_rebuild()
UnaryExpr.model_rebuild()
BinaryExpr.model_rebuild()
Conditional.model_rebuild()

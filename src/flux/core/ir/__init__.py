"""
Flux intermediate representation: the expression AST.
"""

from .expressions import (
    BINARY_PRECEDENCE,
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

__all__ = [
    "BINARY_PRECEDENCE",
    "BinaryExpr",
    "BinaryOp",
    "Call",
    "Conditional",
    "Expr",
    "Number",
    "UnaryExpr",
    "UnaryOp",
    "Variable",
]

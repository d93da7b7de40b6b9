"""
Error types for Flux lexing, parsing, evaluation and setup.

Every failure surfaces as a subclass of ``FluxError``. Lexing and parsing
errors carry the source position; evaluation errors carry the offending
name or operator.
"""

from __future__ import annotations


class FluxError(Exception):
    """Base exception for all Flux errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# ---------------------------------------------------------------------------
# Lexing
# ---------------------------------------------------------------------------


class LexError(FluxError):
    """Raised when the source contains a character outside every token class."""

    def __init__(self, char: str, pos: int) -> None:
        self.char = char
        self.pos = pos
        super().__init__(f"Invalid character in token: {char!r} (at {pos})")


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class ParseError(FluxError):
    """
    Raised when a token sequence is not a valid expression.

    ``pos`` is the character offset of the offending token, or the length
    of the source when input ended early.
    """

    def __init__(self, message: str, pos: int | None = None) -> None:
        self.pos = pos
        super().__init__(message)


class UnexpectedEndError(ParseError):
    """Tokens ran out while a construct was still open."""

    def __init__(self, context: str, pos: int | None = None) -> None:
        self.context = context
        super().__init__(f"Unexpected end of tokens in {context}", pos)


class ExpectedTokenError(ParseError):
    """A specific token was required but something else was found."""

    def __init__(self, expected: str, found: str, context: str, pos: int | None = None) -> None:
        self.expected = expected
        self.found = found
        self.context = context
        super().__init__(f"Expected {expected!r} in {context}, found {found!r}", pos)


class InvalidOperatorError(ParseError):
    """Operator text that is not valid at this position of the grammar."""

    def __init__(self, op: str, context: str, pos: int | None = None) -> None:
        self.op = op
        self.context = context
        super().__init__(f"Invalid {context} operator {op!r}", pos)


class TrailingTokensError(ParseError):
    """A complete expression was parsed but tokens remain."""

    def __init__(self, token: str, pos: int | None = None) -> None:
        self.token = token
        super().__init__(f"Unexpected tokens at the end of expression: {token!r}", pos)


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


class EvalError(FluxError):
    """Raised when a parsed expression cannot be evaluated."""


class UnknownIdentifierError(EvalError):
    """A name is neither a local variable nor a registered constant."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Invalid variable {name!r}")


class UnknownFunctionError(EvalError):
    """A called name is not a registered function."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Invalid function {name!r}")


class InvalidArityError(EvalError):
    """A function was called with the wrong number of arguments."""

    def __init__(self, name: str, expected: str, got: int) -> None:
        self.name = name
        self.expected = expected
        self.got = got
        super().__init__(f"Invalid parameters for {name}: expected {expected}, got {got}")


class UnsupportedOperatorError(EvalError):
    """An AST node carries an operator the evaluator does not implement."""

    def __init__(self, op: str) -> None:
        self.op = op
        super().__init__(f"Invalid operator {op!r}")


class NonFiniteOperandError(EvalError):
    """NaN or infinity reached an integer-only operation."""

    def __init__(self, op: str, value: float) -> None:
        self.op = op
        self.value = value
        super().__init__(f"Operator {op!r} needs a finite operand, got {value}")


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


class RegistryError(FluxError):
    """
    Raised on invalid symbol registration.

    Examples:
    - Name that the lexer would not read as one identifier
    - Registering into a frozen registry
    """


class ConfigError(FluxError):
    """Raised when a flux.toml file cannot be read or validated."""

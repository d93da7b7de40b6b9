"""
Tokenizer for Flux expressions.

Converts an expression string into a sequence of typed tokens.
"""

from __future__ import annotations

from enum import StrEnum, auto

from flux.core.errors import LexError


class TokenKind(StrEnum):
    """Token types for the expression language."""

    IDENTIFIER = auto()
    NUMBER = auto()
    OPERATOR = auto()
    PUNCTUATION = auto()


class Token:
    """A single token from the expression tokenizer."""

    __slots__ = ("kind", "value", "pos")

    def __init__(self, kind: TokenKind, value: str, pos: int) -> None:
        self.kind = kind
        self.value = value
        self.pos = pos

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.value!r}, pos={self.pos})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return (self.kind, self.value, self.pos) == (other.kind, other.value, other.pos)

    def __hash__(self) -> int:
        return hash((self.kind, self.value, self.pos))

    def is_(self, kind: TokenKind, value: str) -> bool:
        return self.kind == kind and self.value == value


_IDENT_START = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_")
_DIGITS = frozenset("0123456789")
_IDENT_CONT = _IDENT_START | _DIGITS | {"."}
# ' is a digit separator, stripped before conversion
_NUMBER_CONT = _DIGITS | {".", "'"}
OPERATOR_CHARS = frozenset("+-*/%^=!~&|<>?:[]")
PUNCTUATION_CHARS = frozenset("@#$(){}\\;,")


def tokenize(source: str) -> list[Token]:
    """Tokenize an expression string into a list of tokens.

    Operators are read with maximal munch (``<=?`` is one token), while
    every punctuation character is its own token (``((`` is two).

    Raises:
        LexError: On a character outside every token class.
    """
    tokens: list[Token] = []
    i = 0
    n = len(source)

    while i < n:
        c = source[i]

        if c.isspace():
            i += 1
            continue

        if c in _IDENT_START:
            i = _read_run(source, i, _IDENT_CONT, TokenKind.IDENTIFIER, tokens)
            continue

        if c in _DIGITS:
            i = _read_run(source, i, _NUMBER_CONT, TokenKind.NUMBER, tokens)
            continue

        if c in OPERATOR_CHARS:
            i = _read_run(source, i, OPERATOR_CHARS, TokenKind.OPERATOR, tokens)
            continue

        if c in PUNCTUATION_CHARS:
            tokens.append(Token(TokenKind.PUNCTUATION, c, i))
            i += 1
            continue

        raise LexError(c, i)

    return tokens


def _read_run(
    source: str, start: int, allowed: frozenset[str], kind: TokenKind, tokens: list[Token]
) -> int:
    """Append the longest run of *allowed* characters at *start* as one token."""
    end = start + 1
    while end < len(source) and source[end] in allowed:
        end += 1
    tokens.append(Token(kind, source[start:end], start))
    return end

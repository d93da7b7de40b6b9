"""
Recursive descent parser for Flux expressions.

Grammar (binary levels loosest-binding first):
    expr      → binary_0 ("?" expr ":" expr)?
    binary_0  → binary_1 (("&" | "|" | "^") binary_1)*
    binary_1  → binary_2 (("<<" | ">>") binary_2)*
    binary_2  → binary_3 (("+" | "-") binary_3)*
    binary_3  → binary_4 (("*" | "/") binary_4)*
    binary_4  → binary_5 (("%" | "%%") binary_5)*
    binary_5  → binary_6 (("**" | "//") binary_6)*
    binary_6  → binary_7 (("<?" | ">?") binary_7)*
    binary_7  → binary_8 (rel_op binary_8)*
    binary_8  → binary_9 (("&&" | "||") binary_9)*
    binary_9  → binary_10 ("=>" binary_10)*
    binary_10 → unary ("??" unary)*
    unary     → ("+" | "-" | "*" | "/" | "!" | "~") unary | primary
    primary   → NUMBER | IDENT | IDENT "(" (expr ("," expr)*)? ")" | "(" expr ")"
    rel_op    → "==" | "!=" | "<" | ">" | "<=" | ">=" | "!<" | "!>" | "!<=" | "!>="

Bitwise operators bind looser than arithmetic, and relational and logical
operators bind tighter than arithmetic. Expressions written against this
table depend on it, so it is not the C ordering.
"""

from __future__ import annotations

from flux.core.errors import (
    ExpectedTokenError,
    InvalidOperatorError,
    ParseError,
    TrailingTokensError,
    UnexpectedEndError,
)
from flux.core.expression_lang.tokenizer import Token, TokenKind, tokenize
from flux.core.ir.expressions import (
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

_LEVELS: tuple[frozenset[str], ...] = tuple(
    frozenset(op.value for op in level) for level in BINARY_PRECEDENCE
)
_UNARY_OPS = frozenset(op.value for op in UnaryOp)


class _Parser:
    """Recursive descent parser over a token list."""

    def __init__(self, tokens: list[Token], end_pos: int) -> None:
        self.tokens = tokens
        self.pos = 0
        self.end_pos = end_pos

    @property
    def current(self) -> Token | None:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        self.pos += 1
        return tok

    def require(self, context: str) -> Token:
        """Return the current token, failing if input has ended."""
        tok = self.current
        if tok is None:
            raise UnexpectedEndError(context, self.end_pos)
        return tok

    def expect(self, kind: TokenKind, value: str, context: str) -> Token:
        tok = self.current
        if tok is None:
            raise ExpectedTokenError(value, "end of input", context, self.end_pos)
        if not tok.is_(kind, value):
            raise ExpectedTokenError(value, tok.value, context, tok.pos)
        return self.advance()

    def at(self, kind: TokenKind, value: str) -> bool:
        tok = self.current
        return tok is not None and tok.is_(kind, value)

    # -- Grammar rules --

    def parse_expr(self) -> Expr:
        """binary_0 ('?' expr ':' expr)?"""
        expr = self.parse_binary(0)
        if self.at(TokenKind.OPERATOR, "?"):
            self.advance()
            then_expr = self.parse_expr()
            self.expect(TokenKind.OPERATOR, ":", "conditional expression")
            else_expr = self.parse_expr()
            expr = Conditional(condition=expr, then_expr=then_expr, else_expr=else_expr)
        return expr

    def parse_binary(self, level: int) -> Expr:
        """Left-associative chain of the operators at *level*."""
        if level == len(_LEVELS):
            return self.parse_unary()

        ops = _LEVELS[level]
        left = self.parse_binary(level + 1)
        while (tok := self.current) is not None and (
            tok.kind == TokenKind.OPERATOR and tok.value in ops
        ):
            self.advance()
            right = self.parse_binary(level + 1)
            left = BinaryExpr(op=BinaryOp(tok.value), left=left, right=right)
        return left

    def parse_unary(self) -> Expr:
        """unary_op unary | primary"""
        tok = self.require("unary operator expression")
        if tok.kind != TokenKind.OPERATOR:
            return self.parse_primary()

        if tok.value not in _UNARY_OPS:
            raise InvalidOperatorError(tok.value, "unary", tok.pos)
        self.advance()
        operand = self.parse_unary()
        return UnaryExpr(op=UnaryOp(tok.value), operand=operand)

    def parse_primary(self) -> Expr:
        """NUMBER | IDENT | call | '(' expr ')'"""
        tok = self.require("primary expression")

        if tok.kind == TokenKind.NUMBER:
            self.advance()
            return _parse_number(tok)

        if tok.kind == TokenKind.IDENTIFIER:
            self.advance()
            if self.at(TokenKind.PUNCTUATION, "("):
                return self._parse_call(tok.value)
            return Variable(name=tok.value)

        if tok.is_(TokenKind.PUNCTUATION, "("):
            self.advance()
            expr = self.parse_expr()
            self.expect(TokenKind.PUNCTUATION, ")", "parenthesis expression")
            return expr

        raise ParseError(f"Unexpected token {tok.value!r} in primary expression", tok.pos)

    def _parse_call(self, name: str) -> Call:
        """'(' (expr (',' expr)*)? ')'"""
        self.expect(TokenKind.PUNCTUATION, "(", "function call")

        args: list[Expr] = []
        if not self.at(TokenKind.PUNCTUATION, ")"):
            args.append(self.parse_expr())
            while self.at(TokenKind.PUNCTUATION, ","):
                self.advance()
                args.append(self.parse_expr())

        self.expect(TokenKind.PUNCTUATION, ")", "function call")
        return Call(name=name, args=args)


def _parse_number(tok: Token) -> Number:
    """Convert a NUMBER token, dropping ' digit separators."""
    text = tok.value.replace("'", "")
    try:
        return Number(value=float(text))
    except ValueError:
        raise ParseError(f"Invalid number {tok.value!r}", tok.pos) from None


def parse_tokens(tokens: list[Token], end_pos: int | None = None) -> Expr:
    """Parse a complete token sequence into an AST.

    Args:
        tokens: Output of :func:`tokenize`.
        end_pos: Offset reported for errors at end of input. Defaults to
            the end of the last token.

    Raises:
        ParseError: If the tokens are not exactly one expression.
    """
    if end_pos is None:
        end_pos = tokens[-1].pos + len(tokens[-1].value) if tokens else 0

    parser = _Parser(tokens, end_pos)
    expr = parser.parse_expr()

    # Ensure all tokens consumed
    leftover = parser.current
    if leftover is not None:
        raise TrailingTokensError(leftover.value, leftover.pos)

    return expr


def parse_expr(source: str) -> Expr:
    """Parse an expression string into an AST.

    Args:
        source: Expression string (e.g., "psx - 20")

    Returns:
        Parsed expression AST.

    Raises:
        LexError: If tokenization fails.
        ParseError: If the expression is invalid.
    """
    return parse_tokens(tokenize(source), len(source))

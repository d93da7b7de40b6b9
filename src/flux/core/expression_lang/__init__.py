"""
Flux expression language.

Tokenizer, parser, evaluator and symbol registry for numeric expressions
that are stored as strings and re-evaluated against fresh variables.

Usage:
    from flux.core.expression_lang import Flux, install_builtins

    install_builtins()
    width = Flux("(psx - 20) <? 400")
    width.evaluate({"psx": 800})
    # result == 400.0
"""

from flux.core.expression_lang.builtins import (
    add_builtin_constants,
    add_builtin_functions,
    install_builtins,
)
from flux.core.expression_lang.evaluator import evaluate
from flux.core.expression_lang.handle import Flux, Flux2, Flux3, Flux4
from flux.core.expression_lang.parser import parse_expr, parse_tokens
from flux.core.expression_lang.registry import (
    SymbolRegistry,
    default_registry,
    register_constant,
    register_function,
)
from flux.core.expression_lang.tokenizer import Token, TokenKind, tokenize

__all__ = [
    "Flux",
    "Flux2",
    "Flux3",
    "Flux4",
    "SymbolRegistry",
    "Token",
    "TokenKind",
    "add_builtin_constants",
    "add_builtin_functions",
    "default_registry",
    "evaluate",
    "install_builtins",
    "parse_expr",
    "parse_tokens",
    "register_constant",
    "register_function",
    "tokenize",
]

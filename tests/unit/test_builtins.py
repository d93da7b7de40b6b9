"""Tests for the built-in constants and functions."""

from __future__ import annotations

import math

import pytest

from flux.core.errors import InvalidArityError, NonFiniteOperandError
from flux.core.expression_lang.builtins import (
    BUILTIN_CONSTANTS,
    BUILTIN_FUNCTION_NAMES,
    add_builtin_constants,
    add_builtin_functions,
    install_builtins,
)
from flux.core.expression_lang.evaluator import evaluate
from flux.core.expression_lang.parser import parse_expr
from flux.core.expression_lang.registry import SymbolRegistry, arity_of


@pytest.fixture
def registry() -> SymbolRegistry:
    reg = SymbolRegistry()
    install_builtins(reg)
    reg.freeze()
    return reg


def _eval(source: str, registry: SymbolRegistry, **variables: float) -> float:
    return evaluate(parse_expr(source), variables, registry)


class TestInstallation:
    def test_nothing_registered_implicitly(self) -> None:
        reg = SymbolRegistry()
        assert not reg.constants
        assert not reg.functions

    def test_constants_only(self) -> None:
        reg = SymbolRegistry()
        add_builtin_constants(reg)
        assert set(reg.constants) == set(BUILTIN_CONSTANTS)
        assert not reg.functions

    def test_functions_only(self) -> None:
        reg = SymbolRegistry()
        add_builtin_functions(reg)
        assert set(reg.functions) == set(BUILTIN_FUNCTION_NAMES)
        assert not reg.constants

    def test_install_all(self, registry: SymbolRegistry) -> None:
        assert len(registry.constants) == 13
        assert "lerp" in registry.functions
        assert "tgamma" in registry.functions

    def test_every_function_has_recorded_arity(self, registry: SymbolRegistry) -> None:
        for name, fn in registry.functions.items():
            assert arity_of(fn) is not None, name


class TestConstants:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("e", math.e),
            ("pi", math.pi),
            ("ln2", math.log(2)),
            ("sqrt2", math.sqrt(2)),
            ("phi", (1 + math.sqrt(5)) / 2),
            ("egamma", 0.5772156649015329),
        ],
    )
    def test_values(self, registry: SymbolRegistry, name: str, expected: float) -> None:
        assert registry.get_constant(name) == pytest.approx(expected)

    def test_reciprocal_constants(self, registry: SymbolRegistry) -> None:
        assert _eval("inv_pi * pi", registry) == pytest.approx(1.0)
        assert _eval("log2e * ln2", registry) == pytest.approx(1.0)
        assert _eval("log10e * ln10", registry) == pytest.approx(1.0)
        assert _eval("inv_sqrt3 * sqrt3", registry) == pytest.approx(1.0)


class TestFunctions:
    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("abs(-3)", 3.0),
            ("sqrt(16)", 4.0),
            ("cbrt(27)", 3.0),
            ("hypot(3, 4)", 5.0),
            ("atan2(1, 1)", math.pi / 4),
            ("exp2(10)", 1024.0),
            ("pow(2, 10)", 1024.0),
            ("log2(8)", 3.0),
            ("log10(1000)", 3.0),
            ("tgamma(5)", 24.0),
            ("floor(-1.5)", -2.0),
            ("ceil(1.2)", 2.0),
            ("trunc(-1.7)", -1.0),
            ("round(2.5)", 3.0),
            ("round(-2.5)", -3.0),
            ("rint(2.5)", 2.0),
            ("nearbyint(3.5)", 4.0),
            ("min(5, 2, 9)", 2.0),
            ("min(7)", 7.0),
            ("max(1, 2)", 2.0),
            ("dim(5, 3)", 2.0),
            ("dim(3, 5)", 0.0),
            ("midpoint(2, 4)", 3.0),
            ("lerp(0, 10, 0.25)", 2.5),
            ("fma(2, 3, 4)", 10.0),
            ("mod(-10, 3)", -1.0),
            ("remainder(5, 3)", -1.0),
            ("gcd(12, 18)", 6.0),
            ("lcm(4, 6)", 12.0),
        ],
    )
    def test_values(self, registry: SymbolRegistry, source: str, expected: float) -> None:
        assert _eval(source, registry) == pytest.approx(expected)

    def test_domain_errors_give_nan(self, registry: SymbolRegistry) -> None:
        assert math.isnan(_eval("sqrt(-1)", registry))
        assert math.isnan(_eval("acos(2)", registry))
        assert math.isnan(_eval("log(-1)", registry))
        assert math.isnan(_eval("remainder(1, 0)", registry))

    def test_poles_and_overflow(self, registry: SymbolRegistry) -> None:
        assert _eval("log(0)", registry) == -math.inf
        assert _eval("log1p(-1)", registry) == -math.inf
        assert _eval("exp(1000)", registry) == math.inf
        assert _eval("lgamma(0)", registry) == math.inf

    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("sinh(1000)", math.inf),
            ("sinh(-1000)", -math.inf),
            ("cosh(-1000)", math.inf),
            ("atanh(1)", math.inf),
            ("atanh(-1)", -math.inf),
            ("tgamma(0)", math.inf),
            ("tgamma(-0)", -math.inf),
            ("expm1(1000)", math.inf),
        ],
    )
    def test_signed_overflow_and_poles(
        self, registry: SymbolRegistry, source: str, expected: float
    ) -> None:
        assert _eval(source, registry) == expected

    def test_outside_pole_domain_gives_nan(self, registry: SymbolRegistry) -> None:
        assert math.isnan(_eval("tgamma(-1)", registry))
        assert math.isnan(_eval("atanh(2)", registry))

    def test_lcm_overflow_saturates(self, registry: SymbolRegistry) -> None:
        assert _eval("lcm(x, y)", registry, x=1e300, y=1e300 + 2.0**970) == math.inf

    def test_round_is_exact_near_precision_limit(self, registry: SymbolRegistry) -> None:
        assert _eval("round(n)", registry, n=4503599627370497.0) == 4503599627370497.0
        assert _eval("round(n)", registry, n=0.49999999999999994) == 0.0

    def test_nan_function(self, registry: SymbolRegistry) -> None:
        assert math.isnan(_eval("nan()", registry))

    def test_rounding_passes_infinity_through(self, registry: SymbolRegistry) -> None:
        assert _eval("floor(1 / 0)", registry) == math.inf
        assert _eval("round(-1 / 0)", registry) == -math.inf

    def test_integer_functions_reject_nan(self, registry: SymbolRegistry) -> None:
        with pytest.raises(NonFiniteOperandError):
            _eval("gcd(n, 2)", registry, n=math.nan)

    @pytest.mark.parametrize("source", ["min()", "max(1, 2, 3)", "sqrt()", "nan(1)", "lerp(1, 2)"])
    def test_wrong_arity(self, registry: SymbolRegistry, source: str) -> None:
        with pytest.raises(InvalidArityError):
            _eval(source, registry)

    def test_functions_compose_with_variables(self, registry: SymbolRegistry) -> None:
        assert _eval("max(psx - 20, 100) <? 400", registry, psx=300) == 280.0

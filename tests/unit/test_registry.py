"""Tests for the Flux symbol registry."""

from __future__ import annotations

import logging

import pytest

from flux.core.errors import InvalidArityError, RegistryError
from flux.core.expression_lang import registry as registry_module
from flux.core.expression_lang.registry import (
    SymbolRegistry,
    arity_of,
    default_registry,
    register_constants,
    with_arity,
)


@pytest.fixture
def fresh_default(monkeypatch) -> SymbolRegistry:
    """Swap the process-wide registry for an empty one."""
    reg = SymbolRegistry()
    monkeypatch.setattr(registry_module, "_default", reg)
    return reg


def _double(args: list[float]) -> float:
    return args[0] * 2


class TestRegistration:
    def test_register_constant(self) -> None:
        reg = SymbolRegistry()
        reg.register_constant("gutter", 8)
        assert reg.has_constant("gutter")
        assert reg.get_constant("gutter") == 8.0
        assert isinstance(reg.get_constant("gutter"), float)

    def test_register_function(self) -> None:
        reg = SymbolRegistry()
        reg.register_function("double", _double)
        assert reg.has_function("double")
        assert reg.get_function("double")([3.0]) == 6.0

    def test_constants_and_functions_are_separate(self) -> None:
        reg = SymbolRegistry()
        reg.register_constant("size", 1)
        assert not reg.has_function("size")

    def test_dotted_names_allowed(self) -> None:
        reg = SymbolRegistry()
        reg.register_constant("layout.gap", 4)
        assert reg.get_constant("layout.gap") == 4.0

    @pytest.mark.parametrize("name", ["", "1abc", "a b", "a-b", "(x)", ".x"])
    def test_invalid_names(self, name: str) -> None:
        reg = SymbolRegistry()
        with pytest.raises(RegistryError, match="Invalid symbol name"):
            reg.register_constant(name, 1)

    def test_non_callable_function(self) -> None:
        reg = SymbolRegistry()
        with pytest.raises(RegistryError, match="not callable"):
            reg.register_function("f", 42)  # type: ignore[arg-type]

    def test_replacing_is_allowed_and_logged(self, caplog) -> None:
        reg = SymbolRegistry()
        reg.register_constant("gutter", 8)
        with caplog.at_level(logging.DEBUG, logger="flux.core.expression_lang.registry"):
            reg.register_constant("gutter", 12)
        assert reg.get_constant("gutter") == 12.0
        assert "Replacing constant gutter" in caplog.text

    def test_register_constants(self) -> None:
        reg = SymbolRegistry()
        register_constants({"a": 1, "b": 2}, reg)
        assert dict(reg.constants) == {"a": 1.0, "b": 2.0}

    def test_views_are_read_only(self) -> None:
        reg = SymbolRegistry()
        with pytest.raises(TypeError):
            reg.constants["x"] = 1.0  # type: ignore[index]
        with pytest.raises(TypeError):
            reg.functions["f"] = _double  # type: ignore[index]


class TestFreeze:
    def test_freeze_blocks_registration(self) -> None:
        reg = SymbolRegistry()
        reg.register_constant("a", 1)
        reg.freeze()
        assert reg.frozen
        with pytest.raises(RegistryError, match="frozen"):
            reg.register_constant("b", 2)
        with pytest.raises(RegistryError, match="frozen"):
            reg.register_function("f", _double)

    def test_frozen_registry_still_readable(self) -> None:
        reg = SymbolRegistry()
        reg.register_constant("a", 1)
        reg.freeze()
        assert reg.get_constant("a") == 1.0

    def test_copy_is_unfrozen_and_independent(self) -> None:
        reg = SymbolRegistry()
        reg.register_constant("a", 1)
        reg.freeze()
        clone = reg.copy()
        assert not clone.frozen
        clone.register_constant("b", 2)
        assert clone.has_constant("a")
        assert not reg.has_constant("b")

    def test_repr(self) -> None:
        reg = SymbolRegistry()
        reg.register_constant("a", 1)
        reg.freeze()
        assert repr(reg) == "SymbolRegistry(1 constants, 0 functions, frozen)"


class TestArity:
    def test_exact_arity(self) -> None:
        reg = SymbolRegistry()
        reg.register_function("double", _double, arity=1)
        fn = reg.get_function("double")
        assert fn([2.0]) == 4.0
        with pytest.raises(InvalidArityError, match="expected 1, got 0"):
            fn([])

    def test_range_arity(self) -> None:
        fn = with_arity("f", lambda args: float(len(args)), (1, 2))
        assert fn([1.0, 2.0]) == 2.0
        with pytest.raises(InvalidArityError, match="expected 1 to 2, got 3"):
            fn([1.0, 2.0, 3.0])

    def test_unbounded_arity(self) -> None:
        fn = with_arity("f", lambda args: float(len(args)), (2, None))
        assert fn([1.0] * 10) == 10.0
        with pytest.raises(InvalidArityError, match="expected at least 2, got 1"):
            fn([1.0])

    def test_arity_check_runs_before_function(self) -> None:
        calls: list[list[float]] = []

        def record(args: list[float]) -> float:
            calls.append(args)
            return 0.0

        fn = with_arity("record", record, 0)
        with pytest.raises(InvalidArityError):
            fn([1.0])
        assert calls == []

    def test_arity_of(self) -> None:
        assert arity_of(with_arity("f", _double, 1)) == (1, 1)
        assert arity_of(with_arity("f", _double, (0, None))) == (0, None)
        assert arity_of(_double) is None

    def test_unchecked_function_receives_any_count(self) -> None:
        reg = SymbolRegistry()
        reg.register_function("count", lambda args: float(len(args)))
        assert reg.get_function("count")([1.0, 2.0, 3.0]) == 3.0


class TestDefaultRegistry:
    def test_default_registry_is_shared(self, fresh_default: SymbolRegistry) -> None:
        assert default_registry() is fresh_default
        assert default_registry() is default_registry()

    def test_module_level_registration(self, fresh_default: SymbolRegistry) -> None:
        registry_module.register_constant("gutter", 8)
        registry_module.register_function("double", _double, arity=1)
        assert fresh_default.get_constant("gutter") == 8.0
        assert fresh_default.get_function("double")([1.0]) == 2.0

    def test_register_constants_defaults_to_process_registry(
        self, fresh_default: SymbolRegistry
    ) -> None:
        register_constants({"a": 1})
        assert fresh_default.has_constant("a")

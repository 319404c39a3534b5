"""Tests for flexgrid.calc builtin functions and the function registry."""

from __future__ import annotations

import math

import pytest
from flexgrid.calc._functions import (
    BLANK,
    FunctionRegistry,
    FunctionSpec,
    is_blank,
    is_error_value,
    is_supported,
    safe_divide,
    safe_power,
)


@pytest.fixture
def fns() -> FunctionRegistry:
    return FunctionRegistry()


def _call(fns: FunctionRegistry, name: str, *args: float) -> float:
    spec = fns.get(name)
    assert spec is not None
    return spec(list(args))


class TestAggregates:
    def test_sum(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "SUM", 1, 2, 3) == 6.0

    def test_sum_empty(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "SUM") == 0.0

    def test_average(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "AVERAGE", 2, 4, 6) == 4.0
        assert _call(fns, "AVG", 1, 2) == 1.5

    def test_average_empty_is_zero(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "AVERAGE") == 0.0

    def test_max_min(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "MAX", 1, 5, 3) == 5.0
        assert _call(fns, "MIN", 1, 5, 3) == 1.0

    @pytest.mark.parametrize("name", ["MAX", "MIN"])
    def test_max_min_nan_in_any_position(self, fns: FunctionRegistry, name: str) -> None:
        assert math.isnan(_call(fns, name, math.nan, 1))
        assert math.isnan(_call(fns, name, 1, math.nan))
        assert math.isnan(_call(fns, name, 1, math.nan, 3))

    def test_max_min_keep_infinities(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "MAX", 1, math.inf) == math.inf
        assert _call(fns, "MIN", 1, BLANK) == BLANK

    def test_max_min_empty_is_nan(self, fns: FunctionRegistry) -> None:
        assert math.isnan(_call(fns, "MAX"))
        assert math.isnan(_call(fns, "MIN"))


class TestMath:
    def test_abs(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "ABS", -5) == 5.0

    def test_sqrt(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "SQRT", 16) == 4.0

    def test_sqrt_negative_is_nan(self, fns: FunctionRegistry) -> None:
        assert math.isnan(_call(fns, "SQRT", -1))

    def test_round(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "ROUND", 3.456, 2) == pytest.approx(3.46)
        assert _call(fns, "ROUND", 3.7) == 4.0
        assert _call(fns, "ROUND", 1234.5678, -2) == 1200.0

    def test_round_passes_non_finite(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "ROUND", math.inf, 2) == math.inf
        assert is_blank(_call(fns, "ROUND", BLANK))

    def test_floor_ceiling(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "FLOOR", 2.7) == 2.0
        assert _call(fns, "FLOOR", -2.1) == -3.0
        assert _call(fns, "CEILING", 2.1) == 3.0
        assert _call(fns, "CEIL", -2.7) == -2.0

    def test_power(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "POWER", 2, 8) == 256.0
        assert _call(fns, "POW", 2, 0.5) == pytest.approx(math.sqrt(2))

    def test_power_domain(self, fns: FunctionRegistry) -> None:
        assert math.isnan(_call(fns, "POWER", -8, 1 / 3))
        assert _call(fns, "POWER", 0, -1) == math.inf
        assert _call(fns, "POWER", 10, 400) == math.inf

    def test_log(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "LOG", 1000) == 3.0
        assert _call(fns, "LOG", 8, 2) == pytest.approx(3.0)

    def test_log_zero_matches_ln(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "LOG", 0) == -math.inf
        assert _call(fns, "LOG", 0, 2) == -math.inf
        assert _call(fns, "LOG", 0) == _call(fns, "LN", 0)

    def test_log_domain_is_nan(self, fns: FunctionRegistry) -> None:
        assert math.isnan(_call(fns, "LOG", -1))
        assert math.isnan(_call(fns, "LOG", 10, 1))

    def test_ln(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "LN", math.e) == pytest.approx(1.0)
        assert _call(fns, "LN", 0) == -math.inf
        assert math.isnan(_call(fns, "LN", -1))

    def test_exp(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "EXP", 0) == 1.0
        assert _call(fns, "EXP", 1000) == math.inf


class TestConditional:
    def test_if_true_false(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "IF", 1, 10, 20) == 10.0
        assert _call(fns, "IF", 0, 10, 20) == 20.0

    def test_if_any_nonzero_is_true(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "IF", -0.5, 10, 20) == 10.0

    def test_if_false_defaults_to_zero(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "IF", 0, 10) == 0.0

    def test_blank(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "BLANK") == -math.inf
        assert is_blank(_call(fns, "BLANK"))


class TestFinancial:
    def test_pmt(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "PMT", 0.05 / 12, 60, 10000) == pytest.approx(-188.71, abs=0.01)

    def test_pmt_zero_rate(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "PMT", 0, 10, 1000) == -100.0

    def test_fv(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "FV", 0.1, 1, 0, 1000) == pytest.approx(-1100.0)

    def test_fv_default_pv(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "FV", 0.1, 2, -100) == pytest.approx(210.0)

    def test_fv_zero_rate(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "FV", 0, 10, -100) == 1000.0

    def test_pv(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "PV", 0.1, 1, -110) == pytest.approx(100.0)

    def test_pv_zero_rate(self, fns: FunctionRegistry) -> None:
        assert _call(fns, "PV", 0, 5, -10) == 50.0


class TestArity:
    def test_too_few(self, fns: FunctionRegistry) -> None:
        assert math.isnan(_call(fns, "PMT", 0.1, 12))

    def test_too_many(self, fns: FunctionRegistry) -> None:
        assert math.isnan(_call(fns, "ABS", 1, 2))
        assert math.isnan(_call(fns, "BLANK", 1))

    def test_accepts(self) -> None:
        spec = FunctionSpec("X", lambda args: 0.0, 1, 2)
        assert not spec.accepts(0)
        assert spec.accepts(1)
        assert spec.accepts(2)
        assert not spec.accepts(3)

    def test_variadic(self) -> None:
        spec = FunctionSpec("X", lambda args: 0.0)
        assert spec.accepts(0)
        assert spec.accepts(50)


class TestRegistry:
    def test_lookup_case_insensitive(self, fns: FunctionRegistry) -> None:
        assert fns.has("sum")
        assert fns.get("Sum") is fns.get("SUM")

    def test_unknown(self, fns: FunctionRegistry) -> None:
        assert fns.get("VLOOKUP") is None
        assert not fns.has("VLOOKUP")

    def test_register_custom(self, fns: FunctionRegistry) -> None:
        fns.register("double", lambda args: args[0] * 2, 1, 1)
        assert fns.has("DOUBLE")
        assert "DOUBLE" in fns.supported_functions
        assert _call(fns, "double", 4) == 8.0
        assert math.isnan(_call(fns, "DOUBLE"))

    def test_registries_are_independent(self, fns: FunctionRegistry) -> None:
        fns.register("DOUBLE", lambda args: args[0] * 2)
        assert not FunctionRegistry().has("DOUBLE")

    def test_builtins_supported(self) -> None:
        for name in ("SUM", "AVERAGE", "AVG", "PMT", "FV", "PV", "BLANK", "ceil"):
            assert is_supported(name), name
        assert not is_supported("VLOOKUP")


class TestHelpers:
    def test_safe_divide(self) -> None:
        assert safe_divide(10, 4) == 2.5
        assert safe_divide(1, 0) == math.inf
        assert safe_divide(-1, 0) == -math.inf
        assert safe_divide(1, -0.0) == -math.inf
        assert math.isnan(safe_divide(0, 0))

    def test_safe_power(self) -> None:
        assert safe_power(2, 3) == 8.0
        assert math.isnan(safe_power(-1, 0.5))

    def test_is_error_value(self) -> None:
        assert is_error_value(math.nan)
        assert is_error_value(math.inf)
        assert not is_error_value(BLANK)
        assert not is_error_value(1.0)

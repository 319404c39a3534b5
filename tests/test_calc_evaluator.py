"""Tests for flexgrid.calc formula compilation and evaluation."""

from __future__ import annotations

import math

import pytest
from flexgrid.calc._calclog import CalcLogger
from flexgrid.calc._evaluator import (
    FormulaEngine,
    compile_expr,
    create_formula_signal,
    evaluate,
)
from flexgrid.calc._functions import FunctionRegistry, is_blank
from flexgrid.calc._parser import FormulaSyntaxError, parse
from flexgrid.calc._protocol import LogEventType
from flexgrid.calc._reactive import Signal
from flexgrid.calc._registry import SignalRegistry


def _registry_with(**names: float) -> tuple[SignalRegistry, dict[str, Signal[float]]]:
    """Registry with one named input per kwarg, placed down column A."""
    registry = SignalRegistry()
    signals: dict[str, Signal[float]] = {}
    for row, (name, value) in enumerate(names.items()):
        signal = Signal(float(value))
        registry.register_cell_signal(0, row, signal)
        registry.register_cell_setter(0, row, signal.set)
        registry.register_named_signal(name, signal)
        signals[name] = signal
    return registry, signals


def _eval(formula: str) -> float:
    return evaluate(SignalRegistry(), formula)


class TestArithmetic:
    @pytest.mark.parametrize(
        ("formula", "expected"),
        [
            ("42", 42.0),
            ("1+2", 3.0),
            ("5-3", 2.0),
            ("4*3", 12.0),
            ("10/4", 2.5),
            ("2^3", 8.0),
            ("(1+2)*3", 9.0),
            ("=1+2*3", 7.0),
            ("1.5*2", 3.0),
            ("-5+2", -3.0),
            ("", 0.0),
        ],
    )
    def test_values(self, formula: str, expected: float) -> None:
        assert _eval(formula) == expected

    def test_chained_subtraction_right_recursive(self) -> None:
        assert _eval("10-3-2") == 9.0

    def test_chained_division_right_recursive(self) -> None:
        assert _eval("8/4/2") == 4.0

    def test_parentheses_restore_left_to_right(self) -> None:
        assert _eval("(10-3)-2") == 5.0
        assert _eval("(8/4)/2") == 1.0

    def test_power_right_associative(self) -> None:
        assert _eval("2^3^2") == 512.0

    def test_unary_minus_then_power(self) -> None:
        assert _eval("-2^2") == 4.0

    def test_long_sum(self) -> None:
        assert _eval("+".join(["1"] * 1200)) == 1200.0

    def test_long_subtraction_keeps_right_nesting(self) -> None:
        # 1-(1-(1-...)) alternates between 1 and 0
        assert _eval("-".join(["1"] * 1201)) == 1.0
        assert _eval("-".join(["1"] * 1200)) == 0.0

    def test_long_chain_reacts(self) -> None:
        registry, signals = _registry_with(x=1.0)
        formula = create_formula_signal(registry, "+".join(["x"] * 1500))
        assert formula() == 1500.0
        signals["x"].set(2.0)
        assert formula() == 3000.0


class TestDivisionByZero:
    def test_positive_over_zero(self) -> None:
        assert _eval("1/0") == math.inf

    def test_negative_over_zero(self) -> None:
        assert _eval("-1/0") == -math.inf

    def test_zero_over_zero(self) -> None:
        assert math.isnan(_eval("0/0"))


class TestComparisons:
    @pytest.mark.parametrize(
        ("formula", "expected"),
        [
            ("1<2", 1.0),
            ("2<1", 0.0),
            ("5>3", 1.0),
            ("3<=3", 1.0),
            ("4<=3", 0.0),
            ("3>=4", 0.0),
            ("1<>2", 1.0),
            ("2<>2", 0.0),
            ("1+1>1", 1.0),
        ],
    )
    def test_values(self, formula: str, expected: float) -> None:
        assert _eval(formula) == expected


class TestFunctions:
    @pytest.mark.parametrize(
        ("formula", "expected"),
        [
            ("SUM(1,2,3)", 6.0),
            ("AVERAGE(2,4,6)", 4.0),
            ("MAX(1,5,3)", 5.0),
            ("MIN(1,5,3)", 1.0),
            ("ABS(0-5)", 5.0),
            ("SQRT(16)", 4.0),
            ("IF(1,10,20)", 10.0),
            ("IF(0,10,20)", 20.0),
            ("POWER(2,8)", 256.0),
            ("SQRT(SUM(9,16))", 5.0),
            ("sum(1,2)", 3.0),
            ("AVERAGE()", 0.0),
            ("IF(2>1, 7)", 7.0),
        ],
    )
    def test_values(self, formula: str, expected: float) -> None:
        assert _eval(formula) == expected

    def test_round(self) -> None:
        assert _eval("ROUND(3.456,2)") == pytest.approx(3.46)

    def test_pmt(self) -> None:
        assert _eval("PMT(0.05/12,60,10000)") == pytest.approx(-188.71, abs=0.01)

    def test_fv(self) -> None:
        assert _eval("FV(0.1,1,0,1000)") == pytest.approx(-1100.0)

    def test_unknown_function_is_nan(self) -> None:
        assert math.isnan(_eval("VLOOKUP(1,2)"))
        assert math.isnan(_eval("FOO(1)+1"))

    def test_max_min_propagate_nan(self) -> None:
        for formula in ("MAX(0/0,1)", "MAX(1,0/0)", "MIN(0/0,1)", "MIN(1,0/0)"):
            assert math.isnan(_eval(formula)), formula

    def test_log_zero(self) -> None:
        assert _eval("LOG(0)") == -math.inf

    def test_wrong_arity_is_nan(self) -> None:
        assert math.isnan(_eval("ABS(1,2)"))

    def test_blank(self) -> None:
        assert is_blank(_eval("BLANK()"))
        assert is_blank(_eval("IF(0, 1, BLANK())"))

    def test_custom_function(self) -> None:
        functions = FunctionRegistry()
        functions.register("DOUBLE", lambda args: args[0] * 2, 1, 1)
        engine = FormulaEngine(SignalRegistry(), functions=functions)
        assert engine.evaluate("DOUBLE(4)+1") == 9.0


class TestReferences:
    def test_undefined_name_is_zero(self) -> None:
        assert _eval("undefined+5") == 5.0

    def test_undefined_cell_is_zero(self) -> None:
        assert _eval("Z99+5") == 5.0

    def test_cell_and_name(self) -> None:
        registry, _ = _registry_with(x=10.0, y=4.0)
        assert evaluate(registry, "A1*2") == 20.0
        assert evaluate(registry, "x+A2") == 14.0
        assert evaluate(registry, "x/y") == 2.5

    def test_names_are_case_sensitive(self) -> None:
        registry, _ = _registry_with(x=10.0)
        assert evaluate(registry, "X+1") == 1.0

    def test_compile_same_tree_against_two_registries(self) -> None:
        expr = parse("x*2")
        first, _ = _registry_with(x=1.0)
        second, _ = _registry_with(x=5.0)
        assert compile_expr(first, expr)() == 2.0
        assert compile_expr(second, expr)() == 10.0

    def test_compile_does_not_mutate_registry(self) -> None:
        registry, _ = _registry_with(x=1.0)
        before = dict(registry.cell_signals)
        compile_expr(registry, parse("x+A1+B7+missing"))
        assert registry.cell_signals == before
        assert registry.cell_formulas == {}

    def test_compile_rejects_non_expression(self) -> None:
        with pytest.raises(TypeError):
            compile_expr(SignalRegistry(), "x")  # type: ignore[arg-type]


class TestReactivity:
    def test_named_input_change(self) -> None:
        registry, signals = _registry_with(x=10.0)
        formula = create_formula_signal(registry, "=x+5")
        assert formula() == 15.0
        signals["x"].set(20.0)
        assert formula() == 25.0

    def test_write_through_registry_setter(self) -> None:
        registry, _ = _registry_with(x=10.0)
        formula = create_formula_signal(registry, "=A1*3")
        assert formula() == 30.0
        setter = registry.get_cell_setter(0, 0)
        assert setter is not None
        setter(2.0)
        assert formula() == 6.0

    def test_cached_between_changes(self) -> None:
        registry, signals = _registry_with(x=1.0)
        formula = create_formula_signal(registry, "x*2")
        formula()
        formula()
        assert formula.compute_count == 1
        signals["x"].set(3.0)
        assert formula.compute_count == 1
        assert formula() == 6.0
        assert formula.compute_count == 2

    def test_formula_reads_formula(self) -> None:
        registry, signals = _registry_with(x=2.0)
        engine = FormulaEngine(registry)
        doubled = engine.formula_signal("x*2", col=1, row=0)
        registry.register_cell_signal(1, 0, doubled)
        total = engine.formula_signal("B1+1", col=2, row=0)
        assert total() == 5.0
        signals["x"].set(10.0)
        assert total() == 21.0

    def test_unrelated_input_does_not_recompute(self) -> None:
        registry, signals = _registry_with(x=1.0, y=1.0)
        formula = create_formula_signal(registry, "x+1")
        formula()
        signals["y"].set(99.0)
        assert not formula.dirty
        assert formula() == 2.0

    def test_syntax_error_propagates(self) -> None:
        with pytest.raises(FormulaSyntaxError):
            create_formula_signal(SignalRegistry(), "=1+")


class TestTrace:
    def test_evaluation_logged(self) -> None:
        registry, _ = _registry_with(x=10.0)
        log = CalcLogger(enabled=True)
        engine = FormulaEngine(registry, sink=log)
        formula = engine.formula_signal("=x+5", col=2, row=0)
        formula()
        entries = log.entries_chronological()
        assert [e.event_type for e in entries] == [
            LogEventType.FORMULA_EVALUATING,
            LogEventType.FORMULA_EVALUATED,
        ]
        assert entries[0].cell_address == "C1"
        assert entries[0].message == "Evaluating C1: =x+5"
        assert entries[1].new_value == 15.0
        assert entries[1].message == "C1 = 15.0000"

    def test_cached_read_not_logged(self) -> None:
        log = CalcLogger(enabled=True)
        formula = FormulaEngine(SignalRegistry(), sink=log).formula_signal("1+1")
        formula()
        formula()
        assert len(log) == 2

    def test_blank_result_not_logged(self) -> None:
        log = CalcLogger(enabled=True)
        formula = FormulaEngine(SignalRegistry(), sink=log).formula_signal("BLANK()")
        assert is_blank(formula())
        assert len(log) == 0

    def test_sink_does_not_change_result(self) -> None:
        registry, _ = _registry_with(x=3.0)
        quiet = FormulaEngine(registry).formula_signal("x^2")
        traced = FormulaEngine(registry, sink=CalcLogger(enabled=True)).formula_signal("x^2")
        assert quiet() == traced() == 9.0

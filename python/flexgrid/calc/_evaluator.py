"""FormulaEngine: compiles expression trees into reactive accessors.

Compilation is a structural recursion over the tree. Each node becomes a
zero-argument closure; cell and named references close over the registry's
accessors, so every call reads current values. ``create_formula_signal``
wraps the compiled closure in a ``Memo`` that caches the result until one of
the accessors it read changes.

Numeric problems never raise here. Undefined references read as 0.0, unknown
functions compile to a constant NaN, and division by zero follows IEEE
float semantics.
"""

from __future__ import annotations

import logging
from typing import Callable

from flexgrid.calc._ast import (
    BinaryOp,
    CellRef,
    Expr,
    FunctionCall,
    NamedRef,
    Number,
    Parenthesized,
)
from flexgrid.calc._calclog import NullSink
from flexgrid.calc._functions import NAN, FunctionRegistry, is_blank, safe_divide, safe_power
from flexgrid.calc._parser import parse
from flexgrid.calc._protocol import TraceSink
from flexgrid.calc._reactive import Memo, create_memo
from flexgrid.calc._registry import Accessor, SignalRegistry

logger = logging.getLogger(__name__)

_DEFAULT_FUNCTIONS = FunctionRegistry()

# ---------------------------------------------------------------------------
# Operator kernel
# ---------------------------------------------------------------------------

_BINARY_OPS: dict[str, Callable[[float, float], float]] = {
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "*": lambda a, b: a * b,
    "/": safe_divide,
    "^": safe_power,
    "<": lambda a, b: 1.0 if a < b else 0.0,
    ">": lambda a, b: 1.0 if a > b else 0.0,
    "<=": lambda a, b: 1.0 if a <= b else 0.0,
    ">=": lambda a, b: 1.0 if a >= b else 0.0,
    "<>": lambda a, b: 1.0 if a != b else 0.0,
}


def _constant(value: float) -> Accessor:
    return lambda: value


def compile_expr(
    registry: SignalRegistry,
    expr: Expr,
    functions: FunctionRegistry | None = None,
) -> Accessor:
    """Compile *expr* against *registry* into a zero-argument accessor.

    Pure: the registry is only read, and the same tree may be compiled
    against any number of registries.
    """
    functions = functions if functions is not None else _DEFAULT_FUNCTIONS

    if isinstance(expr, Number):
        return _constant(expr.value)

    if isinstance(expr, CellRef):
        signal = registry.get_cell_signal(expr.col, expr.row)
        # Blank cells read as zero, like a spreadsheet.
        return signal if signal is not None else _constant(0.0)

    if isinstance(expr, NamedRef):
        signal = registry.get_named_signal(expr.name)
        return signal if signal is not None else _constant(0.0)

    if isinstance(expr, BinaryOp):
        return _compile_chain(registry, expr, functions)

    if isinstance(expr, FunctionCall):
        spec = functions.get(expr.name)
        if spec is None:
            logger.debug("Unsupported function: %s", expr.name)
            return _constant(NAN)
        arg_signals = [compile_expr(registry, arg, functions) for arg in expr.args]
        return lambda: spec([s() for s in arg_signals])

    if isinstance(expr, Parenthesized):
        return compile_expr(registry, expr.inner, functions)

    raise TypeError(f"Not an expression node: {expr!r}")


def _nan_op(a: float, b: float) -> float:
    return NAN


def _compile_chain(
    registry: SignalRegistry,
    expr: BinaryOp,
    functions: FunctionRegistry,
) -> Accessor:
    """Compile a run of right-nested BinaryOps (``a-(b-(c-d))``) without recursion.

    Chained operators parse right-nested, so a long ``1+1+...`` formula is a
    deep right spine; walking it in a loop keeps both compile and read flat.
    """
    steps: list[tuple[Accessor, Callable[[float, float], float]]] = []
    node: Expr = expr
    while isinstance(node, BinaryOp):
        operation = _BINARY_OPS.get(node.op)
        if operation is None:
            logger.debug("Unsupported operator: %s", node.op)
            operation = _nan_op
        steps.append((compile_expr(registry, node.left, functions), operation))
        node = node.right
    last = compile_expr(registry, node, functions)

    if len(steps) == 1:
        left, operation = steps[0]
        return lambda: operation(left(), last())

    steps.reverse()

    def run() -> float:
        value = last()
        for left_value, op in steps:
            value = op(left_value(), value)
        return value

    return run


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class FormulaEngine:
    """Compiles formulas against one registry, reporting to a trace sink.

    Usage::

        engine = FormulaEngine(registry, sink=CalcLogger(enabled=True))
        total = engine.formula_signal("=SUM(A1, B1)", col=2, row=0)
        total()  # computed and cached until A1 or B1 changes
    """

    def __init__(
        self,
        registry: SignalRegistry,
        functions: FunctionRegistry | None = None,
        sink: TraceSink | None = None,
    ) -> None:
        self.registry = registry
        self.functions = functions if functions is not None else _DEFAULT_FUNCTIONS
        self.sink: TraceSink = sink if sink is not None else NullSink()

    def compile(self, expr: Expr) -> Accessor:
        return compile_expr(self.registry, expr, self.functions)

    def formula_signal(self, formula: str, col: int = 0, row: int = 0) -> Memo[float]:
        """Parse and compile *formula* into a memoized reactive accessor.

        Raises FormulaSyntaxError if the text does not parse. *col* and *row*
        only label trace events.
        """
        compute = self.compile(parse(formula))
        sink = self.sink

        def run() -> float:
            result = compute()
            # BLANK results are frequent in templated sheets; keep them out of the trace.
            if not is_blank(result):
                sink.log_formula_evaluating(col, row, formula)
                sink.log_formula_evaluated(col, row, formula, result)
            return result

        return create_memo(run)

    def evaluate(self, formula: str) -> float:
        """Parse, compile and read *formula* once, without memoization."""
        return self.compile(parse(formula))()


def create_formula_signal(
    registry: SignalRegistry,
    formula: str,
    col: int = 0,
    row: int = 0,
    sink: TraceSink | None = None,
) -> Memo[float]:
    """Module-level shortcut for ``FormulaEngine(registry, sink=sink).formula_signal``."""
    return FormulaEngine(registry, sink=sink).formula_signal(formula, col, row)


def evaluate(registry: SignalRegistry, formula: str) -> float:
    """Evaluate *formula* against the current state of *registry*."""
    return FormulaEngine(registry).evaluate(formula)

"""ReactiveSheet: a live, self-updating instance of a ReactiveModel."""

from __future__ import annotations

import logging
import math
from typing import Union

from flexgrid._format import format_value
from flexgrid._model import Empty, Formula, Input, Label, ReactiveModel
from flexgrid._utils import a1_to_colrow, format_address
from flexgrid.calc._calclog import NullSink
from flexgrid.calc._evaluator import FormulaEngine
from flexgrid.calc._functions import FunctionRegistry
from flexgrid.calc._graph import DependencyGraph
from flexgrid.calc._protocol import CellDelta, RecalcResult, TraceSink
from flexgrid.calc._reactive import Memo, Signal
from flexgrid.calc._registry import SignalRegistry

logger = logging.getLogger(__name__)

CellKey = Union[str, tuple[int, int]]


def _values_differ(a: float, b: float, tolerance: float) -> bool:
    """Check if two values differ beyond tolerance."""
    if math.isnan(a) or math.isnan(b):
        return not (math.isnan(a) and math.isnan(b))
    if math.isinf(a) or math.isinf(b):
        return a != b
    return abs(a - b) > tolerance


class ReactiveSheet:
    """Instantiates a model against a fresh SignalRegistry.

    Every Input cell becomes a Signal registered by position and by name.
    Every Formula cell becomes a memoized accessor, compiled in dependency
    order so formulas may refer to formula cells placed after them.

    Usage::

        sheet = ReactiveSheet(model)
        sheet.value(1, 5)            # read a cell by zero-based (col, row)
        sheet.set_input("loan", 250000)
        sheet["B6"]                  # already reflects the new loan
    """

    def __init__(
        self,
        model: ReactiveModel,
        functions: FunctionRegistry | None = None,
        sink: TraceSink | None = None,
    ) -> None:
        self.model = model
        self.registry = SignalRegistry()
        self.sink: TraceSink = sink if sink is not None else NullSink()
        self._engine = FormulaEngine(self.registry, functions, self.sink)
        self._graph = DependencyGraph()
        self._inputs: dict[tuple[int, int], Input] = {}
        self._names: dict[str, tuple[int, int]] = {}
        self._formulas: dict[tuple[int, int], Memo[float]] = {}
        self._build()

    def _build(self) -> None:
        pending: dict[tuple[int, int], Formula] = {}
        for positioned in self.model.cells:
            cell = positioned.cell
            key = (positioned.position.col, positioned.position.row)
            if isinstance(cell, Input):
                signal = Signal(float(cell.initial))
                self.registry.register_cell_signal(*key, signal)
                self.registry.register_cell_setter(*key, signal.set)
                self.registry.register_named_signal(cell.name, signal)
                self._inputs[key] = cell
                self._names[cell.name] = key

        # Names resolve to input cells, so formulas are graphed after all inputs.
        for positioned in self.model.cells:
            cell = positioned.cell
            if isinstance(cell, Formula):
                key = (positioned.position.col, positioned.position.row)
                self._graph.add_formula(key, cell.expr, named_cells=self._names)
                pending[key] = cell

        for key in self._graph.topological_order():
            col, row = key
            expr = pending[key].expr
            memo = self._engine.formula_signal(expr, col, row)
            self.registry.register_cell_signal(col, row, memo)
            self.registry.register_cell_formula(col, row, expr)
            self._formulas[key] = memo

        logger.debug(
            "Built sheet with %d inputs and %d formulas", len(self._inputs), len(self._formulas),
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @property
    def names(self) -> list[str]:
        return list(self._names)

    @property
    def formula_cells(self) -> list[tuple[int, int]]:
        return list(self._formulas)

    def resolve(self, key: CellKey) -> tuple[int, int]:
        """Map an input name, an A1 address or a ``(col, row)`` tuple to ``(col, row)``."""
        if isinstance(key, tuple):
            return key
        if key in self._names:
            return self._names[key]
        try:
            return a1_to_colrow(key)
        except ValueError:
            raise KeyError(f"Unknown input name or address: {key!r}") from None

    def value(self, col: int, row: int) -> float:
        """Current value of a cell; cells without a value read as 0.0."""
        signal = self.registry.get_cell_signal(col, row)
        return signal() if signal is not None else 0.0

    def __getitem__(self, key: CellKey) -> float:
        return self.value(*self.resolve(key))

    def formula_text(self, col: int, row: int) -> str | None:
        """The verbatim formula text of a cell, for export round-trips."""
        return self.registry.get_cell_formula(col, row)

    def display(self, col: int, row: int) -> str:
        """Display string for a cell, as a grid renderer would show it."""
        cell = self.model.try_get_cell(row, col)
        if cell is None or isinstance(cell, Empty):
            return ""
        if isinstance(cell, Label):
            return cell.text
        return format_value(self.value(col, row), cell.format)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _input_cell(self, key: CellKey) -> tuple[int, int]:
        col, row = self.resolve(key)
        if self.registry.get_cell_setter(col, row) is None:
            raise KeyError(f"{format_address(col, row)} is not an input cell")
        return col, row

    def set_input(self, key: CellKey, value: float) -> None:
        """Write an input cell; dependent formulas see the value on next read."""
        col, row = self._input_cell(key)
        setter = self.registry.cell_setters[(col, row)]
        old = self.value(col, row)
        new = float(value)
        setter(new)
        self.sink.log_input_changed(col, row, self._inputs[(col, row)].name, old, new)

    def __setitem__(self, key: CellKey, value: float) -> None:
        self.set_input(key, value)

    # ------------------------------------------------------------------
    # Whole-sheet evaluation
    # ------------------------------------------------------------------

    def calculate(self) -> dict[str, float]:
        """Read every formula cell in dependency order.

        Returns a dict of A1 address -> current value.
        """
        return {
            format_address(col, row): memo()
            for (col, row), memo in self._formulas.items()
        }

    def recalculate(
        self,
        perturbations: dict[CellKey, float],
        tolerance: float = 1e-10,
    ) -> RecalcResult:
        """Write input cells and report which formula cells changed.

        Every key is checked before any write, so a ``KeyError`` leaves the
        sheet untouched.
        """
        targets = [(self._input_cell(key), value) for key, value in perturbations.items()]
        old_values = {key: memo() for key, memo in self._formulas.items()}

        roots: set[tuple[int, int]] = set()
        for cell, value in targets:
            self.set_input(cell, value)
            roots.add(cell)

        affected = self._graph.affected_cells(roots)
        for col, row in affected:
            for root in roots:
                if (col, row) in self._graph.dependents.get(root, set()):
                    self.sink.log_dependency_triggered(self._inputs[root].name, col, row)

        deltas: list[CellDelta] = []
        for key, memo in self._formulas.items():
            old_val = old_values[key]
            new_val = memo()
            if _values_differ(old_val, new_val, tolerance):
                deltas.append(CellDelta(
                    address=format_address(*key),
                    old_value=old_val,
                    new_value=new_val,
                    formula=self.registry.get_cell_formula(*key),
                ))

        return RecalcResult(
            perturbations={
                k if isinstance(k, str) else format_address(*k): float(v)
                for k, v in perturbations.items()
            },
            deltas=tuple(deltas),
            total_formula_cells=len(self._formulas),
            propagated_cells=len(deltas),
            max_chain_depth=self._graph.max_depth(roots),
        )

    def __repr__(self) -> str:
        rows, cols = self.model.dimensions()
        return (
            f"<ReactiveSheet {rows}x{cols} inputs={len(self._inputs)} "
            f"formulas={len(self._formulas)}>"
        )

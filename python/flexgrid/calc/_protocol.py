"""TraceSink protocol and result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


class LogEventType:
    INPUT_CHANGED = "INPUT_CHANGED"
    FORMULA_EVALUATING = "FORMULA_EVALUATING"
    FORMULA_EVALUATED = "FORMULA_EVALUATED"
    DEPENDENCY_TRIGGERED = "DEPENDENCY_TRIGGERED"


@dataclass(frozen=True)
class LogEntry:
    """A single calculation-trace event."""

    timestamp: float  # milliseconds, monotonic
    event_type: str
    cell_address: str | None
    formula: str | None
    old_value: float | None
    new_value: float | None
    message: str


@dataclass(frozen=True)
class CellDelta:
    """A single formula cell's value change from recalculation."""

    address: str  # A1-style, e.g. "B3"
    old_value: float
    new_value: float
    formula: str | None = None  # the formula that produced new_value


@dataclass(frozen=True)
class RecalcResult:
    """Result of a perturbation-driven recalculation."""

    perturbations: dict[str, float]  # input name or address -> new value
    deltas: tuple[CellDelta, ...]  # cells that changed
    total_formula_cells: int = 0
    propagated_cells: int = 0  # formula cells whose value actually changed
    max_chain_depth: int = 0  # longest dependency chain from perturbed inputs

    @property
    def propagation_ratio(self) -> float:
        if self.total_formula_cells == 0:
            return 0.0
        return self.propagated_cells / self.total_formula_cells


@runtime_checkable
class TraceSink(Protocol):
    """Observer for calculation events.

    Implementations must not affect evaluation results; every method is
    fire-and-forget.
    """

    def log_input_changed(
        self, col: int, row: int, name: str, old_value: float, new_value: float,
    ) -> None:
        ...

    def log_formula_evaluating(self, col: int, row: int, formula: str) -> None:
        ...

    def log_formula_evaluated(
        self, col: int, row: int, formula: str, result: float,
    ) -> None:
        ...

    def log_dependency_triggered(self, source_name: str, col: int, row: int) -> None:
        ...

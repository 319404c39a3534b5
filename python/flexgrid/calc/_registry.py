"""SignalRegistry: binds cell positions and names to reactive accessors."""

from __future__ import annotations

from typing import Callable

Accessor = Callable[[], float]
Setter = Callable[[float], None]


class SignalRegistry:
    """Lookup tables for one spreadsheet instance.

    Cell keys are zero-based ``(col, row)`` tuples, matching the parser's
    ``CellRef``. Names are case-sensitive. A registry is built fresh for each
    sheet and never shared between sheets.
    """

    __slots__ = ("cell_signals", "cell_setters", "named_signals", "cell_formulas")

    def __init__(self) -> None:
        self.cell_signals: dict[tuple[int, int], Accessor] = {}
        # write path, input cells only
        self.cell_setters: dict[tuple[int, int], Setter] = {}
        self.named_signals: dict[str, Accessor] = {}
        # verbatim formula text, kept for export round-trips
        self.cell_formulas: dict[tuple[int, int], str] = {}

    def register_cell_signal(self, col: int, row: int, signal: Accessor) -> None:
        self.cell_signals[(col, row)] = signal

    def register_cell_setter(self, col: int, row: int, setter: Setter) -> None:
        self.cell_setters[(col, row)] = setter

    def register_named_signal(self, name: str, signal: Accessor) -> None:
        self.named_signals[name] = signal

    def register_cell_formula(self, col: int, row: int, formula: str) -> None:
        self.cell_formulas[(col, row)] = formula

    def get_cell_signal(self, col: int, row: int) -> Accessor | None:
        return self.cell_signals.get((col, row))

    def get_cell_setter(self, col: int, row: int) -> Setter | None:
        return self.cell_setters.get((col, row))

    def get_named_signal(self, name: str) -> Accessor | None:
        return self.named_signals.get(name)

    def get_cell_formula(self, col: int, row: int) -> str | None:
        return self.cell_formulas.get((col, row))

    def __repr__(self) -> str:
        return (
            f"<SignalRegistry cells={len(self.cell_signals)} "
            f"names={len(self.named_signals)} formulas={len(self.cell_formulas)}>"
        )

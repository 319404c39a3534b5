"""Spreadsheet model: cell kinds and positioned cells."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import Union


@dataclass(frozen=True)
class Input:
    """An input cell the user can edit, reachable by *name* from formulas."""

    name: str
    initial: float
    format: str | None = None


@dataclass(frozen=True)
class Formula:
    """A formula cell; *expr* is kept verbatim (leading ``=`` included)."""

    expr: str
    format: str | None = None


@dataclass(frozen=True)
class Label:
    text: str


@dataclass(frozen=True)
class Empty:
    pass


ReactiveCell = Union[Input, Formula, Label, Empty]


@dataclass(frozen=True)
class CellPosition:
    """Zero-based cell position."""

    row: int
    col: int


@dataclass(frozen=True)
class PositionedCell:
    position: CellPosition
    cell: ReactiveCell


@dataclass(frozen=True)
class ReactiveModel:
    """A complete spreadsheet description; instantiate with ReactiveSheet."""

    cells: tuple[PositionedCell, ...] = ()
    column_widths: tuple[int, ...] | None = None
    title: str | None = None
    show_headers: bool = True
    _index: dict[tuple[int, int], ReactiveCell] = field(
        default=None, init=False, repr=False, compare=False,  # type: ignore[assignment]
    )

    def __post_init__(self) -> None:
        index: dict[tuple[int, int], ReactiveCell] = {}
        for pc in self.cells:
            index[(pc.position.row, pc.position.col)] = pc.cell
        object.__setattr__(self, "_index", index)

    @classmethod
    def from_cells(
        cls, cells: Iterable[tuple[int, int, ReactiveCell]], **kwargs: object,
    ) -> ReactiveModel:
        """Build a model from ``(row, col, cell)`` triples."""
        positioned = tuple(
            PositionedCell(CellPosition(row, col), cell) for row, col, cell in cells
        )
        return cls(cells=positioned, **kwargs)  # type: ignore[arg-type]

    def dimensions(self) -> tuple[int, int]:
        """Return ``(rows, cols)`` spanned by the model."""
        if not self.cells:
            return (0, 0)
        max_row = max(pc.position.row for pc in self.cells)
        max_col = max(pc.position.col for pc in self.cells)
        return (max_row + 1, max_col + 1)

    def try_get_cell(self, row: int, col: int) -> ReactiveCell | None:
        return self._index.get((row, col))

    def add_cell(self, row: int, col: int, cell: ReactiveCell) -> ReactiveModel:
        positioned = PositionedCell(CellPosition(row, col), cell)
        return replace(self, cells=self.cells + (positioned,))

    def with_title(self, title: str) -> ReactiveModel:
        return replace(self, title=title)

    def with_show_headers(self, show: bool) -> ReactiveModel:
        return replace(self, show_headers=show)

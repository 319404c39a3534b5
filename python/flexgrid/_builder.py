"""SpreadsheetBuilder: cursor-style construction of a ReactiveModel."""

from __future__ import annotations

from flexgrid._model import (
    CellPosition,
    Empty,
    Formula,
    Input,
    Label,
    PositionedCell,
    ReactiveCell,
    ReactiveModel,
)


class SpreadsheetBuilder:
    """Place cells left to right, row by row.

    Usage::

        b = SpreadsheetBuilder()
        b.label("Principal")
        b.input("principal", 1000.0, format="N0")
        b.new_row()
        b.label("Total")
        b.formula("=principal*1.1", format="C2")
        model = b.build()
    """

    def __init__(self) -> None:
        self._cells: list[PositionedCell] = []
        self._row = 0
        self._col = 0
        self._title: str | None = None
        self._show_headers = True
        self._column_widths: tuple[int, ...] | None = None

    @property
    def position(self) -> tuple[int, int]:
        """Current cursor as ``(row, col)``."""
        return (self._row, self._col)

    def _place(self, cell: ReactiveCell) -> SpreadsheetBuilder:
        self._cells.append(PositionedCell(CellPosition(self._row, self._col), cell))
        self._col += 1
        return self

    def input(self, name: str, initial: float, format: str | None = None) -> SpreadsheetBuilder:
        return self._place(Input(name, float(initial), format))

    def formula(self, expr: str, format: str | None = None) -> SpreadsheetBuilder:
        return self._place(Formula(expr, format))

    def label(self, text: str) -> SpreadsheetBuilder:
        return self._place(Label(text))

    def empty(self) -> SpreadsheetBuilder:
        return self._place(Empty())

    def new_row(self) -> SpreadsheetBuilder:
        self._row += 1
        self._col = 0
        return self

    def skip(self, count: int) -> SpreadsheetBuilder:
        self._col += count
        return self

    def go_to_row(self, row: int) -> SpreadsheetBuilder:
        self._row = row
        self._col = 0
        return self

    def go_to_col(self, col: int) -> SpreadsheetBuilder:
        self._col = col
        return self

    def go_to(self, row: int, col: int) -> SpreadsheetBuilder:
        self._row = row
        self._col = col
        return self

    def title(self, title: str) -> SpreadsheetBuilder:
        self._title = title
        return self

    def show_headers(self, show: bool) -> SpreadsheetBuilder:
        self._show_headers = show
        return self

    def column_widths(self, *widths: int) -> SpreadsheetBuilder:
        self._column_widths = tuple(widths)
        return self

    def build(self) -> ReactiveModel:
        return ReactiveModel(
            cells=tuple(self._cells),
            column_widths=self._column_widths,
            title=self._title,
            show_headers=self._show_headers,
        )

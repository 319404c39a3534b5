"""FlexGrid — reactive spreadsheets whose formulas stay current as inputs change.

Usage::

    from flexgrid import ReactiveSheet, SpreadsheetBuilder

    b = SpreadsheetBuilder()
    b.label("Principal").input("principal", 1000.0, format="N0").new_row()
    b.label("Rate (%)").input("rate", 25.0, format="N2").new_row()
    b.label("Total").formula("=principal*(1+rate/100)", format="C2")
    sheet = ReactiveSheet(b.build())

    sheet["B3"]                    # 1250.0
    sheet.set_input("rate", 50.0)
    sheet.display(1, 2)            # "$1500.00"
"""

from flexgrid._builder import SpreadsheetBuilder
from flexgrid._format import format_value
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
from flexgrid._sheet import ReactiveSheet
from flexgrid._utils import a1_to_colrow, format_address

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CellPosition",
    "Empty",
    "Formula",
    "Input",
    "Label",
    "PositionedCell",
    "ReactiveCell",
    "ReactiveModel",
    "ReactiveSheet",
    "SpreadsheetBuilder",
    "a1_to_colrow",
    "format_address",
    "format_value",
]

"""Display formatting for cell values.

Error values and the BLANK sentinel are mapped to display strings here, so
the engine can keep them as plain floats.
"""

from __future__ import annotations

import math

from flexgrid.calc._functions import is_blank

ERROR_MARKER = "#ERROR"
DIV0_MARKER = "#DIV/0!"


def _plain(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_value(value: float, fmt: str | None = None) -> str:
    """Format *value* with a display code.

    Codes: ``N<d>`` / ``F<d>`` fixed decimals (default 2), ``C`` currency
    with two decimals, ``P`` percent with one decimal. No code means two
    decimals.
    """
    if is_blank(value):
        return ""
    if math.isnan(value):
        return ERROR_MARKER
    if math.isinf(value):
        return DIV0_MARKER
    if fmt is None:
        return f"{value:.2f}"
    if "N" in fmt or "F" in fmt:
        digits = fmt.replace("N", "").replace("F", "")
        decimals = int(digits) if digits else 2
        return f"{value:.{decimals}f}"
    if "C" in fmt:
        return f"${value:.2f}"
    if "P" in fmt:
        return f"{value * 100:.1f}%"
    return _plain(value)

"""A1-style address helpers shared by the calc engine and the sheet layer."""

from __future__ import annotations

import re

_A1_RE = re.compile(r"^([A-Za-z]+)(\d+)$")


def column_letters_to_index(letters: str) -> int:
    """Convert column letters (A, B, ..., Z, AA, AB, ...) to a zero-based index."""
    acc = 0
    for ch in letters.upper():
        acc = acc * 26 + (ord(ch) - ord("A") + 1)
    return acc - 1


def index_to_column_letters(index: int) -> str:
    """Convert a zero-based column index to letters (0 -> "A", 26 -> "AA")."""
    letters = ""
    n = index
    while n >= 0:
        letters = chr(ord("A") + n % 26) + letters
        n = n // 26 - 1
    return letters


def match_cell_reference(token: str) -> tuple[int, int] | None:
    """Return zero-based ``(col, row)`` if *token* looks like ``A1``, else None."""
    m = _A1_RE.match(token)
    if not m:
        return None
    return column_letters_to_index(m.group(1)), int(m.group(2)) - 1


def a1_to_colrow(ref: str) -> tuple[int, int]:
    """Convert ``"B3"`` to zero-based ``(1, 2)``.

    Raises ValueError for anything that is not a plain A1 reference.
    """
    parsed = match_cell_reference(ref.strip().replace("$", ""))
    if parsed is None:
        raise ValueError(f"Invalid cell reference: {ref!r}")
    return parsed


def format_address(col: int, row: int) -> str:
    """Format zero-based ``(col, row)`` as an A1 address."""
    return f"{index_to_column_letters(col)}{row + 1}"

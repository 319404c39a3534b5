"""Expression tree produced by the formula parser.

Nodes are frozen dataclasses so a parsed tree can be shared and compiled
against any number of registries without being mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Number:
    """A numeric literal."""

    value: float


@dataclass(frozen=True)
class CellRef:
    """A cell reference like ``A1`` (zero-based column and row)."""

    col: int
    row: int


@dataclass(frozen=True)
class NamedRef:
    """A reference to a named input such as ``principal``."""

    name: str


@dataclass(frozen=True)
class BinaryOp:
    left: Expr
    op: str
    right: Expr


@dataclass(frozen=True)
class FunctionCall:
    """A function call like ``SUM(A1, A2)``; *name* is upper-cased."""

    name: str
    args: tuple[Expr, ...] = ()


@dataclass(frozen=True)
class Parenthesized:
    inner: Expr


Expr = Union[Number, CellRef, NamedRef, BinaryOp, FunctionCall, Parenthesized]

"""Formula parser: recursive descent over tokens + reference extraction."""

from __future__ import annotations

from typing import Callable, Iterator

from flexgrid._utils import (
    column_letters_to_index,
    index_to_column_letters,
    match_cell_reference,
)
from flexgrid.calc._ast import (
    BinaryOp,
    CellRef,
    Expr,
    FunctionCall,
    NamedRef,
    Number,
    Parenthesized,
)
from flexgrid.calc._tokenizer import IDENTIFIER_RE, NUMBER_RE, tokenize

__all__ = [
    "FormulaSyntaxError",
    "column_letters_to_index",
    "extract_cell_references",
    "extract_named_references",
    "index_to_column_letters",
    "parse",
    "parse_functions",
    "try_parse",
]

_COMPARISON_OPS = ("<", ">", "<=", ">=", "<>")
_ADDITIVE_OPS = ("+", "-")
_MULTIPLICATIVE_OPS = ("*", "/")
_POWER_OPS = ("^",)


class FormulaSyntaxError(SyntaxError):
    """Raised when formula text cannot be reduced to a single expression.

    ``kind`` is one of ``unexpected_token``, ``unexpected_end``,
    ``unmatched_paren``, ``malformed_arguments``, ``trailing_tokens`` or
    ``too_deep`` (parentheses or calls nested past the interpreter's
    recursion limit).
    """

    def __init__(
        self,
        message: str,
        kind: str,
        token: str | None = None,
        formula: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.token = token
        self.formula = formula


# ---------------------------------------------------------------------------
# Recursive descent
# ---------------------------------------------------------------------------


class _TokenStream:
    """Cursor over a token list, consumed left to right."""

    __slots__ = ("tokens", "pos", "formula")

    def __init__(self, tokens: list[str], formula: str) -> None:
        self.tokens = tokens
        self.pos = 0
        self.formula = formula

    def peek(self, offset: int = 0) -> str | None:
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return None

    def advance(self) -> str:
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def error(self, message: str, kind: str, token: str | None = None) -> FormulaSyntaxError:
        return FormulaSyntaxError(message, kind, token=token, formula=self.formula)


def _parse_expr(ts: _TokenStream) -> Expr:
    return _parse_comparison(ts)


def _fold_right(operands: list[Expr], ops: list[str]) -> Expr:
    result = operands[-1]
    for left, op in zip(reversed(operands[:-1]), reversed(ops)):
        result = BinaryOp(left, op, result)
    return result


def _parse_chain(
    ts: _TokenStream, operand: Callable[[_TokenStream], Expr], ops: tuple[str, ...],
) -> Expr:
    """Parse ``operand (op operand)*`` nested to the right: a-b-c is a-(b-c).

    Operands are collected in a loop so long chains do not grow the stack.
    """
    operands = [operand(ts)]
    found: list[str] = []
    while ts.peek() in ops:
        found.append(ts.advance())
        operands.append(operand(ts))
    return _fold_right(operands, found)


def _parse_comparison(ts: _TokenStream) -> Expr:
    return _parse_chain(ts, _parse_additive, _COMPARISON_OPS)


def _parse_additive(ts: _TokenStream) -> Expr:
    return _parse_chain(ts, _parse_multiplicative, _ADDITIVE_OPS)


def _parse_multiplicative(ts: _TokenStream) -> Expr:
    return _parse_chain(ts, _parse_power, _MULTIPLICATIVE_OPS)


def _parse_power(ts: _TokenStream) -> Expr:
    return _parse_chain(ts, _parse_unary, _POWER_OPS)


def _parse_unary(ts: _TokenStream) -> Expr:
    if ts.peek() == "-":
        ts.advance()
        return BinaryOp(Number(0.0), "-", _parse_primary(ts))
    return _parse_primary(ts)


def _parse_primary(ts: _TokenStream) -> Expr:
    token = ts.peek()
    if token is None:
        raise ts.error("Unexpected end of formula", "unexpected_end")

    if token == "(":
        ts.advance()
        inner = _parse_expr(ts)
        if ts.peek() != ")":
            raise ts.error(
                "Expected closing parenthesis", "unmatched_paren", token=ts.peek(),
            )
        ts.advance()
        return Parenthesized(inner)

    if IDENTIFIER_RE.match(token) and ts.peek(1) == "(":
        ts.advance()
        ts.advance()
        return FunctionCall(token.upper(), _parse_arguments(ts))

    cell = match_cell_reference(token)
    if cell is not None:
        ts.advance()
        return CellRef(*cell)

    if NUMBER_RE.match(token):
        ts.advance()
        return Number(float(token))

    if IDENTIFIER_RE.match(token):
        ts.advance()
        return NamedRef(token)

    raise ts.error(f"Unexpected token: {token}", "unexpected_token", token=token)


def _parse_arguments(ts: _TokenStream) -> tuple[Expr, ...]:
    """Parse ``arg, arg, ... )`` after the opening parenthesis."""
    if ts.peek() == ")":
        ts.advance()
        return ()
    args: list[Expr] = []
    while True:
        args.append(_parse_expr(ts))
        token = ts.peek()
        if token == ")":
            ts.advance()
            return tuple(args)
        if token == ",":
            ts.advance()
            continue
        if token is None:
            raise ts.error("Unexpected end of formula in function arguments", "unexpected_end")
        raise ts.error(
            "Expected , or ) in function arguments", "malformed_arguments", token=token,
        )


def parse(formula: str) -> Expr:
    """Parse a formula (with or without a leading ``=``) into an expression tree.

    An empty body parses to ``Number(0.0)``. Raises FormulaSyntaxError when
    the tokens cannot be reduced to exactly one expression.
    """
    cleaned = formula.strip().lstrip("=").strip()
    tokens = tokenize(cleaned)
    if not tokens:
        return Number(0.0)
    ts = _TokenStream(tokens, formula)
    try:
        expr = _parse_expr(ts)
    except RecursionError:
        raise ts.error("Formula is nested too deeply", "too_deep") from None
    if not ts.at_end():
        remaining = tokens[ts.pos:]
        raise ts.error(
            f"Unexpected tokens remaining: {remaining}", "trailing_tokens", token=remaining[0],
        )
    return expr


def try_parse(formula: str) -> Expr | None:
    """Parse *formula*, returning None instead of raising on syntax errors."""
    try:
        return parse(formula)
    except FormulaSyntaxError:
        return None


# ---------------------------------------------------------------------------
# Reference extraction
# ---------------------------------------------------------------------------


def _children(expr: Expr) -> tuple[Expr, ...]:
    if isinstance(expr, BinaryOp):
        return (expr.left, expr.right)
    if isinstance(expr, FunctionCall):
        return expr.args
    if isinstance(expr, Parenthesized):
        return (expr.inner,)
    return ()


def _walk(expr: Expr) -> Iterator[Expr]:
    """Yield every node depth-first, left to right, without recursion."""
    stack: list[Expr] = [expr]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(_children(node)))


def extract_cell_references(expr: Expr) -> list[tuple[int, int]]:
    """All ``(col, row)`` references, depth-first left to right, duplicates kept."""
    return [(node.col, node.row) for node in _walk(expr) if isinstance(node, CellRef)]


def extract_named_references(expr: Expr) -> list[str]:
    """All named references, depth-first left to right, duplicates kept."""
    return [node.name for node in _walk(expr) if isinstance(node, NamedRef)]


def parse_functions(expr: Expr) -> list[str]:
    """Extract all function names used in an expression, without duplicates."""
    funcs: list[str] = []
    seen: set[str] = set()
    for node in _walk(expr):
        if isinstance(node, FunctionCall) and node.name not in seen:
            funcs.append(node.name)
            seen.add(node.name)
    return funcs

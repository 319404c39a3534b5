"""Dependency graph for formula cells with topological ordering."""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

from flexgrid._utils import format_address
from flexgrid.calc._parser import extract_cell_references, extract_named_references, parse

if TYPE_CHECKING:
    from flexgrid._model import ReactiveModel

Cell = tuple[int, int]


class CircularReferenceError(ValueError):
    """Formula cells refer to each other in a cycle."""

    def __init__(self, cells: set[Cell]) -> None:
        self.cells = cells
        names = ", ".join(sorted(format_address(c, r) for c, r in cells))
        super().__init__(f"Circular reference detected involving: {names}")


class DependencyGraph:
    """Tracks formula cell dependencies for build and recalculation ordering.

    All cells are zero-based ``(col, row)`` tuples.
    """

    __slots__ = ("dependencies", "dependents", "formulas")

    def __init__(self) -> None:
        # cell -> set of cells it reads from
        self.dependencies: dict[Cell, set[Cell]] = {}
        # cell -> set of cells that read from it (reverse edges)
        self.dependents: dict[Cell, set[Cell]] = {}
        # cell -> formula string
        self.formulas: dict[Cell, str] = {}

    def add_formula(
        self,
        cell: Cell,
        formula: str,
        named_cells: dict[str, Cell] | None = None,
    ) -> None:
        """Register a formula cell and its dependencies.

        Named references found in *named_cells* count as reads of that cell;
        other names are unbound and add no edge. Raises FormulaSyntaxError if
        *formula* does not parse.
        """
        expr = parse(formula)
        refs = set(extract_cell_references(expr))
        if named_cells:
            for name in extract_named_references(expr):
                if name in named_cells:
                    refs.add(named_cells[name])
        self.formulas[cell] = formula
        self.dependencies[cell] = refs
        for ref in refs:
            self.dependents.setdefault(ref, set()).add(cell)

    def topological_order(self) -> list[Cell]:
        """Return formula cells in evaluation order (Kahn's algorithm).

        Ties are broken by row then column so the order is deterministic.
        Raises CircularReferenceError if a cycle is detected.
        """
        formula_cells = set(self.formulas)
        if not formula_cells:
            return []

        # Only count deps that are themselves formula cells
        in_degree: dict[Cell, int] = {
            cell: len(self.dependencies.get(cell, set()) & formula_cells)
            for cell in formula_cells
        }

        queue: deque[Cell] = deque(
            sorted((c for c in formula_cells if in_degree[c] == 0), key=_row_major)
        )

        order: list[Cell] = []
        while queue:
            cell = queue.popleft()
            order.append(cell)
            for dep in sorted(self.dependents.get(cell, set()), key=_row_major):
                if dep in formula_cells:
                    in_degree[dep] -= 1
                    if in_degree[dep] == 0:
                        queue.append(dep)

        if len(order) != len(formula_cells):
            raise CircularReferenceError(formula_cells - set(order))

        return order

    def affected_cells(self, changed_cells: set[Cell]) -> list[Cell]:
        """Formula cells downstream of *changed_cells*, in evaluation order.

        *changed_cells* are usually input cells; a name like ``loan`` counts
        through the input cell it was bound to in ``add_formula``. The changed
        cells themselves are not included.
        """
        affected: set[Cell] = set()
        queue: deque[Cell] = deque(changed_cells)
        visited: set[Cell] = set(changed_cells)

        while queue:
            cell = queue.popleft()
            for dep in self.dependents.get(cell, set()):
                if dep not in visited:
                    visited.add(dep)
                    queue.append(dep)
                    if dep in self.formulas:
                        affected.add(dep)

        full_order = self.topological_order()
        return [c for c in full_order if c in affected]

    def max_depth(self, roots: set[Cell]) -> int:
        """Number of formula hops on the longest path out of *roots*.

        ``B1=A1`` and ``C1=B1`` give a depth of 2 from ``{(0, 0)}``; a root
        with no formula dependents gives 0.
        """
        if not roots:
            return 0

        depth: dict[Cell, int] = {r: 0 for r in roots}
        queue: deque[Cell] = deque(roots)
        max_d = 0

        while queue:
            cell = queue.popleft()
            current_depth = depth[cell]
            for dep in self.dependents.get(cell, set()):
                if dep in self.formulas:
                    new_depth = current_depth + 1
                    if dep not in depth or new_depth > depth[dep]:
                        depth[dep] = new_depth
                        max_d = max(max_d, new_depth)
                        queue.append(dep)

        return max_d

    @classmethod
    def from_model(cls, model: ReactiveModel) -> DependencyGraph:
        """Build a dependency graph from every Formula cell of a model."""
        from flexgrid._model import Formula, Input

        named_cells = {
            pc.cell.name: (pc.position.col, pc.position.row)
            for pc in model.cells
            if isinstance(pc.cell, Input)
        }
        graph = cls()
        for positioned in model.cells:
            if isinstance(positioned.cell, Formula):
                pos = positioned.position
                graph.add_formula((pos.col, pos.row), positioned.cell.expr, named_cells)
        return graph


def _row_major(cell: Cell) -> tuple[int, int]:
    return (cell[1], cell[0])

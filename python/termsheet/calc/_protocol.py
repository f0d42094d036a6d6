"""EvalContext protocol and recalculation result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class EvalContext(Protocol):
    """Read access the evaluator needs from the cell store."""

    def value_of(self, row: int, col: int) -> float:
        """Numeric value of a cell, recomputing it first if it is stale.

        Out-of-bounds coordinates return 0.0.
        """
        ...

    def content_of(self, row: int, col: int) -> str:
        """Raw content of a cell (``""`` when unset or out of bounds)."""
        ...


@dataclass(frozen=True)
class CellDelta:
    """A single formula cell's value change from recalculation."""

    cell_ref: str  # A1 text, e.g. "C4"
    old_value: float | None  # None when the cell was not numeric
    new_value: float | None
    formula: str | None = None


@dataclass(frozen=True)
class RecalcResult:
    """Summary of one ``recalculate_all`` sweep."""

    passes: int
    deltas: tuple[CellDelta, ...]
    total_formula_cells: int = 0

    @property
    def changed_cells(self) -> int:
        return len(self.deltas)

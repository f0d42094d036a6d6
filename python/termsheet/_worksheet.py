"""Sheet: the fixed-capacity cell grid and its store operations."""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Iterator

from termsheet._cell import Cell, parse_number
from termsheet._codec import IOStatus, load_sheet, save_sheet
from termsheet._config import DEFAULT_CONFIG, SheetConfig
from termsheet.calc._evaluator import ExpressionEvaluator
from termsheet.calc._functions import FunctionRegistry
from termsheet.calc._parser import parse_ref
from termsheet.calc._protocol import RecalcResult
from termsheet.calc._recalc import RecalcEngine

logger = logging.getLogger(__name__)


class Sheet:
    """A single rows x cols grid of :class:`Cell` records.

    The sheet owns every cell, evaluates formulas through an
    :class:`ExpressionEvaluator` (acting as its read context) and keeps
    them current through a :class:`RecalcEngine`.
    """

    __slots__ = ("_config", "_cells", "_evaluator", "_engine")

    def __init__(
        self,
        config: SheetConfig | None = None,
        functions: FunctionRegistry | None = None,
    ) -> None:
        self._config = config if config is not None else DEFAULT_CONFIG
        rows, cols = self._config.shape
        self._cells: list[list[Cell]] = [[Cell() for _ in range(cols)] for _ in range(rows)]
        self._evaluator = ExpressionEvaluator(rows, cols, functions)
        self._engine = RecalcEngine(passes=self._config.recalc_passes)

    @property
    def config(self) -> SheetConfig:
        return self._config

    @property
    def rows(self) -> int:
        return self._config.rows

    @property
    def cols(self) -> int:
        return self._config.cols

    @property
    def evaluator(self) -> ExpressionEvaluator:
        return self._evaluator

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    # ------------------------------------------------------------------
    # Cell access
    # ------------------------------------------------------------------

    def get(self, row: int, col: int) -> Cell:
        """Cell record at 0-based (row, col)."""
        if not self.in_bounds(row, col):
            raise IndexError(f"Cell ({row}, {col}) is outside a {self.rows}x{self.cols} grid")
        return self._cells[row][col]

    def set(self, row: int, col: int, text: str) -> None:
        """Store *text* at (row, col).

        A formula is evaluated right away. Out-of-bounds writes are ignored.
        When ``config.auto_recalc`` is on, the whole grid is recalculated
        afterwards so cells depending on this one catch up.
        """
        if not self.store(row, col, text, evaluate=True):
            logger.debug("Ignoring write outside the grid at (%d, %d)", row, col)
            return
        if self._config.auto_recalc:
            self.recalculate_all()

    def store(self, row: int, col: int, text: str, evaluate: bool = False) -> bool:
        """Write content and classify it without recalculating the grid.

        A formula is left dirty unless *evaluate*. Returns False, storing
        nothing, when (row, col) is outside the grid.
        """
        if not self.in_bounds(row, col):
            return False
        cell = self._cells[row][col]
        cell.reset()
        text = text[: self._config.max_content_length]
        if not text:
            return True
        cell.content = text
        if cell.is_formula:
            cell.dirty = True
            if evaluate:
                self.value_of(row, col)
            return True
        number = parse_number(text)
        if number is not None and math.isfinite(number):
            cell.cached_value = number
            cell.is_numeric = True
        return True

    def value_of(self, row: int, col: int) -> float:
        """Numeric value of (row, col), recomputing a stale formula first.

        Out-of-bounds coordinates read as 0.0.
        """
        if not self.in_bounds(row, col):
            return 0.0
        cell = self._cells[row][col]
        if cell.dirty and cell.is_formula:
            self._refresh(row, col)
        return cell.cached_value

    def _refresh(self, row: int, col: int) -> None:
        """Recompute the stale formula at (row, col), its stale inputs first.

        Inputs come from ``ExpressionEvaluator.references`` and are walked
        with an explicit stack, so a long chain never nests Python calls.
        ``dirty`` is cleared when a cell is first reached: a cell read again
        while its own evaluation is pending (a cycle) yields its previous
        cached value.
        """
        refs = self._evaluator.references
        cell = self._cells[row][col]
        cell.dirty = False
        stack = [(row, col, iter(refs(cell.formula_body)))]
        while stack:
            r, c, inputs = stack[-1]
            for ir, ic in inputs:
                dep = self._cells[ir][ic]
                if dep.dirty and dep.is_formula:
                    dep.dirty = False
                    stack.append((ir, ic, iter(refs(dep.formula_body))))
                    break
            else:
                stack.pop()
                self._compute(self._cells[r][c])

    def _compute(self, cell: Cell) -> None:
        value = self._evaluator.evaluate(cell.formula_body, self)
        cell.cached_value = value
        cell.is_numeric = math.isfinite(value)

    def content_of(self, row: int, col: int) -> str:
        if not self.in_bounds(row, col):
            return ""
        return self._cells[row][col].content

    def display(self, row: int, col: int) -> str:
        """Formatted text for the rendering layer."""
        self.value_of(row, col)
        return self.get(row, col).display(self._config.display_width)

    def __getitem__(self, key: str) -> Cell:
        """``sheet['B3']`` -> Cell."""
        ref = parse_ref(key, self.rows, self.cols)
        if ref is None:
            raise KeyError(f"Invalid cell reference: {key!r}")
        return self._cells[ref[0]][ref[1]]

    def __setitem__(self, key: str, text: str) -> None:
        """``sheet['B3'] = '=A1*2'``."""
        ref = parse_ref(key, self.rows, self.cols)
        if ref is None:
            raise KeyError(f"Invalid cell reference: {key!r}")
        self.set(ref[0], ref[1], text)

    # ------------------------------------------------------------------
    # Iteration
    # ------------------------------------------------------------------

    def iter_cells(self) -> Iterator[tuple[int, int, Cell]]:
        """Every cell, row-major."""
        for r, row_cells in enumerate(self._cells):
            for c, cell in enumerate(row_cells):
                yield r, c, cell

    def non_empty(self) -> Iterator[tuple[int, int, Cell]]:
        for r, c, cell in self.iter_cells():
            if not cell.is_empty:
                yield r, c, cell

    def formula_cells(self) -> Iterator[tuple[int, int, Cell]]:
        for r, c, cell in self.iter_cells():
            if cell.is_formula:
                yield r, c, cell

    # ------------------------------------------------------------------
    # Whole-grid operations
    # ------------------------------------------------------------------

    def recalculate_all(self) -> RecalcResult:
        return self._engine.recalculate_all(self)

    def clear(self) -> None:
        for _, _, cell in self.iter_cells():
            cell.reset()

    def save(self, filename: str | os.PathLike[str]) -> IOStatus:
        """Write the sheet to *filename*."""
        return save_sheet(self, filename)

    def load(self, filename: str | os.PathLike[str]) -> IOStatus:
        """Replace the grid with the contents of *filename*.

        On failure the grid is left untouched and the status says why.
        """
        return load_sheet(self, filename)

    def __repr__(self) -> str:
        used = sum(1 for _ in self.non_empty())
        return f"<Sheet {self.rows}x{self.cols} cells={used}>"

"""RecalcEngine: dirty-flag marking plus a fixed number of evaluation sweeps.

There is no dependency graph. Every call marks all formula cells dirty and
then walks the whole grid row-major ``passes`` times, reading each cell
through ``Sheet.value_of`` so that any still-dirty formula is recomputed
(its stale inputs are brought up to date first). The result is a bounded,
non-exact fixpoint: cycles are neither detected nor reported, they settle on
whatever values remain after the last sweep.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from termsheet._utils import rowcol_to_a1
from termsheet.calc._protocol import CellDelta, RecalcResult

if TYPE_CHECKING:
    from termsheet._worksheet import Sheet

logger = logging.getLogger(__name__)

DEFAULT_PASSES = 3


class RecalcEngine:
    """Full-grid recalculation for a :class:`~termsheet.Sheet`.

    Usage::

        engine = RecalcEngine(passes=3)
        result = engine.recalculate_all(sheet)
    """

    def __init__(self, passes: int = DEFAULT_PASSES) -> None:
        if passes < 1:
            raise ValueError("passes must be at least 1")
        self.passes = passes

    def mark_dirty(self, sheet: Sheet) -> int:
        """Flag every formula cell as stale. Returns how many were flagged."""
        count = 0
        for _, _, cell in sheet.formula_cells():
            cell.dirty = True
            count += 1
        return count

    def sweep(self, sheet: Sheet) -> None:
        """One row-major pass forcing a read of every cell."""
        for row, col, _ in sheet.iter_cells():
            sheet.value_of(row, col)

    def recalculate_all(self, sheet: Sheet) -> RecalcResult:
        """Mark, then sweep ``self.passes`` times."""
        # Snapshot old values for delta computation
        old_values: dict[tuple[int, int], float | None] = {}
        for row, col, cell in sheet.formula_cells():
            old_values[(row, col)] = cell.cached_value if cell.is_numeric else None

        total = self.mark_dirty(sheet)
        for _ in range(self.passes):
            self.sweep(sheet)

        deltas: list[CellDelta] = []
        for (row, col), old_val in old_values.items():
            cell = sheet.get(row, col)
            new_val = cell.cached_value if cell.is_numeric else None
            if old_val != new_val:
                deltas.append(CellDelta(
                    cell_ref=rowcol_to_a1(row, col),
                    old_value=old_val,
                    new_value=new_val,
                    formula=cell.content,
                ))

        logger.debug(
            "Recalculated %d formula cells in %d passes, %d changed",
            total, self.passes, len(deltas),
        )
        return RecalcResult(
            passes=self.passes,
            deltas=tuple(deltas),
            total_formula_cells=total,
        )

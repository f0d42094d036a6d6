"""SheetConfig: grid dimensions and engine limits."""

from __future__ import annotations

from dataclasses import dataclass

# Single-letter column references cap the grid at A..Z.
MAX_COLUMNS = 26


@dataclass(frozen=True)
class SheetConfig:
    """Immutable settings shared by the store, evaluator and codec."""

    rows: int = 100
    cols: int = 26
    max_content_length: int = 255
    cell_width: int = 12
    display_width: int | None = None  # defaults to cell_width - 2
    recalc_passes: int = 3
    auto_recalc: bool = True

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError("Sheet dimensions must be positive integers")
        if self.cols > MAX_COLUMNS:
            raise ValueError(f"At most {MAX_COLUMNS} columns are addressable, got {self.cols}")
        if self.max_content_length <= 0:
            raise ValueError("max_content_length must be positive")
        if self.cell_width <= 2:
            raise ValueError("cell_width must leave room for the column border")
        if self.recalc_passes < 1:
            raise ValueError("recalc_passes must be at least 1")
        if self.display_width is None:
            object.__setattr__(self, "display_width", self.cell_width - 2)
        elif self.display_width <= 0:
            raise ValueError("display_width must be positive")

    @property
    def shape(self) -> tuple[int, int]:
        return (self.rows, self.cols)


DEFAULT_CONFIG = SheetConfig()

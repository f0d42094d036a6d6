"""Cell record: raw content plus the cached numeric value."""

from __future__ import annotations

import re
from dataclasses import dataclass

FORMULA_MARKER = "="
ERROR_MARKER = "ERROR"

# Plain numeric content must match in full: "5", "-2.5", ".5", "1e3"
_NUMBER_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

# Blanks allowed before a plain number
_LEADING_SPACE = " \t\n\v\f\r"


def parse_number(text: str) -> float | None:
    """Parse *text* as a plain decimal literal, or None.

    Leading blanks are skipped. Rejects empty input, trailing characters
    (trailing blanks included) and the ``inf``/``nan`` spellings that
    ``float()`` would accept.
    """
    text = text.lstrip(_LEADING_SPACE)
    if not _NUMBER_RE.fullmatch(text):
        return None
    return float(text)


@dataclass
class Cell:
    """One grid slot.

    ``cached_value`` is meaningful only while ``is_numeric`` is True.
    ``dirty`` means a formula cell must be recomputed before its next read.
    """

    content: str = ""
    cached_value: float = 0.0
    is_numeric: bool = False
    dirty: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.content

    @property
    def is_formula(self) -> bool:
        return self.content.startswith(FORMULA_MARKER)

    @property
    def formula_body(self) -> str | None:
        """Content after the ``=`` marker, or None for non-formula cells."""
        if not self.is_formula:
            return None
        return self.content[len(FORMULA_MARKER):]

    @property
    def value(self) -> float | None:
        """Cached value when numeric, else None."""
        return self.cached_value if self.is_numeric else None

    def reset(self) -> None:
        self.content = ""
        self.cached_value = 0.0
        self.is_numeric = False
        self.dirty = False

    def display(self, width: int = 10) -> str:
        """Short text for a grid column.

        Numbers show two decimals, a formula without a usable value shows
        ``ERROR``, text is cut to *width* characters.
        """
        if self.is_empty:
            return ""
        if self.is_numeric:
            return f"{self.cached_value:.2f}"
        if self.is_formula:
            return ERROR_MARKER
        return self.content[:width]

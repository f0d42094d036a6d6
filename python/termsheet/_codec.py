"""Line-oriented persistence: one ``<row>,<col>,<content>`` record per non-empty cell.

There is no header and no escaping. Only the first two commas separate
fields, so commas inside content survive; a line break inside content does
not. Loading clears the grid, stores every well-formed record without
evaluating it and then runs one full recalculation.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from termsheet._worksheet import Sheet

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = ","
RECORD_SEPARATOR = "\n"

# Coordinates are bare decimal digits: no sign, spaces or underscores
_COORD_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class IOStatus:
    """Outcome of a save or load, meant for a status line."""

    ok: bool
    message: str

    def __bool__(self) -> bool:
        return self.ok


# ---------------------------------------------------------------------------
# Text codec
# ---------------------------------------------------------------------------


def serialize(sheet: Sheet) -> str:
    """Render every non-empty cell, row-major."""
    lines = [
        f"{row}{FIELD_SEPARATOR}{col}{FIELD_SEPARATOR}{cell.content}{RECORD_SEPARATOR}"
        for row, col, cell in sheet.non_empty()
    ]
    return "".join(lines)


def _parse_record(line: str) -> tuple[int, int, str] | None:
    """Split ``row,col,content``; None when a separator or coordinate is bad."""
    parts = line.split(FIELD_SEPARATOR, 2)
    if len(parts) != 3:
        return None
    row_text, col_text, content = parts
    if not (_COORD_RE.fullmatch(row_text) and _COORD_RE.fullmatch(col_text)):
        return None
    return int(row_text), int(col_text), content


def deserialize(text: str, sheet: Sheet) -> int:
    """Replace the contents of *sheet* with the records in *text*.

    Malformed or out-of-bounds lines are skipped one by one. Returns the
    number of records stored.
    """
    sheet.clear()
    loaded = 0
    for lineno, line in enumerate(text.split(RECORD_SEPARATOR), start=1):
        line = line.rstrip("\r")
        if not line:
            continue
        record = _parse_record(line)
        if record is None:
            logger.debug("Skipping malformed line %d: %r", lineno, line)
            continue
        row, col, content = record
        if not sheet.store(row, col, content):
            logger.debug("Skipping out-of-bounds line %d: (%d, %d)", lineno, row, col)
            continue
        loaded += 1
    sheet.recalculate_all()
    return loaded


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------


def save_sheet(sheet: Sheet, filename: str | os.PathLike[str]) -> IOStatus:
    """Write *sheet* to *filename*. Never raises for I/O failures."""
    payload = serialize(sheet)
    try:
        with open(filename, "w", encoding="utf-8", newline="") as f:
            f.write(payload)
    except OSError as e:
        logger.warning("Could not save %s: %s", filename, e)
        return IOStatus(False, "Error: Could not save file!")
    return IOStatus(True, f"Saved to {os.fspath(filename)}")


def load_sheet(sheet: Sheet, filename: str | os.PathLike[str]) -> IOStatus:
    """Load *filename* into *sheet*.

    The grid is only cleared once the file has been read, so a failed open
    leaves the sheet as it was.
    """
    try:
        with open(filename, encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not load %s: %s", filename, e)
        return IOStatus(False, "Error: Could not load file!")
    count = deserialize(text, sheet)
    logger.debug("Loaded %d cells from %s", count, filename)
    return IOStatus(True, f"Loaded from {os.fspath(filename)}")

"""termsheet: the cell evaluation engine of a terminal spreadsheet.

Usage::

    from termsheet import Sheet

    sheet = Sheet()
    sheet["A1"] = "10"
    sheet["A2"] = "20"
    sheet["A3"] = "=SUM(A1:A2)"
    print(sheet.display(2, 0))   # "30.00"

    status = sheet.save("budget.sheet")
    print(status.message)
"""

import os

from termsheet._cell import Cell
from termsheet._codec import IOStatus, deserialize, serialize
from termsheet._config import SheetConfig
from termsheet._worksheet import Sheet

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Cell",
    "IOStatus",
    "Sheet",
    "SheetConfig",
    "deserialize",
    "load_sheet",
    "serialize",
]


def load_sheet(
    filename: str | os.PathLike[str],
    config: SheetConfig | None = None,
) -> tuple[Sheet, IOStatus]:
    """Open a saved sheet.

    Returns the sheet together with the load status. When the file cannot be
    read the sheet comes back empty and ``status.ok`` is False.
    """
    sheet = Sheet(config)
    status = sheet.load(filename)
    return sheet, status

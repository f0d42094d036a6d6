"""Reference parser: A1 cell references, ``A1:B5`` ranges and function-call prefixes."""

from __future__ import annotations

import re
from collections.abc import Iterable

# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

# Single cell ref: one column letter, 1-based row digits (A1, b12, Z100)
_CELL_REF_RE = re.compile(r"([A-Za-z])([0-9]+)")

Coord = tuple[int, int]


# ---------------------------------------------------------------------------
# Single references
# ---------------------------------------------------------------------------


def parse_ref(text: str, rows: int = 100, cols: int = 26) -> Coord | None:
    """Convert ``"B12"`` into the 0-based pair ``(11, 1)``.

    Returns None instead of raising when the text is empty, does not start
    with a letter, has no positive row number, or lands outside a
    ``rows`` x ``cols`` grid.
    """
    if not text:
        return None
    m = _CELL_REF_RE.fullmatch(text)
    if m is None:
        return None
    col = ord(m.group(1).upper()) - ord("A")
    row = int(m.group(2)) - 1
    if row < 0 or row >= rows or col >= cols:
        return None
    return (row, col)


def is_ref(text: str, rows: int = 100, cols: int = 26) -> bool:
    return parse_ref(text, rows, cols) is not None


# ---------------------------------------------------------------------------
# Ranges
# ---------------------------------------------------------------------------


def parse_range(text: str, rows: int = 100, cols: int = 26) -> tuple[Coord, Coord] | None:
    """Parse ``"A1:B5"`` into its two corners, as written.

    Splits on the first colon. Returns None when there is no colon or either
    endpoint is rejected by :func:`parse_ref`.
    """
    start_text, sep, end_text = text.partition(":")
    if not sep:
        return None
    start = parse_ref(start_text.strip(), rows, cols)
    end = parse_ref(end_text.strip(), rows, cols)
    if start is None or end is None:
        return None
    return (start, end)


def expand_range(start: Coord, end: Coord) -> list[Coord]:
    """Walk ``r1..r2`` by ``c1..c2`` inclusive, row-major.

    Corners are not normalized: when ``r1 > r2`` or ``c1 > c2`` the walk is
    empty.
    """
    (r1, c1), (r2, c2) = start, end
    return [(r, c) for r in range(r1, r2 + 1) for c in range(c1, c2 + 1)]


def range_shape(start: Coord, end: Coord) -> tuple[int, int]:
    """Return ``(n_rows, n_cols)`` walked by :func:`expand_range`."""
    (r1, c1), (r2, c2) = start, end
    n_rows = max(r2 - r1 + 1, 0)
    n_cols = max(c2 - c1 + 1, 0)
    if n_rows == 0 or n_cols == 0:
        return (0, 0)
    return (n_rows, n_cols)


# ---------------------------------------------------------------------------
# Function calls
# ---------------------------------------------------------------------------


def match_function_call(body: str, names: Iterable[str]) -> tuple[str, str | None] | None:
    """If *body* starts with ``NAME(`` for one of *names*, return ``(name, args)``.

    The match is an exact, case-sensitive prefix with no leading whitespace:
    ``sum(A1:A2)`` and ``SUM (A1:A2)`` are not calls. ``args`` is the text
    between the opening parenthesis and the first closing one; anything
    after that is ignored. ``args`` is None when no closing parenthesis
    follows.
    """
    for name in names:
        opener = name + "("
        if body.startswith(opener):
            close_idx = body.find(")", len(opener))
            if close_idx < 0:
                return (name, None)
            return (name, body[len(opener):close_idx])
    return None

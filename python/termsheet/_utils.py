"""Coordinate helpers for 0-based (row, col) pairs and A1 text."""

from __future__ import annotations


def column_letter(col: int) -> str:
    """``0 -> 'A'``, ``25 -> 'Z'``."""
    if col < 0 or col > 25:
        raise ValueError(f"Column index out of range: {col}")
    return chr(ord("A") + col)


def rowcol_to_a1(row: int, col: int) -> str:
    """Convert a 0-based (row, col) pair to A1 text, e.g. ``(2, 1) -> 'B3'``."""
    if row < 0:
        raise ValueError(f"Row index out of range: {row}")
    return f"{column_letter(col)}{row + 1}"

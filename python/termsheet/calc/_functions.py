"""Aggregate function registry and the failure values of the evaluator."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from termsheet.calc._parser import Coord, expand_range, range_shape

if TYPE_CHECKING:
    from termsheet.calc._protocol import EvalContext


# ---------------------------------------------------------------------------
# CalcError: failure values, collapsed to 0 by the evaluator
# ---------------------------------------------------------------------------


class CalcError(enum.Enum):
    """Why an evaluation step produced nothing. Never escapes the evaluator."""

    REF = "#REF!"  # reference does not parse or is out of bounds
    RANGE = "#RANGE!"  # malformed range argument or missing ')'


def is_error(val: Any) -> bool:
    """Return True if *val* is a CalcError member."""
    return isinstance(val, CalcError)


def collapse(value: float | CalcError) -> float:
    """Silent-zero policy: a failed step contributes ``0.0``."""
    if isinstance(value, CalcError):
        return 0.0
    return value


# ---------------------------------------------------------------------------
# CellSpan: the rectangle an aggregate walks
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CellSpan:
    """Rectangle between two corners, walked row-major as written.

    A reversed span (``r1 > r2`` or ``c1 > c2``) is empty; it is never
    normalized.
    """

    start: Coord
    end: Coord

    @property
    def cells(self) -> list[Coord]:
        return expand_range(self.start, self.end)

    @property
    def shape(self) -> tuple[int, int]:
        return range_shape(self.start, self.end)

    def values(self, context: EvalContext) -> list[float]:
        return [context.value_of(r, c) for r, c in self.cells]

    def contents(self, context: EvalContext) -> list[str]:
        return [context.content_of(r, c) for r, c in self.cells]

    def __len__(self) -> int:
        n_rows, n_cols = self.shape
        return n_rows * n_cols


# ---------------------------------------------------------------------------
# Builtin implementations. Each takes the span and the read context.
# ---------------------------------------------------------------------------

Aggregate = Callable[[CellSpan, "EvalContext"], float]


def _builtin_sum(span: CellSpan, context: EvalContext) -> float:
    return sum(span.values(context), 0.0)


def _builtin_average(span: CellSpan, context: EvalContext) -> float:
    """Mean over every cell in the span, empty cells included; 0 when empty."""
    count = len(span)
    if count == 0:
        return 0.0
    return _builtin_sum(span, context) / count


def _builtin_count(span: CellSpan, context: EvalContext) -> float:
    """COUNT - counts cells with non-empty content, numeric or not."""
    return float(sum(1 for content in span.contents(context) if content))


_BUILTINS: dict[str, Aggregate] = {
    "SUM": _builtin_sum,
    "AVG": _builtin_average,
    "AVERAGE": _builtin_average,
    "COUNT": _builtin_count,
}


class FunctionRegistry:
    """Registry of aggregate implementations.

    Starts with builtins and can be extended with custom aggregates. The
    registered names are exactly the ``NAME(`` prefixes the evaluator treats
    as aggregate calls; ``sum`` is not ``SUM``.
    """

    def __init__(self) -> None:
        self._functions: dict[str, Aggregate] = dict(_BUILTINS)

    def register(self, name: str, func: Aggregate) -> None:
        self._functions[name] = func

    def get(self, name: str) -> Aggregate | None:
        return self._functions.get(name)

    def has(self, name: str) -> bool:
        return name in self._functions

    @property
    def supported_functions(self) -> frozenset[str]:
        return frozenset(self._functions.keys())

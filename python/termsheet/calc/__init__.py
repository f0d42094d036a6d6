"""termsheet.calc - Formula evaluation engine for termsheet grids."""

from termsheet.calc._evaluator import ExpressionEvaluator
from termsheet.calc._functions import CalcError, CellSpan, FunctionRegistry
from termsheet.calc._parser import expand_range, match_function_call, parse_range, parse_ref
from termsheet.calc._protocol import CellDelta, EvalContext, RecalcResult
from termsheet.calc._recalc import RecalcEngine

__all__ = [
    "CalcError",
    "CellDelta",
    "CellSpan",
    "EvalContext",
    "ExpressionEvaluator",
    "FunctionRegistry",
    "RecalcEngine",
    "RecalcResult",
    "expand_range",
    "match_function_call",
    "parse_range",
    "parse_ref",
]

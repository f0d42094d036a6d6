"""ExpressionEvaluator: evaluates the body of a ``=`` formula to a number.

Three modes, chosen by looking at the body:

1. Aggregate call ``NAME(ref:ref)`` when the body starts with a name
   registered in the :class:`FunctionRegistry` followed by ``(``.
2. Direct reference: the whole body (whitespace removed) is one valid cell.
3. Chained arithmetic: literals and references combined strictly left to
   right with ``+ - * /`` (no precedence, so ``2+3*4`` is ``20``). Anything
   that is not a registered call lands here, so ``sum(A1:A2)`` reads as
   ``A1 + A2``.

Nothing in here raises for bad input. Failures are :class:`CalcError`
values internally and every step collapses them to ``0.0``.
"""

from __future__ import annotations

import logging
import re
import string
from collections.abc import Iterator
from typing import TYPE_CHECKING

from termsheet.calc._functions import (
    CalcError,
    CellSpan,
    FunctionRegistry,
    collapse,
    is_error,
)
from termsheet.calc._parser import (
    Coord,
    expand_range,
    match_function_call,
    parse_range,
    parse_ref,
)

if TYPE_CHECKING:
    from termsheet.calc._protocol import EvalContext

logger = logging.getLogger(__name__)

_OPERATORS = frozenset("+-*/")
_DIGITS = frozenset(string.digits + ".")
_LETTERS = frozenset(string.ascii_letters)
_ALNUM = frozenset(string.ascii_letters + string.digits)

# Leading decimal prefix of a digits-and-dots token ("1.2.3" reads as 1.2)
_LITERAL_PREFIX_RE = re.compile(r"[0-9]*\.?[0-9]*")


def _literal_value(token: str) -> float:
    """Numeric value of a run of digits and dots; a bare ``.`` is 0."""
    prefix = _LITERAL_PREFIX_RE.match(token).group(0)
    if prefix in ("", "."):
        return 0.0
    return float(prefix)


def _scan(clean: str) -> Iterator[tuple[str, str]]:
    """Split a whitespace-free expression into ``(kind, text)`` tokens.

    Kinds are ``"num"`` (digits and dots), ``"ref"`` (a letter followed by
    alphanumerics) and ``"op"``. Any other character is dropped.
    """
    i = 0
    length = len(clean)
    while i < length:
        ch = clean[i]
        if ch in _DIGITS:
            j = i + 1
            while j < length and clean[j] in _DIGITS:
                j += 1
            yield "num", clean[i:j]
            i = j
        elif ch in _LETTERS:
            j = i + 1
            while j < length and clean[j] in _ALNUM:
                j += 1
            yield "ref", clean[i:j]
            i = j
        else:
            if ch in _OPERATORS:
                yield "op", ch
            i += 1


def _apply(result: float, op: str, operand: float) -> float:
    """Fold *operand* into *result*. Division by zero is skipped."""
    if op == "+":
        return result + operand
    if op == "-":
        return result - operand
    if op == "*":
        return result * operand
    if op == "/":
        if operand == 0:
            return result
        return result / operand
    return result


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------


class ExpressionEvaluator:
    """Evaluates formula bodies (the text after ``=``) against a cell store.

    Usage::

        evaluator = ExpressionEvaluator(rows=100, cols=26)
        value = evaluator.evaluate("SUM(A1:A3)", sheet)
    """

    def __init__(
        self,
        rows: int = 100,
        cols: int = 26,
        functions: FunctionRegistry | None = None,
    ) -> None:
        self.rows = rows
        self.cols = cols
        self._functions = functions if functions is not None else FunctionRegistry()

    @property
    def functions(self) -> FunctionRegistry:
        return self._functions

    def evaluate(self, body: str, context: EvalContext) -> float:
        """Evaluate a formula body; failures come back as ``0.0``."""
        return collapse(self._eval_body(body, context))

    def references(self, body: str) -> list[Coord]:
        """Cells :meth:`evaluate` reads for *body*, in read order.

        For an aggregate call this is the whole span. Unresolvable
        references are left out, as evaluation skips them too.
        """
        call = self._match_call(body)
        if call is not None:
            _, args = call
            corners = parse_range(args, self.rows, self.cols) if args is not None else None
            return expand_range(*corners) if corners is not None else []

        clean = "".join(body.split())
        direct = self._direct_ref(clean)
        if direct is not None:
            return [direct]

        refs: list[Coord] = []
        for kind, text in _scan(clean):
            if kind == "ref":
                ref = parse_ref(text, self.rows, self.cols)
                if ref is not None:
                    refs.append(ref)
        return refs

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _match_call(self, body: str) -> tuple[str, str | None] | None:
        return match_function_call(body, sorted(self._functions.supported_functions))

    def _direct_ref(self, clean: str) -> Coord | None:
        if clean and clean[0] in _LETTERS:
            return parse_ref(clean, self.rows, self.cols)
        return None

    def _eval_body(self, body: str, context: EvalContext) -> float | CalcError:
        call = self._match_call(body)
        if call is not None:
            return self._eval_aggregate(call[0], call[1], context)

        clean = "".join(body.split())
        direct = self._direct_ref(clean)
        if direct is not None:
            return context.value_of(*direct)

        return self._eval_chain(clean, context)

    def _eval_aggregate(
        self, name: str, args: str | None, context: EvalContext,
    ) -> float | CalcError:
        if args is None:
            logger.debug("Missing ')' in %s call", name)
            return CalcError.RANGE
        corners = parse_range(args, self.rows, self.cols)
        if corners is None:
            logger.debug("Invalid range %r in %s call", args, name)
            return CalcError.RANGE
        func = self._functions.get(name)
        try:
            return func(CellSpan(*corners), context)
        except (ArithmeticError, TypeError, ValueError) as e:
            logger.debug("Error evaluating %s: %s", name, e)
            return CalcError.RANGE

    # ------------------------------------------------------------------
    # Chained arithmetic
    # ------------------------------------------------------------------

    def _eval_chain(self, clean: str, context: EvalContext) -> float:
        """Left-to-right fold over a whitespace-free expression.

        State starts at ``(0, '+')``. Every operand is folded with the
        pending operator; the pending operator only changes when an operator
        token is read. Unresolvable references are skipped.
        """
        result = 0.0
        pending = "+"
        for kind, text in _scan(clean):
            if kind == "op":
                pending = text
                continue
            if kind == "num":
                operand: float | CalcError = _literal_value(text)
            else:
                operand = self._resolve_ref(text, context)
            if is_error(operand):
                continue
            result = _apply(result, pending, operand)
        return result

    def _resolve_ref(self, token: str, context: EvalContext) -> float | CalcError:
        ref = parse_ref(token, self.rows, self.cols)
        if ref is None:
            logger.debug("Skipping unresolvable reference %r", token)
            return CalcError.REF
        return context.value_of(*ref)

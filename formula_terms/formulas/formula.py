"""
Formula values and formula editing for formula-terms.
"""

import copy as _copy
from dataclasses import dataclass
from typing import Any, Optional

from .expressions import (
    Call,
    call_arguments,
    call_operator,
    expression_to_string,
    is_call,
    is_integer,
)
from .term_set import TermSet, build_term_set
from ..core.exceptions import FormulaSyntaxError, TermEditError
from ..utils.logging import get_logger


logger = get_logger(__name__)


@dataclass
class Formula:
    """
    A model formula: optional response expression and right-hand side.

    Examples:
        Formula("y", Call("+", ["a", "b"]))                 # y ~ a + b
        Formula(None, Call("*", ["a", "b"]))                # ~ a * b
        Formula.from_expression(Call("~", ["y", "x"]))      # y ~ x
    """

    lhs: Optional[Any]
    rhs: Any

    @classmethod
    def from_expression(cls, expr: Any) -> "Formula":
        """
        Create a Formula from a ``~`` call.

        ``Call("~", [lhs, rhs])`` gives a two-sided formula and
        ``Call("~", [rhs])`` a one-sided one.

        Raises:
            FormulaSyntaxError: If ``expr`` is not a formula separator form
        """
        if not (is_call(expr) and call_operator(expr) == "~"):
            head = call_operator(expr) if is_call(expr) else type(expr).__name__
            raise FormulaSyntaxError(
                expression=expr,
                reason=f"expected formula separator ~, got {head}",
                suggestions=[
                    "Formulas look like 'y ~ a + b' or '~ a + b'",
                    "Build them with Call('~', [lhs, rhs])",
                ],
            )

        args = call_arguments(expr)
        if len(args) == 1:
            return cls(None, _copy.deepcopy(args[0]))
        if len(args) == 2:
            return cls(_copy.deepcopy(args[0]), _copy.deepcopy(args[1]))

        raise FormulaSyntaxError(
            expression=expr,
            reason=f"malformed expression in formula: '~' takes 1 or 2 arguments, got {len(args)}",
        )

    def copy(self) -> "Formula":
        return Formula(_copy.deepcopy(self.lhs), _copy.deepcopy(self.rhs))

    def term_set(self) -> TermSet:
        return build_term_set(self)

    def to_expression(self) -> Call:
        if self.lhs is None:
            return Call("~", [_copy.deepcopy(self.rhs)])
        return Call("~", [_copy.deepcopy(self.lhs), _copy.deepcopy(self.rhs)])

    def to_string(self) -> str:
        lhs = "" if self.lhs is None else expression_to_string(self.lhs) + " "
        return f"{lhs}~ {expression_to_string(self.rhs)}"

    def __str__(self) -> str:
        return f"Formula: {self.to_string()}"


def reconstruct(term_set: TermSet) -> Formula:
    """
    Rebuild a Formula from a term set.

    The right-hand side is a sum that starts with ``1`` when the term set has
    an intercept and with ``0`` when it does not, followed by the terms in
    stored order and then the grouping terms.

    Examples:
        y ~ a*b      -> y ~ 1 + a + b + a&b
        ~ x - 1      -> ~ 0 + x
        y ~ (1 | g)  -> y ~ 1 + (1 | g)
    """
    lhs = term_set.eval_terms[0] if term_set.response else None
    args: list = [1 if term_set.intercept else 0]
    args.extend(t.to_expression() for t in term_set.terms)
    args.extend(t.to_expression() for t in term_set.grouping_terms)
    return Formula(lhs, Call("+", args))


def drop_term(formula: Formula, term: Any) -> Formula:
    """
    Return a copy of ``formula`` without the summand ``term``.

    The right-hand side must be a sum and ``term`` one of its direct
    arguments; when it appears more than once the last occurrence is
    removed. Dropping ``1`` replaces it with ``0`` so that the intercept is
    explicitly removed.

    Args:
        formula: Formula to edit (not modified)
        term: Symbol, intercept literal or Call to remove

    Returns:
        Edited copy of the formula

    Raises:
        TermEditError: If ``term`` is not a summand, or is a number other
            than 1

    Examples:
        drop_term(y ~ 1 + bar + baz, "bar") -> y ~ 1 + baz
        drop_term(y ~ 1 + bar + baz, 1)     -> y ~ 0 + bar + baz
    """
    edited = formula.copy()
    rhs = edited.rhs

    position = _last_summand_position(rhs, term)
    if position is None:
        raise TermEditError(term=term, rhs=expression_to_string(formula.rhs))

    args = call_arguments(rhs)
    if _is_number(term):
        if term != 1:
            raise TermEditError(
                term=term,
                rhs=expression_to_string(formula.rhs),
                reason="only the intercept 1 can be dropped",
            )
        args[position] = 0
    else:
        del args[position]

    logger.debug("Dropped term", term=term, formula=edited.to_string())
    return edited


def _is_number(value: Any) -> bool:
    return is_integer(value) or isinstance(value, float)


def _last_summand_position(rhs: Any, term: Any) -> Optional[int]:
    if not (is_call(rhs) and call_operator(rhs) == "+"):
        return None
    args = call_arguments(rhs)
    for position in range(len(args) - 1, -1, -1):
        if _same_expression(args[position], term):
            return position
    return None


def _same_expression(left: Any, right: Any) -> bool:
    # 1 == True and 1 == 1.0 in Python; summands must match in kind too
    if isinstance(left, bool) or isinstance(right, bool):
        return left is right
    if type(left) is not type(right) and not (_is_number(left) and _is_number(right)):
        return False
    return left == right

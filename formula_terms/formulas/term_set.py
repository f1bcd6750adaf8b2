"""
Term-set extraction for formula-terms.

Expands a formula into the metadata a design matrix builder needs: the
ordered right-hand-side terms, the evaluation variables they use, the
variable-by-term incidence matrix and the intercept/response flags.
"""

from dataclasses import dataclass, field
from typing import Any, List, TYPE_CHECKING

import numpy as np

from .terms import (
    AbstractTerm,
    Operator,
    build_term,
    degree,
    evaluation_terms,
    is_fixed_effect,
    sort_terms,
)
from .expressions import expression_to_string, is_call, is_symbol
from ..core.exceptions import FormulaSyntaxError
from ..utils.logging import get_logger

if TYPE_CHECKING:
    from .formula import Formula


logger = get_logger(__name__)


@dataclass(eq=False)
class TermSet:
    """
    Right-hand-side terms of a formula together with their evaluation
    variables.

    Attributes:
        terms: De-duplicated fixed-effect terms, intercepts removed, sorted
            by degree
        eval_terms: Evaluation variable names; the response comes first when
            present
        factors: Boolean matrix, one row per evaluation variable and one
            column per term
        is_non_redundant: Same shape as ``factors``; marks variables a matrix
            builder has to promote to full-rank coding. All false here.
        order: Degree of each term
        response: Whether the formula has a left-hand side
        intercept: Whether the model matrix gets an intercept column
        grouping_terms: ``|`` terms, not expanded here
    """

    terms: List[AbstractTerm]
    eval_terms: List[str]
    factors: np.ndarray
    is_non_redundant: np.ndarray
    order: List[int]
    response: bool
    intercept: bool
    grouping_terms: List[AbstractTerm] = field(default_factory=list)

    @property
    def term_variables(self) -> List[List[str]]:
        """Evaluation variables of each term, without duplicates."""
        return [_unique(t.evaluation_terms()) for t in self.terms]

    @property
    def response_variable(self):
        return self.eval_terms[0] if self.response else None

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, TermSet):
            return NotImplemented
        return (
            self.terms == other.terms
            and self.eval_terms == other.eval_terms
            and np.array_equal(self.factors, other.factors)
            and np.array_equal(self.is_non_redundant, other.is_non_redundant)
            and self.order == other.order
            and self.response == other.response
            and self.intercept == other.intercept
            and self.grouping_terms == other.grouping_terms
        )

    def __str__(self) -> str:
        terms = ", ".join(t.to_string() for t in self.terms)
        return (
            f"TermSet(terms=[{terms}], eval_terms={self.eval_terms}, "
            f"response={self.response}, intercept={self.intercept})"
        )


def _unique(items):
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def _response_name(lhs: Any) -> str:
    """Row name of the response: the variable, or the rendered expression."""
    if is_symbol(lhs) and lhs:
        return lhs
    if is_call(lhs):
        return expression_to_string(lhs)
    raise FormulaSyntaxError(
        expression=lhs,
        reason=f"the response must be a variable or an expression, got {type(lhs).__name__} {lhs!r}",
        suggestions=[
            "Put the response variable on the left: 'y ~ x'",
            "Use a one-sided formula '~ x' when there is no response",
        ],
    )


def build_term_set(formula: "Formula") -> TermSet:
    """
    Build the term set of a formula.

    The right-hand side is wrapped in a top-level sum so that a single term
    or a bare intercept is handled like any other sum. Its children are sorted
    by degree and de-duplicated, keeping the first occurrence.

    The intercept is present unless some intercept term says otherwise:
    ``y ~ x`` and ``y ~ 1 + x`` have one, ``y ~ 0 + x``, ``y ~ -1 + x`` and
    ``y ~ x - 1`` do not.

    The response always gets the first row of the evaluation variables: the
    variable name itself, or the rendered expression for a compound response
    such as ``log(y)``.

    Args:
        formula: Formula to expand

    Returns:
        TermSet for the formula

    Raises:
        FormulaSyntaxError: If the formula contains malformed expressions,
            or a response that is neither a variable nor an expression
    """
    rhs = sort_terms(build_term(Operator.SUM, [formula.rhs]))
    children = _unique(rhs.children)

    grouping_terms = [t for t in children if not is_fixed_effect(t)]
    children = [t for t in children if is_fixed_effect(t)]

    intercepts = [t for t in children if t.is_intercept()]
    has_intercept = all(t.has_intercept for t in intercepts)

    terms = [t for t in children if not t.is_intercept()]
    order = [degree(t) for t in terms]
    term_variables = [evaluation_terms(t) for t in terms]

    has_response = formula.lhs is not None
    variables: List[str] = []
    if has_response:
        variables.append(_response_name(formula.lhs))
    for names in term_variables:
        variables.extend(names)
    eval_terms = _unique(variables)

    variable_sets = [set(names) for names in term_variables]
    factors = np.array(
        [[name in names for names in variable_sets] for name in eval_terms],
        dtype=bool,
    ).reshape(len(eval_terms), len(terms))
    is_non_redundant = np.zeros_like(factors, dtype=bool)

    logger.debug(
        "Built term set",
        terms=len(terms),
        variables=len(eval_terms),
        intercept=has_intercept,
        response=has_response,
        grouping=len(grouping_terms),
    )

    return TermSet(
        terms=terms,
        eval_terms=eval_terms,
        factors=factors,
        is_non_redundant=is_non_redundant,
        order=order,
        response=has_response,
        intercept=has_intercept,
        grouping_terms=grouping_terms,
    )


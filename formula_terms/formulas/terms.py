"""
Formula term representations for formula-terms.

Defines the terms that can appear in a model formula and the rewrite rules
that normalize a nested expression into a sum of interactions:

- associativity: ``+(a, +(b, c)) -> +(a, b, c)`` and likewise for ``&``
- distributivity: ``&(a, +(b, c)) -> +(&(a, b), &(a, c))``
- crossing: ``a * b -> +(a, b, &(a, b))``
- intercept removal: ``a - 1 -> +(a, -1)``
"""

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from enum import Enum
from functools import reduce
from typing import Any, Iterable, List, Union

from .expressions import (
    Call,
    call_arguments,
    call_operator,
    is_call,
    is_integer,
    is_symbol,
)
from ..core.exceptions import FormulaSyntaxError


class Operator(str, Enum):
    """Operator heads of compound terms."""

    SUM = "+"
    INTERACTION = "&"
    CROSSING = "*"  # eliminated during construction
    SUBTRACTION = "-"  # eliminated during construction
    GROUPING = "|"


INTERCEPT_VALUES = (-1, 0, 1)


class AbstractTerm(ABC):
    """Abstract base class for formula terms."""

    @abstractmethod
    def degree(self) -> int:
        """Interaction order of the term."""

    @abstractmethod
    def evaluation_terms(self) -> List[str]:
        """Names of the data variables this term is built from, in order."""

    @abstractmethod
    def to_expression(self) -> Any:
        """Convert the term back to an expression tree."""

    @abstractmethod
    def to_string(self) -> str:
        """Convert term to string representation."""

    @abstractmethod
    def copy(self) -> "AbstractTerm":
        """Structural deep copy."""

    def is_intercept(self) -> bool:
        """True only for intercept terms."""
        return False

    def is_fixed_effect(self) -> bool:
        """False for grouping (random effect) terms."""
        return True

    def __str__(self) -> str:
        return self.to_string()


@dataclass(frozen=True)
class EvaluationTerm(AbstractTerm):
    """Leaf term referring to a single data variable."""

    name: str

    def __post_init__(self):
        if not self.name or not isinstance(self.name, str):
            raise FormulaSyntaxError(
                expression=self.name,
                reason="variable names must be non-empty strings",
            )

    def degree(self) -> int:
        """Always 1 for a single variable."""
        return 1

    def evaluation_terms(self) -> List[str]:
        """The variable name as a one-element list."""
        return [self.name]

    def to_expression(self) -> str:
        """The variable as a bare symbol."""
        return self.name

    def to_string(self) -> str:
        return self.name

    def copy(self) -> "EvaluationTerm":
        # immutable
        return self


class Term(AbstractTerm):
    """
    Compound term: an operator head with an ordered list of children.

    Terms are normally obtained from :func:`to_term` or :func:`build_term`,
    which apply the rewrite rules. Instantiating ``Term`` directly stores the
    children as given.

    Two terms are equal when they have the same head and equal children in
    the same order.
    """

    def __init__(self, head: Union[Operator, int], children: Iterable[AbstractTerm] = ()):
        self.head = head
        self.children: List[AbstractTerm] = list(children)

    def __eq__(self, other: Any) -> bool:
        """Structural equality: same head and equal children in order."""
        if not isinstance(other, Term):
            return NotImplemented
        return self.head == other.head and self.children == other.children

    def __hash__(self) -> int:
        return hash((self.head, tuple(self.children)))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.to_string()})"

    def degree(self) -> int:
        """Number of factors for an interaction, 1 for any other compound."""
        if self.head is Operator.INTERACTION:
            return len(self.children)
        return 1

    def evaluation_terms(self) -> List[str]:
        """
        Variables of sums and interactions in child order, duplicates kept.

        Grouping terms contribute no variables.
        """
        if self.head in (Operator.SUM, Operator.INTERACTION):
            names: List[str] = []
            for child in self.children:
                names.extend(child.evaluation_terms())
            return names
        return []

    def is_fixed_effect(self) -> bool:
        return self.head is not Operator.GROUPING

    def to_expression(self) -> Call:
        return Call(self.head.value, [child.to_expression() for child in self.children])

    def to_string(self) -> str:
        """Prefix form such as ``&(a, b)``; grouping terms render as ``(1 | g)``."""
        if self.head is Operator.GROUPING and len(self.children) == 2:
            return f"({self.children[0]} | {self.children[1]})"
        inner = ", ".join(child.to_string() for child in self.children)
        return f"{self.head.value}({inner})"

    def copy(self) -> "Term":
        """Copy of the term with every child copied."""
        return Term(self.head, [child.copy() for child in self.children])


class InterceptTerm(Term):
    """
    Zero-child term denoting the presence or absence of an intercept.

    ``1`` adds the intercept, ``0`` and ``-1`` remove it (they differ only in
    how they were spelled in the formula).
    """

    def __init__(self, value: int):
        if not is_integer(value) or value not in INTERCEPT_VALUES:
            raise FormulaSyntaxError(
                expression=value,
                reason=f"cannot build an intercept term from {value!r}",
                suggestions=[
                    "Only the integers -1, 0 and 1 can appear in a formula",
                    "Use '1 +' to keep and '0 +' or '- 1' to remove the intercept",
                ],
            )
        super().__init__(value)

    @property
    def value(self) -> int:
        return self.head

    @property
    def has_intercept(self) -> bool:
        """Whether the term keeps the intercept."""
        return self.head == 1

    def degree(self) -> int:
        """Intercepts have order 0."""
        return 0

    def is_intercept(self) -> bool:
        return True

    def to_expression(self) -> int:
        return self.head

    def to_string(self) -> str:
        return str(self.head)

    def copy(self) -> "InterceptTerm":
        return InterceptTerm(self.head)


def degree(term: AbstractTerm) -> int:
    """Interaction order: 0 for intercepts, k for k-way interactions, else 1."""
    return term.degree()


def evaluation_terms(term: AbstractTerm) -> List[str]:
    """Variable names ``term`` is built from."""
    return term.evaluation_terms()


def is_fixed_effect(term: AbstractTerm) -> bool:
    """Whether ``term`` is a fixed effect rather than a grouping term."""
    return term.is_fixed_effect()


def sort_terms(term: Term) -> Term:
    """Stable in-place sort of ``term``'s children by degree."""
    term.children.sort(key=degree)
    return term


def to_term(expr: Any) -> AbstractTerm:
    """
    Convert an expression tree into a normalized term.

    Args:
        expr: Symbol, integer literal, Call node, or an existing term

    Returns:
        EvaluationTerm, InterceptTerm or a normalized compound Term

    Raises:
        FormulaSyntaxError: For unknown operators, intercepts outside
            {-1, 0, 1}, unsupported subtractions and non-expression values

    Examples:
        "x"                                 -> EvaluationTerm("x")
        1                                   -> InterceptTerm(1)
        Call("*", ["a", "b"])               -> +(a, b, &(a, b))
        Call("&", ["a", Call("+", ["b", "c"])]) -> +(&(a, b), &(a, c))
    """
    if isinstance(expr, AbstractTerm):
        return expr
    if is_integer(expr):
        return InterceptTerm(expr)
    if is_symbol(expr):
        return EvaluationTerm(expr)
    if is_call(expr):
        children = [to_term(arg) for arg in call_arguments(expr)]
        return build_term(call_operator(expr), children)

    raise FormulaSyntaxError(
        expression=expr,
        reason=f"non-call expression detected: '{type(expr).__name__}'",
        suggestions=[
            "Expressions are symbols (str), integers, or Call nodes",
            "Floating point numbers are not valid formula terms",
        ],
    )


def build_term(head: Union[Operator, str], children: Iterable[Any]) -> AbstractTerm:
    """Build a term with ``head`` by folding ``children`` in one at a time."""
    operator = _operator(head)
    children = [to_term(child) for child in children]

    if operator is Operator.SUBTRACTION:
        return _subtract(children)
    if operator is Operator.CROSSING:
        return _expand_crossing(children)
    return _add_children(Term(operator), children)


def _operator(head: Any) -> Operator:
    if isinstance(head, Operator):
        return head
    try:
        return Operator(head)
    except ValueError:
        raise FormulaSyntaxError(
            expression=head,
            reason=f"unsupported operator '{head}'",
            suggestions=[
                "Supported operators: + (sum), & (interaction), * (crossing), "
                "- (intercept removal), | (grouping)",
                "Transform variables before building the formula",
            ],
        ) from None


def _has_head(term: AbstractTerm, head: Operator) -> bool:
    return isinstance(term, Term) and term.head is head


def _add_children(term: Term, children: Iterable[AbstractTerm]) -> AbstractTerm:
    """
    Fold ``children`` into ``term`` left to right, applying rewrite rules.

    ``queue`` holds the children still to be added, so the rules can splice
    into it (associativity, crossing) or hand the remainder to every branch
    of a distribution.
    """
    queue = deque(children)

    while queue:
        child = queue.popleft()

        if _has_head(child, Operator.CROSSING):
            queue.appendleft(_expand_crossing(child.children))
            continue

        if term.head in (Operator.SUM, Operator.INTERACTION) and _has_head(child, term.head):
            queue.extendleft(reversed(child.children))
            continue

        if term.head is Operator.INTERACTION and _has_head(child, Operator.SUM):
            rest = list(queue)
            branches = [
                _add_children(term.copy(), [grandchild.copy()] + [c.copy() for c in rest])
                for grandchild in child.children
            ]
            return _add_children(Term(Operator.SUM), branches)

        term.children.append(child)

    return term


def _expand_pair(left: AbstractTerm, right: AbstractTerm) -> AbstractTerm:
    interaction = _add_children(Term(Operator.INTERACTION), [left.copy(), right.copy()])
    return _add_children(Term(Operator.SUM), [left, right, interaction])


def _expand_crossing(children: List[AbstractTerm]) -> AbstractTerm:
    if not children:
        raise FormulaSyntaxError(
            expression="*",
            reason="crossing requires at least one operand",
        )
    return reduce(_expand_pair, children)


def _subtract(children: List[AbstractTerm]) -> AbstractTerm:
    if len(children) != 2:
        raise FormulaSyntaxError(
            expression="-",
            reason=f"subtraction takes exactly two operands, got {len(children)}",
        )
    if children[1] != InterceptTerm(1):
        raise FormulaSyntaxError(
            expression=children[1].to_string(),
            reason=f"invalid subtraction of {children[1]}; subtraction only supported for -1",
            suggestions=[
                "Only the intercept can be subtracted: 'y ~ x - 1'",
                "Use drop_term() to remove other terms from a formula",
            ],
        )
    return _add_children(Term(Operator.SUM), [children[0], InterceptTerm(-1)])

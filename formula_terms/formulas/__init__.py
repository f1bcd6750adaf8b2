"""
Formula system for formula-terms.

Provides formula parsing, term normalization and term-set extraction.
"""

from .expressions import Call, Expression, expression_to_string
from .terms import (
    AbstractTerm,
    Term,
    EvaluationTerm,
    InterceptTerm,
    Operator,
    to_term,
    build_term,
    degree,
    evaluation_terms,
    is_fixed_effect,
    sort_terms,
)
from .term_set import TermSet, build_term_set
from .formula import Formula, reconstruct, drop_term
from .parser import FormulaParser, parse_formula, parse_expression

__all__ = [
    # Main API
    "parse_formula",
    "parse_expression",
    "to_term",
    "build_term_set",
    "reconstruct",
    "drop_term",
    # Core classes
    "Call",
    "Expression",
    "Formula",
    "FormulaParser",
    "TermSet",
    # Term types
    "AbstractTerm",
    "Term",
    "EvaluationTerm",
    "InterceptTerm",
    "Operator",
    # Term helpers
    "build_term",
    "degree",
    "evaluation_terms",
    "is_fixed_effect",
    "sort_terms",
    "expression_to_string",
]

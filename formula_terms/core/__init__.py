"""Core functionality for formula-terms."""

from .exceptions import (
    FormulaTermsError,
    FormulaSyntaxError,
    TermEditError,
    ContrastsError,
    ConfigurationError,
)

__all__ = [
    "FormulaTermsError",
    "FormulaSyntaxError",
    "TermEditError",
    "ContrastsError",
    "ConfigurationError",
]

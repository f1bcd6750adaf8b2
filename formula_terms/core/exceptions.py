"""
Exception classes for formula-terms.

Provides rich error information with actionable suggestions and the
offending values attached as context.
"""

from typing import List, Optional, Dict, Any


class FormulaTermsError(Exception):
    """
    Base exception class for formula-terms with rich error information.

    Provides structured error information including suggestions for
    resolution and the values that triggered the failure.
    """

    def __init__(
        self,
        message: str,
        suggestions: Optional[List[str]] = None,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.suggestions = suggestions or []
        self.error_code = error_code
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return formatted error message with suggestions."""
        message = super().__str__()

        if self.error_code:
            message = f"[{self.error_code}] {message}"

        if self.suggestions:
            message += "\n\nSuggestions:"
            for i, suggestion in enumerate(self.suggestions, 1):
                message += f"\n  {i}. {suggestion}"

        return message


class FormulaSyntaxError(FormulaTermsError):
    """Exception raised for malformed formulas and expressions."""

    def __init__(
        self,
        expression: Any = None,
        reason: Optional[str] = None,
        suggestions: Optional[List[str]] = None,
        **kwargs
    ):
        if reason and expression is not None:
            message = f"Malformed formula expression {expression!r}: {reason}"
        elif reason:
            message = f"Malformed formula: {reason}"
        else:
            message = f"Malformed formula expression: {expression!r}"

        if suggestions is None:
            suggestions = [
                "Check formula syntax (e.g. 'y ~ a + b', 'y ~ a*b', 'y ~ a&b')",
                "Supported operators: + & * - | and the intercepts -1, 0, 1",
                "Use '- 1' or '0 +' to remove the intercept",
            ]

        super().__init__(
            message=message,
            suggestions=suggestions,
            error_code="FORMULA_SYNTAX",
            context={"expression": expression, "reason": reason},
            **kwargs
        )


class TermEditError(FormulaTermsError):
    """Exception raised when a formula cannot be edited as requested."""

    def __init__(
        self,
        term: Any = None,
        rhs: Any = None,
        reason: Optional[str] = None,
        **kwargs
    ):
        if reason:
            message = f"Cannot drop {term!r} from formula: {reason}"
        else:
            message = f"{term!r} is not a summand of '{rhs}'"

        suggestions = kwargs.pop("suggestions", None) or [
            "Only direct arguments of a '+' right-hand side can be dropped",
            "The term must match an argument exactly (no normalization is applied)",
            "The only droppable number is the intercept 1",
        ]

        super().__init__(
            message=message,
            suggestions=suggestions,
            error_code="TERM_EDIT",
            context={"term": term, "rhs": rhs, "reason": reason},
            **kwargs
        )


class ContrastsError(FormulaTermsError):
    """Exception raised for contrast coding configuration issues."""

    def __init__(
        self,
        reason: Optional[str] = None,
        levels: Optional[List[Any]] = None,
        contrast_levels: Optional[List[Any]] = None,
        expected: Any = None,
        actual: Any = None,
        **kwargs
    ):
        message = reason or "Contrasts could not be computed"
        if levels is not None:
            message += f"\n  Data levels: {list(levels)}"
        if contrast_levels is not None:
            message += f"\n  Contrast levels: {list(contrast_levels)}"

        suggestions = kwargs.pop("suggestions", None) or [
            "Check that declared levels match the levels present in the data",
            "A categorical variable needs at least two levels to be coded",
            "The base level must be one of the levels",
        ]

        super().__init__(
            message=message,
            suggestions=suggestions,
            error_code="CONTRASTS",
            context={
                "levels": levels,
                "contrast_levels": contrast_levels,
                "expected": expected,
                "actual": actual,
            },
            **kwargs
        )


class ConfigurationError(FormulaTermsError):
    """Exception raised for configuration issues."""

    def __init__(self, config_key: Optional[str] = None, reason: Optional[str] = None, **kwargs):
        if config_key:
            message = f"Invalid configuration for '{config_key}'"
            suggestions = [
                f"Check the value for configuration key '{config_key}'",
                "Review configuration file syntax",
                "Check environment variable formatting",
                "Use formula_terms.get_config() to inspect current settings",
            ]
        else:
            message = "Configuration error"
            suggestions = [
                "Check configuration file syntax",
                "Verify all required settings are provided",
            ]
        if reason:
            message = f"{message}: {reason}"

        kwargs.pop('suggestions', None)

        super().__init__(
            message=message,
            suggestions=suggestions,
            error_code="CONFIG",
            context={"config_key": config_key, "reason": reason},
            **kwargs
        )

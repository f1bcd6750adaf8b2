"""
formula-terms: model formulas as normalized term trees

Parses statistical model formulas such as ``y ~ a*b + (1 | g)`` into a
canonical sum of interactions, extracts the term and variable metadata a
design matrix builder needs, and computes contrast codings for categorical
variables.
"""

__version__ = "0.1.0"

# Formula system
from .formulas import (
    Call,
    Formula,
    FormulaParser,
    TermSet,
    AbstractTerm,
    Term,
    EvaluationTerm,
    InterceptTerm,
    Operator,
    parse_formula,
    parse_expression,
    to_term,
    build_term_set,
    reconstruct,
    drop_term,
)

# Contrasts
from .contrasts import (
    AbstractContrasts,
    DummyCoding,
    EffectsCoding,
    HelmertCoding,
    FullDummyCoding,
    ContrastsCoding,
    ContrastsMatrix,
    CodingType,
    get_coding,
    register_coding,
    list_available_codings,
    default_contrasts,
)

# Configuration
from .config.settings import FormulaTermsConfig, get_default_config, reset_config

# Import key exception classes
from .core.exceptions import (
    FormulaTermsError,
    FormulaSyntaxError,
    TermEditError,
    ContrastsError,
    ConfigurationError,
)

__all__ = [
    # Version info
    "__version__",

    # Formula system
    "Call",
    "Formula",
    "FormulaParser",
    "TermSet",
    "AbstractTerm",
    "Term",
    "EvaluationTerm",
    "InterceptTerm",
    "Operator",
    "parse_formula",
    "parse_expression",
    "to_term",
    "build_term_set",
    "reconstruct",
    "drop_term",

    # Contrasts
    "AbstractContrasts",
    "DummyCoding",
    "EffectsCoding",
    "HelmertCoding",
    "FullDummyCoding",
    "ContrastsCoding",
    "ContrastsMatrix",
    "CodingType",
    "get_coding",
    "register_coding",
    "list_available_codings",
    "default_contrasts",

    # Configuration
    "FormulaTermsConfig",
    "get_config",
    "configure",
    "reset_config",

    # Exceptions
    "FormulaTermsError",
    "FormulaSyntaxError",
    "TermEditError",
    "ContrastsError",
    "ConfigurationError",
]


def get_config() -> FormulaTermsConfig:
    """Get the global configuration instance."""
    return get_default_config()


def configure(**kwargs) -> None:
    """
    Update global configuration.

    Examples:
        configure(**{"contrasts.default_coding": "effects"})
        configure(**{"logging.level": "DEBUG"})
    """
    get_config().update(**kwargs)

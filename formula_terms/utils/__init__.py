"""Utility functions and classes for formula-terms."""

from .logging import get_logger, setup_logging
from .validation import validate_matrix_shape

__all__ = [
    "get_logger",
    "setup_logging",
    "validate_matrix_shape",
]

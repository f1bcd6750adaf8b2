"""
Validation utilities for formula-terms.

Provides shape checks for coding matrices.
"""

import numpy as np
from typing import Tuple, Optional, Any
from ..core.exceptions import ContrastsError


def validate_matrix_shape(
    matrix: Any,
    expected_shape: Tuple[Optional[int], ...],
    name: str = "matrix"
) -> np.ndarray:
    """
    Validate that ``matrix`` is a 2-d array of the expected shape.

    Args:
        matrix: Array-like to validate
        expected_shape: Expected exact shape (None values are ignored)
        name: Name for error messages

    Returns:
        The matrix as a float64 numpy array

    Raises:
        ContrastsError: If validation fails
    """
    try:
        array = np.asarray(matrix, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise ContrastsError(
            reason=f"{name} must be a numeric matrix: {e}",
            suggestions=[
                "Pass a numpy array or a nested list of numbers",
            ]
        ) from e

    if array.ndim != len(expected_shape):
        raise ContrastsError(
            reason=f"{name} has {array.ndim} dimensions, expected {len(expected_shape)}",
            expected=expected_shape,
            actual=array.shape,
            suggestions=[
                f"Expected shape: {expected_shape}",
                f"Actual shape: {array.shape}",
            ]
        )

    mismatch = any(
        expected is not None and actual != expected
        for actual, expected in zip(array.shape, expected_shape)
    )
    if mismatch:
        raise ContrastsError(
            reason=(
                f"{name} wrong size for {expected_shape[0]} levels. "
                f"Expected {expected_shape}, got {array.shape}"
            ),
            expected=expected_shape,
            actual=array.shape,
            suggestions=[
                "A contrasts matrix for k levels must have k rows and k-1 columns",
                "Check that the declared levels match the matrix rows",
            ]
        )

    return array

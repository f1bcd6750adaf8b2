"""
Contrast coding for categorical variables.

Coding systems describe how levels become model matrix columns;
ContrastsMatrix instantiates a coding system for concrete levels.
"""

from .coding import (
    AbstractContrasts,
    DummyCoding,
    EffectsCoding,
    HelmertCoding,
    FullDummyCoding,
    ContrastsCoding,
    check_contrasts_size,
    register_coding,
    get_coding,
    list_available_codings,
    default_contrasts,
)
from .matrix import ContrastsMatrix, build_contrasts_matrix, revalidate_contrasts_matrix
from ..config.settings import CodingType

__all__ = [
    # Coding systems
    "AbstractContrasts",
    "DummyCoding",
    "EffectsCoding",
    "HelmertCoding",
    "FullDummyCoding",
    "ContrastsCoding",
    "CodingType",
    # Registry
    "register_coding",
    "get_coding",
    "list_available_codings",
    "default_contrasts",
    # Matrices
    "ContrastsMatrix",
    "build_contrasts_matrix",
    "revalidate_contrasts_matrix",
    "check_contrasts_size",
]

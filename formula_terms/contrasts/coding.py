"""
Contrast coding schemes for categorical variables.

A coding scheme describes how the k levels of a categorical variable map to
numeric model matrix columns. Each scheme optionally carries the levels to
code (fixing their order) and a base (reference) level; both are taken from
the data when not given.

For a variable with indicator matrix X (X[i, j] = 1 when observation i has
level j) and coding matrix M, the generated columns are X @ M.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Type, Union

import numpy as np

from ..config.settings import CodingType, get_default_config
from ..core.exceptions import ContrastsError
from ..utils.validation import validate_matrix_shape


class AbstractContrasts(ABC):
    """
    Interface for contrast coding systems.

    Subclasses implement :meth:`contrasts_matrix` and may override
    :meth:`termnames`.
    """

    base: Optional[Any] = None
    levels: Optional[List[Any]] = None

    @abstractmethod
    def contrasts_matrix(self, base_index: int, n: int) -> np.ndarray:
        """
        Coding matrix for ``n`` levels with the base at ``base_index``.

        Rows follow the level order, columns the term names.
        """

    def termnames(self, levels: Sequence[Any], base_index: int) -> List[Any]:
        """Column names: every level except the base, in level order."""
        return [level for i, level in enumerate(levels) if i != base_index]

    @property
    def full_rank(self) -> bool:
        return False


@dataclass
class _BaseLevelCoding(AbstractContrasts):
    """Settings shared by the reduced-rank coding systems."""

    base: Optional[Any] = None
    levels: Optional[List[Any]] = None

    def __post_init__(self):
        if self.levels is not None:
            self.levels = list(self.levels)


@dataclass
class DummyCoding(_BaseLevelCoding):
    """
    Dummy coding: one 0/1 indicator column for each non-base level.

    Also known as treatment coding. With an intercept, coefficients are
    differences from the base level mean.

    Examples:
        >>> ContrastsMatrix.from_contrasts(DummyCoding(), ["a", "b", "c", "d"]).matrix
        array([[0., 0., 0.],
               [1., 0., 0.],
               [0., 1., 0.],
               [0., 0., 1.]])
    """

    def contrasts_matrix(self, base_index: int, n: int) -> np.ndarray:
        not_base = [i for i in range(n) if i != base_index]
        return np.eye(n)[:, not_base]


@dataclass
class EffectsCoding(_BaseLevelCoding):
    """
    Effects coding: like dummy coding, but the base level is coded -1.

    Also known as sum or deviation coding. With balanced levels the columns
    are mean centered and the intercept is the grand mean. The first level is
    the default base (R and SPSS default to the last).

    Examples:
        >>> ContrastsMatrix.from_contrasts(EffectsCoding(), ["a", "b", "c", "d"]).matrix
        array([[-1., -1., -1.],
               [ 1.,  0.,  0.],
               [ 0.,  1.,  0.],
               [ 0.,  0.,  1.]])
    """

    def contrasts_matrix(self, base_index: int, n: int) -> np.ndarray:
        not_base = [i for i in range(n) if i != base_index]
        matrix = np.eye(n)[:, not_base]
        matrix[base_index, :] = -1
        return matrix


@dataclass
class HelmertCoding(_BaseLevelCoding):
    """
    Helmert coding: each level against the mean of the levels before it.

    Column i holds -1 for the i levels below, i for level i + 1 and 0 above.
    With balanced levels the columns are mean centered and orthogonal.

    With a base level other than the first, the base level takes the all -1
    row and the remaining levels keep their relative order, so the columns
    compare each non-base level with the levels before it in that order.

    Examples:
        >>> ContrastsMatrix.from_contrasts(HelmertCoding(), ["a", "b", "c", "d"]).matrix
        array([[-1., -1., -1.],
               [ 1., -1., -1.],
               [ 0.,  2., -1.],
               [ 0.,  0.,  3.]])
    """

    def contrasts_matrix(self, base_index: int, n: int) -> np.ndarray:
        matrix = np.zeros((n, n - 1))
        for i in range(1, n):
            matrix[:i, i - 1] = -1
            matrix[i, i - 1] = i

        # move the all -1 row to the base level, keeping the other rows in order
        order = [base_index] + [i for i in range(n) if i != base_index]
        shuffled = np.empty_like(matrix)
        shuffled[order, :] = matrix
        return shuffled


@dataclass
class FullDummyCoding(AbstractContrasts):
    """
    Full-rank dummy coding: one indicator column for every level.

    There is no base level. Used when a categorical variable with k levels
    has to produce k columns, e.g. when lower-order terms are missing from
    the model.
    """

    def contrasts_matrix(self, base_index: int, n: int) -> np.ndarray:
        return np.eye(n)

    def termnames(self, levels: Sequence[Any], base_index: int) -> List[Any]:
        return list(levels)

    @property
    def full_rank(self) -> bool:
        return True


class ContrastsCoding(AbstractContrasts):
    """
    Coding by a user-supplied contrasts matrix.

    For k levels the matrix must be k × (k-1). It is checked against the
    declared levels right away, and against the data levels when a
    ContrastsMatrix is built.
    """

    def __init__(self, matrix: Any, base: Optional[Any] = None, levels: Optional[Sequence[Any]] = None):
        self.matrix = validate_matrix_shape(matrix, (None, None), name="contrasts matrix")
        self.base = base
        self.levels = list(levels) if levels is not None else None
        if self.levels is not None:
            check_contrasts_size(self.matrix, len(self.levels))

    def __repr__(self) -> str:
        return (
            f"ContrastsCoding(matrix=<{self.matrix.shape[0]}x{self.matrix.shape[1]}>, "
            f"base={self.base!r}, levels={self.levels!r})"
        )

    def contrasts_matrix(self, base_index: int, n: int) -> np.ndarray:
        return check_contrasts_size(self.matrix, n)


def check_contrasts_size(matrix: Any, n_levels: int) -> np.ndarray:
    """Raise ContrastsError unless ``matrix`` is ``n_levels`` × ``n_levels - 1``."""
    return validate_matrix_shape(matrix, (n_levels, n_levels - 1), name="contrasts matrix")


# Registry of named coding systems
_CODING_REGISTRY: Dict[str, Type[AbstractContrasts]] = {
    CodingType.DUMMY.value: DummyCoding,
    CodingType.EFFECTS.value: EffectsCoding,
    CodingType.HELMERT.value: HelmertCoding,
    CodingType.FULL_DUMMY.value: FullDummyCoding,
    CodingType.CONTRASTS.value: ContrastsCoding,
}


def register_coding(name: Union[str, CodingType], coding_class: Type[AbstractContrasts]) -> None:
    """Register a coding system under ``name``."""
    if not (isinstance(coding_class, type) and issubclass(coding_class, AbstractContrasts)):
        raise ContrastsError(
            reason=f"{coding_class!r} is not an AbstractContrasts subclass",
            suggestions=["Subclass AbstractContrasts and implement contrasts_matrix()"],
        )
    _CODING_REGISTRY[_coding_name(name)] = coding_class


def get_coding(name: Union[str, CodingType], **settings) -> AbstractContrasts:
    """
    Instantiate the coding system registered under ``name``.

    Args:
        name: Registered name, e.g. 'dummy' or CodingType.HELMERT
        **settings: Passed to the coding constructor (base=, levels=, ...)
    """
    key = _coding_name(name)
    if key not in _CODING_REGISTRY:
        raise ContrastsError(
            reason=f"unknown coding system '{key}'",
            suggestions=[f"Available coding systems: {', '.join(list_available_codings())}"],
        )
    return _CODING_REGISTRY[key](**settings)


def list_available_codings() -> List[str]:
    return sorted(_CODING_REGISTRY)


def default_contrasts(**settings) -> AbstractContrasts:
    """Instantiate the configured default coding system."""
    return get_coding(get_default_config().contrasts.default_coding, **settings)


def _coding_name(name: Union[str, CodingType]) -> str:
    return name.value if isinstance(name, CodingType) else str(name).lower()

"""
Contrasts matrices: a coding system instantiated for concrete levels.
"""

from typing import Any, List, Sequence

import numpy as np
import pandas as pd
from pandas.api.types import infer_dtype

from .coding import AbstractContrasts, FullDummyCoding
from ..core.exceptions import ContrastsError
from ..utils.logging import get_logger


logger = get_logger(__name__)


class ContrastsMatrix:
    """
    A contrast coding system applied to a particular set of levels.

    Attributes:
        matrix: float64 array, one row per level and one column per term name
        termnames: Column names
        levels: Levels the matrix was built for, in row order
        contrasts: The coding system instance

    Two ContrastsMatrix objects are equal when matrix, term names, levels and
    coding system type agree; coding settings are not compared.
    """

    def __init__(
        self,
        matrix: np.ndarray,
        termnames: Sequence[Any],
        levels: Sequence[Any],
        contrasts: AbstractContrasts,
    ):
        self.matrix = np.asarray(matrix, dtype=np.float64)
        self.termnames = list(termnames)
        self.levels = list(levels)
        self.contrasts = contrasts

    @classmethod
    def from_contrasts(cls, contrasts: AbstractContrasts, levels: Sequence[Any]) -> "ContrastsMatrix":
        """
        Build the contrasts matrix of ``contrasts`` for the data ``levels``.

        Levels declared on the coding system are used when present and must
        match the data levels exactly: data levels missing from the contrasts
        would leave rows undefined, and contrast levels missing from the data
        would produce empty, rank-deficient columns.

        Args:
            contrasts: Coding system instance
            levels: Levels observed in the data

        Returns:
            ContrastsMatrix for the levels

        Raises:
            ContrastsError: On a class instead of an instance, mismatching
                level types or sets, fewer than two levels, an unknown base
                level or a wrongly shaped user matrix
        """
        if isinstance(contrasts, type):
            raise ContrastsError(
                reason=(
                    f"contrast types must be instantiated "
                    f"(use {contrasts.__name__}() instead of {contrasts.__name__})"
                ),
                suggestions=[f"Pass {contrasts.__name__}() with optional base= and levels="],
            )

        levels = list(levels)

        if isinstance(contrasts, FullDummyCoding):
            return cls(np.eye(len(levels)), levels, levels, contrasts)

        c_levels = list(contrasts.levels) if contrasts.levels is not None else levels

        c_type, data_type = _level_type(c_levels), _level_type(levels)
        if "empty" not in (c_type, data_type) and c_type != data_type:
            raise ContrastsError(
                reason=(
                    f"mismatching levels types: got {data_type}, "
                    f"expected {c_type} based on contrasts levels"
                ),
                levels=levels,
                contrast_levels=c_levels,
                expected=c_type,
                actual=data_type,
            )

        mismatched = _symmetric_difference(c_levels, levels)
        if mismatched:
            raise ContrastsError(
                reason=f"contrasts levels not found in data or vice-versa: {mismatched}",
                levels=levels,
                contrast_levels=c_levels,
            )

        n = len(c_levels)
        if n == 0:
            raise ContrastsError(
                reason="empty set of levels found (need at least two to compute contrasts)",
                levels=levels,
            )
        if n == 1:
            raise ContrastsError(
                reason=f"only one level found: {c_levels[0]!r} (need at least two to compute contrasts)",
                levels=levels,
            )

        if contrasts.base is None:
            base_index = 0
        else:
            try:
                base_index = c_levels.index(contrasts.base)
            except ValueError:
                raise ContrastsError(
                    reason=f"base level {contrasts.base!r} not found in levels {c_levels}",
                    contrast_levels=c_levels,
                    suggestions=[f"Choose the base level from {c_levels}"],
                ) from None

        termnames = contrasts.termnames(c_levels, base_index)
        matrix = contrasts.contrasts_matrix(base_index, n)

        logger.debug(
            "Built contrasts matrix",
            coding=type(contrasts).__name__,
            levels=n,
            base=c_levels[base_index],
            shape=matrix.shape,
        )
        return cls(matrix, termnames, c_levels, contrasts)

    @classmethod
    def revalidate(cls, existing: "ContrastsMatrix", levels: Sequence[Any]) -> "ContrastsMatrix":
        """
        Check new data ``levels`` against an existing contrasts matrix.

        Unlike :meth:`from_contrasts` the new levels only have to be a subset
        of the existing ones, so that new data with fewer levels can be
        coded the same way.

        Returns:
            ``existing``, unchanged

        Raises:
            ContrastsError: If some level is not in ``existing.levels``
        """
        known = set(existing.levels)
        missing = _unique(level for level in levels if level not in known)
        if missing:
            raise ContrastsError(
                reason=f"there are levels in data that are not in ContrastsMatrix: {missing}",
                levels=list(levels),
                contrast_levels=existing.levels,
            )
        return existing

    def to_full_rank(self) -> "ContrastsMatrix":
        """Promote to the full-rank dummy coding of the same levels."""
        return ContrastsMatrix.from_contrasts(FullDummyCoding(), self.levels)

    def to_frame(self) -> pd.DataFrame:
        """The coding matrix as a DataFrame indexed by level."""
        return pd.DataFrame(self.matrix, index=pd.Index(self.levels), columns=self.termnames)

    @property
    def shape(self):
        return self.matrix.shape

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ContrastsMatrix):
            return NotImplemented
        return (
            type(self.contrasts) is type(other.contrasts)
            and np.array_equal(self.matrix, other.matrix)
            and self.termnames == other.termnames
            and self.levels == other.levels
        )

    def __hash__(self) -> int:
        return hash((
            type(self.contrasts),
            self.matrix.shape,
            self.matrix.tobytes(),
            tuple(self.termnames),
            tuple(self.levels),
        ))

    def __repr__(self) -> str:
        return (
            f"ContrastsMatrix({type(self.contrasts).__name__}, "
            f"levels={self.levels}, termnames={self.termnames})"
        )


def build_contrasts_matrix(contrasts: AbstractContrasts, levels: Sequence[Any]) -> ContrastsMatrix:
    return ContrastsMatrix.from_contrasts(contrasts, levels)


def revalidate_contrasts_matrix(existing: ContrastsMatrix, levels: Sequence[Any]) -> ContrastsMatrix:
    return ContrastsMatrix.revalidate(existing, levels)


def _level_type(levels: List[Any]) -> str:
    return infer_dtype(levels, skipna=False)


def _symmetric_difference(left: List[Any], right: List[Any]) -> List[Any]:
    left_set, right_set = set(left), set(right)
    return _unique(
        [level for level in left if level not in right_set]
        + [level for level in right if level not in left_set]
    )


def _unique(items) -> List[Any]:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result

"""
Tests for contrast coding systems and contrasts matrices.
"""

import numpy as np
import pandas as pd
import pytest

import formula_terms
from formula_terms.contrasts import (
    AbstractContrasts,
    CodingType,
    ContrastsCoding,
    ContrastsMatrix,
    DummyCoding,
    EffectsCoding,
    FullDummyCoding,
    HelmertCoding,
    build_contrasts_matrix,
    check_contrasts_size,
    default_contrasts,
    get_coding,
    list_available_codings,
    register_coding,
    revalidate_contrasts_matrix,
)
from formula_terms.contrasts import coding
from formula_terms.core.exceptions import ContrastsError


class TestCodingMatrices:
    """Coding matrices for four levels with the default base."""

    def test_dummy(self, four_levels):
        cm = ContrastsMatrix.from_contrasts(DummyCoding(), four_levels)
        np.testing.assert_array_equal(cm.matrix, [
            [0, 0, 0],
            [1, 0, 0],
            [0, 1, 0],
            [0, 0, 1],
        ])
        assert cm.termnames == ["b", "c", "d"]
        assert cm.levels == four_levels

    def test_effects(self, four_levels):
        cm = ContrastsMatrix.from_contrasts(EffectsCoding(), four_levels)
        np.testing.assert_array_equal(cm.matrix, [
            [-1, -1, -1],
            [1, 0, 0],
            [0, 1, 0],
            [0, 0, 1],
        ])
        assert cm.termnames == ["b", "c", "d"]

    def test_helmert(self, four_levels):
        cm = ContrastsMatrix.from_contrasts(HelmertCoding(), four_levels)
        np.testing.assert_array_equal(cm.matrix, [
            [-1, -1, -1],
            [1, -1, -1],
            [0, 2, -1],
            [0, 0, 3],
        ])
        assert cm.termnames == ["b", "c", "d"]

    def test_helmert_columns_are_centered_and_orthogonal(self, four_levels):
        matrix = ContrastsMatrix.from_contrasts(HelmertCoding(), four_levels).matrix
        np.testing.assert_array_equal(matrix.sum(axis=0), np.zeros(3))
        gram = matrix.T @ matrix
        np.testing.assert_array_equal(gram, np.diag(np.diag(gram)))

    def test_full_dummy(self, four_levels):
        cm = ContrastsMatrix.from_contrasts(FullDummyCoding(), four_levels)
        np.testing.assert_array_equal(cm.matrix, np.eye(4))
        assert cm.termnames == four_levels
        assert FullDummyCoding().full_rank
        assert not DummyCoding().full_rank

    def test_matrix_is_float64(self, four_levels):
        for contrasts in (DummyCoding(), EffectsCoding(), HelmertCoding(), FullDummyCoding()):
            assert ContrastsMatrix.from_contrasts(contrasts, four_levels).matrix.dtype == np.float64

    def test_two_levels(self):
        cm = ContrastsMatrix.from_contrasts(EffectsCoding(), ["lo", "hi"])
        np.testing.assert_array_equal(cm.matrix, [[-1], [1]])
        assert cm.termnames == ["hi"]


class TestBaseLevel:
    """Non-default base levels."""

    def test_dummy_base(self, four_levels):
        cm = ContrastsMatrix.from_contrasts(DummyCoding(base="c"), four_levels)
        np.testing.assert_array_equal(cm.matrix, [
            [1, 0, 0],
            [0, 1, 0],
            [0, 0, 0],
            [0, 0, 1],
        ])
        assert cm.termnames == ["a", "b", "d"]

    def test_effects_base(self, four_levels):
        cm = ContrastsMatrix.from_contrasts(EffectsCoding(base="b"), four_levels)
        np.testing.assert_array_equal(cm.matrix, [
            [1, 0, 0],
            [-1, -1, -1],
            [0, 1, 0],
            [0, 0, 1],
        ])
        assert cm.termnames == ["a", "c", "d"]

    def test_helmert_base_gets_the_minus_one_row(self, four_levels):
        cm = ContrastsMatrix.from_contrasts(HelmertCoding(base="c"), four_levels)
        np.testing.assert_array_equal(cm.matrix, [
            [1, -1, -1],
            [0, 2, -1],
            [-1, -1, -1],
            [0, 0, 3],
        ])
        assert cm.termnames == ["a", "b", "d"]

    def test_numeric_levels(self):
        cm = ContrastsMatrix.from_contrasts(DummyCoding(base=2), [1, 2, 3])
        assert cm.termnames == [1, 3]
        np.testing.assert_array_equal(cm.matrix, [[1, 0], [0, 0], [0, 1]])

    def test_unknown_base_raises(self, four_levels):
        with pytest.raises(ContrastsError, match="base level 'z' not found"):
            ContrastsMatrix.from_contrasts(DummyCoding(base="z"), four_levels)


class TestLevelChecks:
    """Declared levels against data levels."""

    def test_declared_levels_set_the_order(self, four_levels):
        cm = ContrastsMatrix.from_contrasts(DummyCoding(levels=["d", "c", "b", "a"]), four_levels)
        assert cm.levels == ["d", "c", "b", "a"]
        assert cm.termnames == ["c", "b", "a"]

    def test_declared_levels_must_match_data(self):
        with pytest.raises(ContrastsError, match="not found in data or vice-versa") as exc_info:
            ContrastsMatrix.from_contrasts(DummyCoding(levels=["a", "b", "c"]), ["a", "b"])
        assert exc_info.value.error_code == "CONTRASTS"
        assert "Contrast levels: ['a', 'b', 'c']" in str(exc_info.value)

    def test_data_levels_must_be_declared(self):
        with pytest.raises(ContrastsError, match=r"\['c'\]"):
            ContrastsMatrix.from_contrasts(DummyCoding(levels=["a", "b"]), ["a", "b", "c"])

    def test_level_types_must_match(self):
        with pytest.raises(ContrastsError, match="mismatching levels types") as exc_info:
            ContrastsMatrix.from_contrasts(DummyCoding(levels=[1, 2, 3]), ["1", "2", "3"])
        assert exc_info.value.context["expected"] == "integer"
        assert exc_info.value.context["actual"] == "string"

    def test_single_level_raises(self):
        with pytest.raises(ContrastsError, match="only one level found"):
            ContrastsMatrix.from_contrasts(DummyCoding(), ["a"])

    def test_no_levels_raises(self):
        with pytest.raises(ContrastsError, match="empty set of levels"):
            ContrastsMatrix.from_contrasts(DummyCoding(), [])

    def test_class_instead_of_instance_raises(self, four_levels):
        with pytest.raises(ContrastsError, match="contrast types must be instantiated"):
            ContrastsMatrix.from_contrasts(DummyCoding, four_levels)

    def test_full_dummy_skips_level_checks(self):
        cm = ContrastsMatrix.from_contrasts(FullDummyCoding(), ["only"])
        np.testing.assert_array_equal(cm.matrix, [[1]])


class TestContrastsCoding:
    """User-supplied coding matrices."""

    def setup_method(self):
        self.matrix = np.array([
            [-1, -1, 1],
            [-1, 1, -1],
            [1, -1, -1],
            [1, 1, 1],
        ])

    def test_matrix_is_used_as_given(self, four_levels):
        cm = ContrastsMatrix.from_contrasts(ContrastsCoding(self.matrix), four_levels)
        np.testing.assert_array_equal(cm.matrix, self.matrix)
        assert cm.termnames == ["b", "c", "d"]

    def test_nested_lists_are_accepted(self, four_levels):
        cm = ContrastsMatrix.from_contrasts(ContrastsCoding(self.matrix.tolist()), four_levels)
        assert cm.shape == (4, 3)

    def test_wrong_size_for_data_raises(self):
        with pytest.raises(ContrastsError, match="wrong size for 3 levels"):
            ContrastsMatrix.from_contrasts(ContrastsCoding(self.matrix), ["a", "b", "c"])

    def test_wrong_size_for_declared_levels_raises(self):
        with pytest.raises(ContrastsError, match="wrong size for 3 levels"):
            ContrastsCoding(self.matrix, levels=["a", "b", "c"])

    def test_one_dimensional_matrix_raises(self):
        with pytest.raises(ContrastsError, match="has 1 dimensions"):
            ContrastsCoding([1, 2, 3])

    def test_non_numeric_matrix_raises(self):
        with pytest.raises(ContrastsError, match="must be a numeric matrix"):
            ContrastsCoding([["a", "b"], ["c", "d"]])

    def test_check_contrasts_size(self):
        assert check_contrasts_size(self.matrix, 4).shape == (4, 3)
        with pytest.raises(ContrastsError):
            check_contrasts_size(self.matrix, 5)


class TestRevalidation:
    """New data levels against an existing matrix."""

    def setup_method(self):
        self.existing = ContrastsMatrix.from_contrasts(DummyCoding(), ["a", "b", "c"])

    def test_subset_is_accepted(self):
        assert ContrastsMatrix.revalidate(self.existing, ["a", "b"]) is self.existing
        assert revalidate_contrasts_matrix(self.existing, ["c", "c", "a"]) is self.existing

    def test_unknown_level_raises(self):
        with pytest.raises(ContrastsError, match=r"not in ContrastsMatrix: \['d'\]"):
            ContrastsMatrix.revalidate(self.existing, ["a", "d"])


class TestContrastsMatrixValue:
    """Equality, promotion and conversions."""

    def test_equality_ignores_settings(self, four_levels):
        left = build_contrasts_matrix(DummyCoding(), four_levels)
        right = build_contrasts_matrix(DummyCoding(base="a", levels=four_levels), four_levels)
        assert left == right
        assert hash(left) == hash(right)

    def test_equality_compares_coding_type(self, four_levels):
        dummy = build_contrasts_matrix(DummyCoding(), four_levels)
        same_numbers = build_contrasts_matrix(ContrastsCoding(dummy.matrix), four_levels)
        assert dummy != same_numbers

    def test_different_matrices_differ(self, four_levels):
        assert build_contrasts_matrix(DummyCoding(), four_levels) != build_contrasts_matrix(
            EffectsCoding(), four_levels
        )

    def test_to_full_rank(self):
        cm = build_contrasts_matrix(EffectsCoding(), ["x", "y", "z"]).to_full_rank()
        assert isinstance(cm.contrasts, FullDummyCoding)
        np.testing.assert_array_equal(cm.matrix, np.eye(3))
        assert cm.termnames == ["x", "y", "z"]

    def test_to_frame(self, four_levels):
        frame = build_contrasts_matrix(DummyCoding(), four_levels).to_frame()
        assert isinstance(frame, pd.DataFrame)
        assert list(frame.index) == four_levels
        assert list(frame.columns) == ["b", "c", "d"]
        assert frame.loc["c", "c"] == 1.0
        assert frame.loc["a"].sum() == 0.0

    def test_repr(self):
        cm = build_contrasts_matrix(DummyCoding(), ["a", "b"])
        assert repr(cm) == "ContrastsMatrix(DummyCoding, levels=['a', 'b'], termnames=['b'])"


class TestCodingRegistry:
    """Named coding systems and the configured default."""

    def test_available_codings(self):
        assert list_available_codings() == sorted(t.value for t in CodingType)

    def test_get_coding_by_name(self):
        assert isinstance(get_coding("helmert"), HelmertCoding)
        assert isinstance(get_coding("Dummy"), DummyCoding)
        assert get_coding(CodingType.EFFECTS, base="b").base == "b"

    def test_unknown_coding_raises(self):
        with pytest.raises(ContrastsError, match="unknown coding system 'polynomial'"):
            get_coding("polynomial")

    def test_register_custom_coding(self, monkeypatch, four_levels):
        monkeypatch.setattr(coding, "_CODING_REGISTRY", dict(coding._CODING_REGISTRY))

        class DoubledDummyCoding(AbstractContrasts):
            def contrasts_matrix(self, base_index, n):
                return 2 * np.eye(n)[:, [i for i in range(n) if i != base_index]]

        register_coding("doubled", DoubledDummyCoding)
        assert "doubled" in list_available_codings()
        cm = build_contrasts_matrix(get_coding("doubled"), four_levels)
        np.testing.assert_array_equal(cm.matrix[1], [2, 0, 0])

    def test_register_rejects_non_coding(self):
        with pytest.raises(ContrastsError, match="not an AbstractContrasts subclass"):
            register_coding("bad", dict)

    def test_default_is_dummy(self):
        assert isinstance(default_contrasts(), DummyCoding)

    def test_default_from_environment(self, monkeypatch):
        monkeypatch.setenv("FORMULA_TERMS_DEFAULT_CODING", "effects")
        formula_terms.reset_config()
        assert isinstance(default_contrasts(base="b"), EffectsCoding)

    def test_default_from_configure(self):
        formula_terms.configure(**{"contrasts.default_coding": "helmert"})
        assert isinstance(default_contrasts(), HelmertCoding)

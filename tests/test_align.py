"""
Tests for NaN-padding and alignment of labelled matrices.
"""

import numpy as np
import pandas as pd
import pytest

from annomatrix.core.exceptions import DuplicateLabelError
from annomatrix.ops.align import AlignedStack, align, pad


@pytest.fixture
def m1():
    return pd.DataFrame(
        [[1.0, 2.0], [3.0, 4.0]],
        index=["b", "a"],
        columns=["x", "y"],
    )


@pytest.fixture
def m2():
    return pd.DataFrame(
        [[5.0, 6.0], [7.0, 8.0]],
        index=["a", "c"],
        columns=["y", "z"],
    )


class TestPad:

    def test_new_labels_follow_originals(self, m1):
        out = pad(m1, row_universe=["c", "a"], col_universe=["w"])
        assert list(out.index) == ["b", "a", "c"]
        assert list(out.columns) == ["x", "y", "w"]
        assert out.loc["c"].isna().all()
        assert out["w"].isna().all()
        assert out.loc["a", "x"] == 3.0

    def test_none_universe_leaves_axis_alone(self, m1):
        out = pad(m1, row_universe=["z"])
        assert list(out.columns) == ["x", "y"]
        assert list(out.index) == ["b", "a", "z"]

    def test_duplicated_labels_rejected(self):
        dup = pd.DataFrame([[1.0], [2.0]], index=["a", "a"], columns=["x"])
        with pytest.raises(DuplicateLabelError):
            pad(dup, row_universe=["b"])

    def test_missing_labels_rejected(self):
        frame = pd.DataFrame([[1.0], [2.0]], index=["a", None], columns=["x"])
        with pytest.raises(DuplicateLabelError, match="missing"):
            pad(frame)

    def test_accepts_annotated_matrix(self, small_matrix):
        out = pad(small_matrix, col_universe=["SIG_999"])
        assert out.shape == (small_matrix.n_rows, small_matrix.n_cols + 1)


class TestAlign:

    def test_union_covers_all_labels(self, m1, m2):
        a1, a2 = align([m1, m2], pad=True)
        assert list(a1.index) == ["a", "b", "c"]
        assert list(a1.columns) == ["x", "y", "z"]
        assert a1.index.equals(a2.index)
        assert a1.columns.equals(a2.columns)

    def test_union_preserves_original_cells(self, m1, m2):
        a1, a2 = align([m1, m2], pad=True)
        for original, aligned in ((m1, a1), (m2, a2)):
            for r in original.index:
                for c in original.columns:
                    assert aligned.loc[r, c] == original.loc[r, c]
        assert np.isnan(a1.loc["c", "x"])
        assert np.isnan(a2.loc["b", "z"])

    def test_intersection(self, m1, m2):
        a1, a2 = align([m1, m2], pad=False)
        assert list(a1.index) == ["a"]
        assert list(a1.columns) == ["y"]
        assert a1.loc["a", "y"] == 4.0
        assert a2.loc["a", "y"] == 5.0

    def test_stack_from_mapping(self, m1, m2):
        stack = align({"plate1": m1, "plate2": m2}, pad=True, as_3d=True)
        assert isinstance(stack, AlignedStack)
        assert stack.shape == (3, 3, 2)
        assert stack.names == ["plate1", "plate2"]
        assert stack["plate2"].loc["c", "z"] == 8.0

    def test_stack_default_names(self, m1, m2):
        stack = align([m1, m2], as_3d=True)
        assert stack.names == ["matrix_0", "matrix_1"]

    def test_no_matrices(self):
        with pytest.raises(ValueError, match="at least one"):
            align([])

    def test_duplicates_rejected(self, m1):
        dup = pd.DataFrame([[1.0, 2.0]], index=["a"], columns=["x", "x"])
        with pytest.raises(DuplicateLabelError):
            align([m1, dup])

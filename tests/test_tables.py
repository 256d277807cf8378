"""
Tests for the annotation table primitives.

These primitives carry the null/fill semantics of every structural operator,
so they are tested independently of AnnotatedMatrix.
"""

import numpy as np
import pandas as pd
import pytest

from annomatrix.core.exceptions import (
    CartesianProductError,
    MissingColumnError,
    MissingKeyFieldError,
    UnmatchedIdWarning,
)
from annomatrix.core.tables import (
    add_new_records,
    check_columns,
    collapse_groups,
    concat_rows,
    key_string,
    key_strings,
    merge_precedence,
    subset_to_ids,
    take_rows,
)


@pytest.fixture
def rows():
    return pd.DataFrame({"id": ["a", "b", "c"], "type": ["x", "y", "x"]})


class TestCheckColumns:

    def test_present(self, rows):
        assert check_columns(rows, ["id", "type"]) is True

    def test_missing_raises(self, rows):
        with pytest.raises(MissingColumnError, match="dose"):
            check_columns(rows, ["id", "dose"], name="row annotations")

    def test_missing_without_raise(self, rows):
        assert check_columns(rows, "dose", raise_error=False) is False

    def test_custom_error_class(self, rows):
        with pytest.raises(MissingKeyFieldError):
            check_columns(rows, "gene_id", error_class=MissingKeyFieldError)


class TestRowSelection:

    def test_take_rows_resets_index(self, rows):
        out = take_rows(rows, [2, 0])
        assert out["id"].tolist() == ["c", "a"]
        assert list(out.index) == [0, 1]

    def test_subset_to_ids_first_match_and_fill(self):
        table = pd.DataFrame({"id": ["a", "b", "a"], "v": [1.0, 2.0, 3.0]})
        out = subset_to_ids(table, ["a", "c", "b"])
        assert out["id"].tolist() == ["a", "c", "b"]
        assert out["v"].iloc[0] == 1.0
        assert np.isnan(out["v"].iloc[1])
        assert out["v"].iloc[2] == 2.0

    def test_subset_to_ids_drops_unknown(self, rows):
        out = subset_to_ids(rows, ["c"])
        assert out["id"].tolist() == ["c"]
        assert out["type"].tolist() == ["x"]


class TestConcatAndUnion:

    def test_concat_rows_column_union(self):
        t1 = pd.DataFrame({"id": ["a"], "x": [1]})
        t2 = pd.DataFrame({"id": ["b"], "y": ["q"]})
        out = concat_rows([t1, t2])
        assert list(out.columns) == ["id", "x", "y"]
        assert out["id"].tolist() == ["a", "b"]
        assert np.isnan(out["x"].iloc[1])
        assert pd.isna(out["y"].iloc[0])

    def test_concat_rows_keeps_columns_of_empty_input(self):
        t1 = pd.DataFrame({"id": ["a"], "x": [1]})
        t2 = pd.DataFrame({"id": pd.Series([], dtype=object), "y": pd.Series([], dtype=float)})
        out = concat_rows([t1, t2])
        assert list(out.columns) == ["id", "x", "y"]
        assert len(out) == 1

    def test_add_new_records_primary_wins(self):
        primary = pd.DataFrame({"id": ["a", "b"], "dose": [1.0, 2.0]})
        secondary = pd.DataFrame({"id": ["b", "c"], "dose": [99.0, 3.0]})
        out = add_new_records(primary, secondary)
        assert out["id"].tolist() == ["a", "b", "c"]
        assert out["dose"].tolist() == [1.0, 2.0, 3.0]


class TestMergePrecedence:

    def test_primary_wins_conflicting_columns(self, rows):
        annot = pd.DataFrame({"id": ["b", "a", "c"], "type": ["?", "?", "?"], "dose": [1, 2, 3]})
        out = merge_precedence(rows, annot, by="id")
        assert out["id"].tolist() == ["a", "b", "c"]
        assert out["type"].tolist() == ["x", "y", "x"]
        assert out["dose"].tolist() == [2, 1, 3]

    def test_unmatched_primary_rows_warn(self, rows):
        annot = pd.DataFrame({"id": ["a"], "dose": [5.0]})
        with pytest.warns(UnmatchedIdWarning, match="2 of 3"):
            out = merge_precedence(rows, annot, by="id")
        assert len(out) == 3
        assert out["dose"].isna().sum() == 2

    def test_unmatched_warning_can_be_suppressed(self, rows, recwarn):
        annot = pd.DataFrame({"id": ["a"], "dose": [5.0]})
        merge_precedence(rows, annot, by="id", warn_unmatched=False)
        assert not any(issubclass(w.category, UnmatchedIdWarning) for w in recwarn)

    def test_cartesian_expansion(self, rows):
        annot = pd.DataFrame({"id": ["a", "a", "b", "c"], "dose": [1, 2, 3, 4]})
        out = merge_precedence(rows, annot, by="id")
        assert out["id"].tolist() == ["a", "a", "b", "c"]

    def test_cartesian_expansion_disallowed(self, rows):
        annot = pd.DataFrame({"id": ["a", "a", "b", "c"], "dose": [1, 2, 3, 4]})
        with pytest.raises(CartesianProductError):
            merge_precedence(rows, annot, by="id", allow_cartesian=False)

    def test_missing_key_raises(self, rows):
        with pytest.raises(MissingColumnError):
            merge_precedence(rows, pd.DataFrame({"key": ["a"]}), by="id")


class TestCollapseGroups:

    def test_distinct_values_joined(self):
        table = pd.DataFrame({
            "id": ["a", "b", "c"],
            "symbol": ["TP53", "TP53", "MYC"],
            "score": [1.0, np.nan, 2.0],
        })
        out = collapse_groups(table, [[0, 1], [2]], separator="|")
        assert out["id"].tolist() == ["a|b", "c"]
        assert out["symbol"].tolist() == ["TP53", "MYC"]
        assert out["score"].tolist() == [1.0, 2.0]

    def test_all_missing_gives_missing(self):
        table = pd.DataFrame({"id": ["a", "b"], "note": [np.nan, np.nan]})
        out = collapse_groups(table, [[0, 1]])
        assert pd.isna(out["note"].iloc[0])

    def test_many_groups_keep_group_order(self):
        table = pd.DataFrame({
            "id": [f"p{i}" for i in range(6)],
            "gene": ["C", "A", "C", "B", "A", "B"],
            "src": ["x", "y", "x", "x", "z", "x"],
        })
        out = collapse_groups(table, [[0, 2], [1, 4], [3, 5]])
        assert out["gene"].tolist() == ["C", "A", "B"]
        assert out["src"].tolist() == ["x", "y|z", "x"]
        assert out["id"].tolist() == ["p0|p2", "p1|p4", "p3|p5"]

    def test_no_groups(self):
        table = pd.DataFrame({"id": ["a"], "note": ["x"]})
        out = collapse_groups(table, [])
        assert list(out.columns) == ["id", "note"]
        assert len(out) == 0


class TestKeyStrings:

    def test_integral_floats_print_as_integers(self):
        assert key_string(1000.0) == "1000"
        assert key_string(np.float64(7)) == "7"
        assert key_string(2.5) == "2.5"
        assert key_string("abc") == "abc"

    def test_missing_kept(self):
        out = key_strings(pd.Series([1000.0, np.nan, 1001.0]))
        assert out.iloc[0] == "1000"
        assert pd.isna(out.iloc[1])
        assert out.iloc[2] == "1001"
        assert out.dtype == object

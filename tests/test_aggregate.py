"""
Tests for group-wise aggregation.

Mirrors probe-to-gene collapsing: rows sharing an annotation value are
reduced to one row, and n_agg records how many rows went into it.
"""

import numpy as np
import pandas as pd
import pytest

from annomatrix.core.annotated import AnnotatedMatrix
from annomatrix.core.exceptions import AnnotationCoverageWarning, DuplicateLabelError, MissingColumnError
from annomatrix.ops.aggregate import GroupAggregation, aggregate, partition


class TestPartition:

    def test_first_appearance_order(self):
        groups = partition(pd.Series(["b", "a", "b", np.nan, "c"]))
        assert list(groups.keys()) == ["b", "a", "c"]
        assert groups["b"] == [0, 2]


class TestAggregateRows:

    def test_group_sizes(self, grouped_matrix):
        out = aggregate(grouped_matrix, "gene")
        assert list(out.row_ids) == ["A", "B", "C"]
        assert out.row_meta["n_agg"].tolist() == [7, 7, 6]
        assert out.row_meta["n_agg"].sum() == grouped_matrix.n_rows

    def test_median_values(self, grouped_matrix):
        out = aggregate(grouped_matrix, "gene")
        for k, label in enumerate(["A", "B", "C"]):
            members = grouped_matrix.matrix[k::3]
            np.testing.assert_allclose(out.matrix[k], np.median(members, axis=0))

    def test_custom_function(self, grouped_matrix):
        out = aggregate(grouped_matrix, "gene", fn=np.mean)
        np.testing.assert_allclose(out.matrix[2], grouped_matrix.matrix[2::3].mean(axis=0))

    def test_annotations_collapsed(self, grouped_matrix):
        out = aggregate(grouped_matrix, "gene")
        assert out.row_meta["gene"].tolist() == ["A", "B", "C"]
        assert out.row_meta["platform"].tolist() == ["L1000"] * 3
        assert out.col_meta.equals(grouped_matrix.col_meta)

    def test_singletons_first(self):
        g = AnnotatedMatrix(
            matrix=np.array([[1.0], [2.0], [3.0], [4.0]]),
            row_ids=["p1", "p2", "p3", "p4"],
            col_ids=["s1"],
            row_meta=pd.DataFrame({
                "id": ["p1", "p2", "p3", "p4"],
                "gene": ["A", "B", "A", "C"],
                "probe_set": ["v1", "v1", "v2", "v1"],
            }),
        )
        out = aggregate(g, "gene")
        assert list(out.row_ids) == ["B", "C", "A"]
        assert out.row_meta["n_agg"].tolist() == [1, 1, 2]
        np.testing.assert_allclose(out.matrix[:, 0], [2.0, 4.0, 2.0])
        assert out.row_meta["probe_set"].tolist() == ["v1", "v1", "v1|v2"]

    def test_custom_separator(self):
        g = AnnotatedMatrix(
            matrix=np.zeros((2, 1)),
            row_ids=["p1", "p2"],
            col_ids=["s1"],
            row_meta=pd.DataFrame({"id": ["p1", "p2"], "gene": ["A", "A"], "src": ["x", "y"]}),
        )
        out = aggregate(g, "gene", separator=";")
        assert out.row_meta["src"].tolist() == ["x;y"]

    def test_missing_field_values_excluded(self, grouped_matrix):
        meta = grouped_matrix.row_meta.copy()
        meta.loc[0, "gene"] = np.nan
        g = AnnotatedMatrix(grouped_matrix.matrix, grouped_matrix.row_ids, grouped_matrix.col_ids, row_meta=meta)
        with pytest.warns(AnnotationCoverageWarning):
            out = aggregate(g, "gene")
        assert out.row_meta["n_agg"].sum() == grouped_matrix.n_rows - 1

    def test_missing_field(self, grouped_matrix):
        with pytest.raises(MissingColumnError):
            aggregate(grouped_matrix, "pr_gene_symbol")

    def test_numeric_group_ids_drop_float_suffix(self):
        g = AnnotatedMatrix(
            matrix=np.array([[1.0], [3.0], [5.0]]),
            row_ids=["p1", "p2", "p3"],
            col_ids=["s1"],
            row_meta=pd.DataFrame({"id": ["p1", "p2", "p3"], "entrez": [7, 7, np.nan]}),
        )
        with pytest.warns(AnnotationCoverageWarning):
            out = aggregate(g, "entrez")
        assert list(out.row_ids) == ["7"]
        assert out.row_meta["n_agg"].tolist() == [2]
        np.testing.assert_allclose(out.matrix[:, 0], [2.0])

    def test_colliding_group_ids(self):
        g = AnnotatedMatrix(
            matrix=np.array([[1.0], [2.0]]),
            row_ids=["p1", "p2"],
            col_ids=["s1"],
            row_meta=pd.DataFrame({"id": ["p1", "p2"], "gene": pd.Series([1, "1"], dtype=object)}),
        )
        with pytest.raises(DuplicateLabelError, match="same row id"):
            aggregate(g, "gene")


class TestAggregateCols:

    def test_column_axis_matches_row_axis(self, grouped_matrix):
        by_col = aggregate(grouped_matrix.transpose(), "gene", axis="col")
        assert by_col.transpose().equals(aggregate(grouped_matrix, "gene"))
        assert by_col.col_meta["n_agg"].tolist() == [7, 7, 6]


class TestGroupAggregationTransform:

    def test_repr(self):
        assert repr(GroupAggregation(field="gene")) == "GroupAggregation(field=gene, axis=row, fn=median)"

    def test_validate(self, grouped_matrix):
        assert GroupAggregation(field="gene").validate(grouped_matrix) == []
        errors = GroupAggregation(field="symbol").validate(grouped_matrix)
        assert len(errors) == 1
        assert "symbol" in errors[0]

    def test_callable(self, grouped_matrix):
        step = GroupAggregation(field="gene")
        assert step(grouped_matrix).n_rows == 3

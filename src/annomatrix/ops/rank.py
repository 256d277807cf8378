"""Rank transformation of matrix values along an axis."""

from __future__ import annotations

import logging

import pandas as pd

from annomatrix.core.annotated import AnnotatedMatrix
from annomatrix.core.axis import Axis, parse_axis
from annomatrix.core.transform import Transform

logger = logging.getLogger(__name__)

__all__ = ['RankTransform', 'rank']


class RankTransform(Transform):
    """
    Replace values by their rank within each column (axis="col") or row (axis="row").

    Ties get the average of the ranks they span. With descending=True the
    largest value is ranked 1. NaN cells stay NaN and are not counted.

    Examples:
        >>> ranked = RankTransform(axis="col").apply(g)
        >>> ranked.matrix[:, 0].min()
        1.0
    """

    def __init__(self, axis: str | Axis = "col", descending: bool = True):
        self.axis = parse_axis(axis)
        self.descending = descending
        super().__init__(
            name="RankTransform",
            params={"axis": self.axis.value, "descending": descending},
        )

    def apply(self, matrix: AnnotatedMatrix) -> AnnotatedMatrix:
        frame = pd.DataFrame(matrix.matrix)
        ranked = frame.rank(
            axis=0 if self.axis is Axis.COL else 1,
            method="average",
            ascending=not self.descending,
            na_option="keep",
        )
        logger.debug(f"Ranked {matrix.n_rows} x {matrix.n_cols} matrix within each {self.axis.value}")
        return AnnotatedMatrix(
            matrix=ranked.to_numpy(),
            row_ids=matrix.row_ids,
            col_ids=matrix.col_ids,
            row_meta=matrix.row_meta,
            col_meta=matrix.col_meta,
        )


def rank(g: AnnotatedMatrix, axis: str | Axis = "col", descending: bool = True) -> AnnotatedMatrix:
    """
    Rank-transform ``g`` along ``axis``.

    Raises:
        InvalidAxisError: If axis is not a row/column value
    """
    return RankTransform(axis=axis, descending=descending).apply(g)

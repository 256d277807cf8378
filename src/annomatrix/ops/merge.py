"""
Concatenation of two annotated matrices along an axis.

Appending rows (axis="row"):
    1. Column universe = columns of the first object, then new columns of the
       second
    2. Both matrices are NaN-padded to that universe; the second is re-ordered
       to the first's padded column order
    3. Rows are stacked: first object, then second (no re-sorting)
    4. Row tables are row-bound with a column union
    5. Column tables are unioned by id (first object wins for shared ids) and
       re-matched to the padded column order

Appending columns (axis="col") is the same operation on transposed inputs.

Examples:
    >>> from annomatrix.ops.merge import merge
    >>> plate = merge(plate1, plate2, axis="col")      # more samples
    >>> panel = merge(panel_a, panel_b, axis="row")    # more genes
"""

from __future__ import annotations

import logging

import numpy as np

from annomatrix.core.annotated import AnnotatedMatrix
from annomatrix.core.axis import Axis, parse_axis
from annomatrix.core.tables import add_new_records, concat_rows, subset_to_ids
from annomatrix.ops.align import pad

logger = logging.getLogger(__name__)

__all__ = ['merge']


def _append_rows(g1: AnnotatedMatrix, g2: AnnotatedMatrix, matrix_only: bool) -> AnnotatedMatrix:
    col_universe = list(dict.fromkeys(list(g1.col_ids) + list(g2.col_ids)))
    logger.debug(f"Column universe: {len(col_universe)} ids")

    m1 = pad(g1.to_frame(), col_universe=col_universe)
    m2 = pad(g2.to_frame(), col_universe=col_universe)
    m2 = m2.loc[:, m1.columns]

    matrix = np.vstack([m1.to_numpy(), m2.to_numpy()])
    row_ids = list(g1.row_ids) + list(g2.row_ids)
    col_ids = list(m1.columns)

    if matrix_only:
        return AnnotatedMatrix(matrix=matrix, row_ids=row_ids, col_ids=col_ids)

    row_meta = concat_rows([g1.row_meta, g2.row_meta])
    col_meta = subset_to_ids(add_new_records(g1.col_meta, g2.col_meta), col_ids)

    return AnnotatedMatrix(
        matrix=matrix,
        row_ids=row_ids,
        col_ids=col_ids,
        row_meta=row_meta,
        col_meta=col_meta,
    )


def merge(
    g1: AnnotatedMatrix,
    g2: AnnotatedMatrix,
    axis: str | Axis = "row",
    matrix_only: bool = False,
) -> AnnotatedMatrix:
    """
    Append ``g2`` to ``g1`` along ``axis``.

    The orthogonal axis becomes the union of both inputs' ids; cells absent
    from an input are NaN.

    Args:
        g1: First object (its rows/columns come first, its annotations win)
        g2: Second object
        axis: "row" to append rows, "col"/"column" to append columns
        matrix_only: Skip annotation handling; the result has id-only tables

    Returns:
        New AnnotatedMatrix

    Raises:
        InvalidAxisError: If axis is not a row/column value
        DuplicateLabelError: If either input repeats an id on either axis
    """
    axis = parse_axis(axis)
    if not isinstance(g1, AnnotatedMatrix) or not isinstance(g2, AnnotatedMatrix):
        raise TypeError("merge expects two AnnotatedMatrix objects")

    if axis is Axis.ROW:
        logger.info(f"Appending {g2.n_rows} rows to {g1.n_rows} rows")
        return _append_rows(g1, g2, matrix_only)

    logger.info(f"Appending {g2.n_cols} columns to {g1.n_cols} columns")
    return _append_rows(g1.transpose(), g2.transpose(), matrix_only).transpose()

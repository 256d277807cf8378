"""
Cross-axis value extraction.

Picks the cells where a row annotation and a column annotation agree. The
classic case is a knockdown screen: rows are genes (field "gene"), columns are
perturbations (field "target"), and the on-target cells are those where the
measured gene is the perturbed one.

Order convention: selected cells are reported in column-major order (all
selected cells of the first column top to bottom, then the second column, ...);
``indices``, ``values`` and ``table`` share that order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd

from annomatrix.core.annotated import AnnotatedMatrix
from annomatrix.core.tables import check_columns, take_rows
from annomatrix.ops.annotate import annotate

logger = logging.getLogger(__name__)

__all__ = ['ExtractResult', 'extract']


@dataclass
class ExtractResult:
    """
    Cells selected by ``extract``.

    Attributes:
        mask: Boolean array with the matrix' shape, True for selected cells
        indices: Integer array of shape (n, 2) with (row, col) positions
        values: Matrix values at ``indices``
        table: Row fields prefixed "row_", column fields prefixed "col_",
            then "value"; one record per selected cell
    """
    mask: np.ndarray
    indices: np.ndarray
    values: np.ndarray
    table: pd.DataFrame

    @property
    def n_selected(self) -> int:
        return int(self.mask.sum())


def extract(
    g: AnnotatedMatrix,
    row_field: str,
    col_field: str,
    row_annot: Optional[pd.DataFrame | str | Path] = None,
    col_annot: Optional[pd.DataFrame | str | Path] = None,
    row_keyfield: str = "id",
    col_keyfield: str = "id",
) -> ExtractResult:
    """
    Select cells whose row ``row_field`` equals their column ``col_field``.

    Args:
        g: Source matrix
        row_field: Row annotation field to match
        col_field: Column annotation field to match
        row_annot: Optional table (or path) annotating the rows first
        col_annot: Optional table (or path) annotating the columns first
        row_keyfield: Key field of row_annot
        col_keyfield: Key field of col_annot

    Returns:
        ExtractResult

    Raises:
        MissingColumnError: If a field is absent from its annotation table

    Examples:
        >>> res = extract(g, row_field="pr_gene_symbol", col_field="pert_iname")
        >>> res.table[["row_id", "col_id", "value"]].head()
    """
    if row_annot is not None:
        g = annotate(g, row_annot, axis="row", keyfield=row_keyfield)
    if col_annot is not None:
        g = annotate(g, col_annot, axis="col", keyfield=col_keyfield)

    row_meta = g.row_meta
    col_meta = g.col_meta
    check_columns(row_meta, row_field, name="row annotations")
    check_columns(col_meta, col_field, name="column annotations")

    # shared codes for both fields; missing values get -1 and never match
    codes, _ = pd.factorize(pd.concat([row_meta[row_field], col_meta[col_field]], ignore_index=True))
    row_codes = codes[:g.n_rows]
    col_codes = codes[g.n_rows:]
    mask = (row_codes[:, None] == col_codes[None, :]) & (row_codes[:, None] >= 0)

    cols, rows = np.nonzero(mask.T)
    indices = np.column_stack([rows, cols]).astype(np.intp)
    values = g.matrix[rows, cols]

    row_part = take_rows(row_meta, rows).add_prefix("row_")
    col_part = take_rows(col_meta, cols).add_prefix("col_")
    table = pd.concat([row_part, col_part], axis=1)
    table["value"] = values

    logger.info(
        f"Extracted {len(values)} cells where row '{row_field}' matches column '{col_field}'"
    )
    return ExtractResult(mask=mask, indices=indices, values=values, table=table)

"""
Annotation of a matrix axis from an external table.

The external table is keyed by ``keyfield``; its values are copied into an
``id`` column and left-joined onto the axis' annotation table with
left precedence (fields already present on the matrix are kept). The result is
re-ordered to the axis' ids, so matrix rows are never dropped or duplicated;
ids missing from the external table keep NaN in the new fields and trigger an
AnnotationCoverageWarning.
"""

from __future__ import annotations

import logging
import warnings
from pathlib import Path
from typing import Optional

import pandas as pd

from annomatrix.config import DEFAULT_CONFIG, AnnoMatrixConfig
from annomatrix.core.annotated import AnnotatedMatrix
from annomatrix.core.axis import Axis, parse_axis
from annomatrix.core.exceptions import AnnotationCoverageWarning, MissingKeyFieldError
from annomatrix.core.tables import check_columns, key_strings, merge_precedence, subset_to_ids
from annomatrix.io.annotations import read_annotation_table

logger = logging.getLogger(__name__)

__all__ = ['annotate']


def annotate(
    g: AnnotatedMatrix,
    annot: pd.DataFrame | str | Path,
    axis: str | Axis = "row",
    keyfield: str = "id",
    config: Optional[AnnoMatrixConfig] = None,
) -> AnnotatedMatrix:
    """
    Add the fields of an annotation table to the row or column table of ``g``.

    Args:
        g: Matrix to annotate
        annot: Annotation DataFrame, or path to a CSV/TSV file
        axis: "row" or "col"/"column"
        keyfield: Column of ``annot`` whose values match the axis ids
        config: Supplies ``allow_cartesian``

    Returns:
        New AnnotatedMatrix with the same matrix and an extended axis table

    Raises:
        MissingKeyFieldError: If keyfield is not a column of the table
        InvalidAxisError: If axis is not a row/column value
        CartesianProductError: If keys repeat and the config forbids expansion

    Examples:
        >>> g = annotate(g, "gene_info.txt", axis="row", keyfield="pr_gene_id")
        >>> "pr_gene_symbol" in g.row_meta.columns
        True
    """
    config = config or DEFAULT_CONFIG
    axis = parse_axis(axis)

    if isinstance(annot, (str, Path)):
        annot = read_annotation_table(Path(annot))
    elif isinstance(annot, pd.DataFrame):
        annot = annot.copy()
    else:
        raise TypeError(f"annot must be pd.DataFrame or a path, got {type(annot)}")

    check_columns(annot, keyfield, name="annotations", error_class=MissingKeyFieldError)
    annot["id"] = key_strings(annot[keyfield]).to_numpy()

    ids = g.ids(axis)
    meta = g.meta(axis).copy()
    meta["id"] = list(ids)

    merged = merge_precedence(
        meta,
        annot,
        by="id",
        allow_cartesian=config.allow_cartesian,
        warn_unmatched=False,
    )
    merged = subset_to_ids(merged, ids)

    unmatched = ~ids.isin(annot["id"])
    if unmatched.any():
        warnings.warn(
            f"{int(unmatched.sum())} of {len(ids)} {axis.value} ids had no match in the "
            f"annotations on '{keyfield}'; their new fields are missing",
            AnnotationCoverageWarning,
            stacklevel=2,
        )
    logger.debug(f"Annotated {len(ids) - int(unmatched.sum())}/{len(ids)} {axis.value} ids")

    if axis is Axis.ROW:
        return AnnotatedMatrix(g.matrix, g.row_ids, g.col_ids, row_meta=merged, col_meta=g.col_meta)
    return AnnotatedMatrix(g.matrix, g.row_ids, g.col_ids, row_meta=g.row_meta, col_meta=merged)

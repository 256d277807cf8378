"""
Wide-to-long reshape of an annotated matrix.

Each non-missing cell becomes one record:

    row_id | col_id | value | <row fields...> | <col fields...>

Records follow a column-major scan of the matrix (every cell of the first
column, then the second, ...). Annotation fields are attached positionally, so
the reshape is linear in the number of cells.

Symmetric matrices (correlations, distances) carry every value twice. With
``remove_symmetric_redundancy=True`` and a square, numerically symmetric
matrix, only the strict upper triangle (i < j) is emitted.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from annomatrix.config import DEFAULT_CONFIG, AnnoMatrixConfig
from annomatrix.core.annotated import AnnotatedMatrix
from annomatrix.core.tables import take_rows

logger = logging.getLogger(__name__)

__all__ = ['melt', 'is_symmetric']

RESERVED = ("row_id", "col_id", "value")


def is_symmetric(matrix: np.ndarray, rtol: float = 1e-05, atol: float = 1e-08) -> bool:
    """True for a square matrix equal to its transpose within tolerance (NaN == NaN)."""
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        return False
    return bool(np.allclose(matrix, matrix.T, rtol=rtol, atol=atol, equal_nan=True))


def _fields(meta: pd.DataFrame) -> pd.DataFrame:
    return meta.drop(columns=["id"])


def melt(
    g: AnnotatedMatrix,
    keep_row_meta: bool = True,
    keep_col_meta: bool = True,
    remove_symmetric_redundancy: bool = False,
    suffixes: Optional[Sequence[str]] = None,
    config: Optional[AnnoMatrixConfig] = None,
) -> pd.DataFrame:
    """
    Reshape ``g`` into one record per non-missing cell.

    Args:
        g: Matrix to melt
        keep_row_meta: Attach row annotation fields
        keep_col_meta: Attach column annotation fields
        remove_symmetric_redundancy: Emit only the strict upper triangle when
            the matrix is square and symmetric
        suffixes: Two labels appended to field names that occur in both tables
            (or clash with row_id/col_id/value); default from config
            (".row", ".col")
        config: Supplies default suffixes and symmetry tolerances

    Returns:
        DataFrame with columns row_id, col_id, value, then row fields, then
        column fields

    Raises:
        ValueError: If suffixes is not a pair of distinct strings

    Examples:
        >>> long = melt(g, suffixes=("_gene", "_sample"))
        >>> long.columns[:3].tolist()
        ['row_id', 'col_id', 'value']
    """
    config = config or DEFAULT_CONFIG
    suffixes: Tuple[str, str] = tuple(suffixes) if suffixes is not None else config.melt_suffixes
    if len(suffixes) != 2 or suffixes[0] == suffixes[1]:
        raise ValueError(f"suffixes must be two distinct labels, got {suffixes!r}")

    logger.info(f"Melting {g.n_rows} x {g.n_cols} matrix")
    m = g.matrix
    keep = ~np.isnan(m)

    if remove_symmetric_redundancy:
        if is_symmetric(m, rtol=config.symmetry_rtol, atol=config.symmetry_atol):
            keep &= np.triu(np.ones(m.shape, dtype=bool), k=1)
        else:
            logger.debug("Matrix is not symmetric; keeping all cells")

    # nonzero on the transpose yields column-major order
    cols, rows = np.nonzero(keep.T)

    long = pd.DataFrame({
        "row_id": g.row_ids.to_numpy()[rows],
        "col_id": g.col_ids.to_numpy()[cols],
        "value": m[rows, cols],
    })

    row_fields = _fields(g.row_meta) if keep_row_meta else pd.DataFrame(index=g.row_meta.index)
    col_fields = _fields(g.col_meta) if keep_col_meta else pd.DataFrame(index=g.col_meta.index)

    shared = set(row_fields.columns) & set(col_fields.columns)
    row_fields = row_fields.rename(columns={
        c: f"{c}{suffixes[0]}" for c in row_fields.columns if c in shared or c in RESERVED
    })
    col_fields = col_fields.rename(columns={
        c: f"{c}{suffixes[1]}" for c in col_fields.columns if c in shared or c in RESERVED
    })

    parts = [long]
    if row_fields.shape[1] > 0:
        parts.append(take_rows(row_fields, rows))
    if col_fields.shape[1] > 0:
        parts.append(take_rows(col_fields, cols))
    result = pd.concat(parts, axis=1) if len(parts) > 1 else long

    logger.info(f"Melted into {len(result)} records")
    return result

"""
NaN-padding and alignment of labelled matrices.

Matrices coming from different experiments rarely share exactly the same rows
and columns. ``pad`` grows one matrix to a label universe, ``align`` brings
several matrices onto a common universe so they become comparable cell by cell:

    - pad=False: intersection of labels (sorted), no missing values introduced
    - pad=True: union of labels (sorted), absent cells filled with NaN

Labelled matrices are pandas DataFrames (index = row ids, columns = column
ids); AnnotatedMatrix inputs are converted with ``to_frame()``.

Examples:
    >>> import pandas as pd
    >>> from annomatrix.ops.align import align
    >>> m1 = pd.DataFrame([[1.0]], index=["a"], columns=["x"])
    >>> m2 = pd.DataFrame([[2.0]], index=["b"], columns=["x"])
    >>> a1, a2 = align([m1, m2], pad=True)
    >>> a1
         x
    a  1.0
    b  NaN
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from annomatrix.core.annotated import AnnotatedMatrix
from annomatrix.core.exceptions import DuplicateLabelError

logger = logging.getLogger(__name__)

__all__ = ['AlignedStack', 'pad', 'align', 'check_unique_labels']

Labelled = Union[pd.DataFrame, AnnotatedMatrix]


@dataclass
class AlignedStack:
    """
    Aligned matrices stacked along a third axis.

    Attributes:
        values: Array of shape (n_rows, n_cols, n_matrices)
        row_ids: Shared row labels
        col_ids: Shared column labels
        names: One name per slice along the third axis
    """
    values: np.ndarray
    row_ids: pd.Index
    col_ids: pd.Index
    names: List[str]

    def __getitem__(self, name: str) -> pd.DataFrame:
        """Slice ``name`` as a labelled DataFrame."""
        k = self.names.index(name)
        return pd.DataFrame(self.values[:, :, k], index=self.row_ids, columns=self.col_ids)

    @property
    def shape(self) -> tuple[int, int, int]:
        return self.values.shape


def _as_frame(matrix: Labelled) -> pd.DataFrame:
    if isinstance(matrix, AnnotatedMatrix):
        return matrix.to_frame()
    if isinstance(matrix, pd.DataFrame):
        return matrix
    raise TypeError(f"expected pd.DataFrame or AnnotatedMatrix, got {type(matrix)}")


def check_unique_labels(labels: pd.Index, name: str) -> None:
    """
    Require non-null, pairwise-unique labels.

    Raises:
        DuplicateLabelError: On null or repeated labels
    """
    if labels.hasnans:
        raise DuplicateLabelError(f"{name} must not contain missing labels")
    if labels.has_duplicates:
        dups = labels[labels.duplicated()].unique().tolist()
        raise DuplicateLabelError(f"{name} has duplicated values: {dups[:10]}")


def pad(
    matrix: Labelled,
    row_universe: Optional[Sequence[str]] = None,
    col_universe: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """
    Add NaN rows/columns for universe labels absent from ``matrix``.

    Original rows and columns keep their order; new labels follow in universe
    order.

    Args:
        matrix: Labelled matrix with unique row and column labels
        row_universe: Row labels the result must contain (None = leave rows alone)
        col_universe: Column labels the result must contain (None = leave columns alone)

    Returns:
        New float DataFrame

    Raises:
        DuplicateLabelError: If the matrix has null or duplicated labels
    """
    frame = _as_frame(matrix)
    check_unique_labels(frame.index, "matrix row labels")
    check_unique_labels(frame.columns, "matrix column labels")

    rows = list(frame.index)
    cols = list(frame.columns)
    if row_universe is not None:
        rows = rows + list(pd.Index(row_universe).difference(frame.index, sort=False).unique())
    if col_universe is not None:
        cols = cols + list(pd.Index(col_universe).difference(frame.columns, sort=False).unique())

    return frame.reindex(index=rows, columns=cols).astype(np.float64)


# the ``pad`` argument of align() shadows the function
_pad_matrix = pad


def align(
    matrices: Sequence[Labelled] | Mapping[str, Labelled],
    pad: bool = True,
    as_3d: bool = False,
) -> List[pd.DataFrame] | AlignedStack:
    """
    Bring several labelled matrices onto one row/column universe.

    Args:
        matrices: Sequence of matrices, or a mapping name -> matrix
        pad: True for the union of labels with NaN fill; False for the
            intersection of labels
        as_3d: Return an AlignedStack instead of a list

    Returns:
        List of same-shape DataFrames in input order (labels sorted
        lexicographically), or an AlignedStack

    Raises:
        DuplicateLabelError: If any input has null or duplicated labels
        ValueError: If no matrices are given
    """
    if isinstance(matrices, Mapping):
        names = [str(k) for k in matrices.keys()]
        frames = [_as_frame(m) for m in matrices.values()]
    else:
        frames = [_as_frame(m) for m in matrices]
        names = [f"matrix_{i}" for i in range(len(frames))]

    if not frames:
        raise ValueError("align needs at least one matrix")

    for name, frame in zip(names, frames):
        check_unique_labels(frame.index, f"{name} row labels")
        check_unique_labels(frame.columns, f"{name} column labels")

    if pad:
        row_universe = sorted(set().union(*(f.index for f in frames)))
        col_universe = sorted(set().union(*(f.columns for f in frames)))
    else:
        row_universe = sorted(set(frames[0].index).intersection(*(f.index for f in frames[1:])))
        col_universe = sorted(set(frames[0].columns).intersection(*(f.columns for f in frames[1:])))

    logger.debug(
        f"Aligning {len(frames)} matrices onto {len(row_universe)} rows x "
        f"{len(col_universe)} columns ({'union' if pad else 'intersection'})"
    )

    if pad:
        aligned = [
            _pad_matrix(f, row_universe=row_universe, col_universe=col_universe)
            .loc[row_universe, col_universe]
            for f in frames
        ]
    else:
        aligned = [f.loc[row_universe, col_universe].astype(np.float64) for f in frames]

    if not as_3d:
        return aligned

    values = np.stack([a.to_numpy() for a in aligned], axis=2)
    return AlignedStack(
        values=values,
        row_ids=pd.Index(row_universe),
        col_ids=pd.Index(col_universe),
        names=names,
    )

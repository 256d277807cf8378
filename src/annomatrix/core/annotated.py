"""
Core data structure: a numeric matrix annotated on both axes.

AnnotatedMatrix couples three structures that must stay mutually consistent:

    - matrix: float matrix (rows × columns), NaN = missing
    - row_ids / col_ids: ordered string ids of each axis
    - row_meta / col_meta: annotation tables keyed by an ``id`` column

Consistency invariant:
    - matrix.shape == (len(row_ids), len(col_ids))
    - row_meta["id"] equals row_ids element-wise, in order
    - col_meta["id"] equals col_ids element-wise, in order

Every operation re-establishes the invariant. Metadata handed to the
constructor (or a setter) is re-synchronized: tables keyed in a different
order are re-ordered to the ids, ids without annotation get NaN rows, and
annotation rows for unknown ids are dropped.

Engineering Design:
    - Immutable by convention: operations return new instances
    - Validated: constructor and setters check shapes and keys
    - Value semantics: tables are copied on construction, so a derived object
      never aliases the metadata of its source
    - Row/column symmetric operators are written for rows and reach columns
      through transpose()

Examples:
    >>> import numpy as np
    >>> import pandas as pd
    >>> from annomatrix.core.annotated import AnnotatedMatrix
    >>>
    >>> g = AnnotatedMatrix(
    ...     matrix=np.array([[1.0, 2.0], [3.0, 4.0]]),
    ...     row_ids=["gene1", "gene2"],
    ...     col_ids=["s1", "s2"],
    ...     col_meta=pd.DataFrame({"id": ["s2", "s1"], "dose": [10, 0]}),
    ... )
    >>> g.col_meta["dose"].tolist()
    [0, 10]
    >>> g.subset(rows=["gene2"]).matrix
    array([[3., 4.]])
"""

from __future__ import annotations

import warnings
from typing import Any, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from annomatrix.config import DEFAULT_CONFIG, AnnoMatrixConfig
from annomatrix.core.axis import Axis, parse_axis
from annomatrix.core.exceptions import (
    DegenerateResultWarning,
    DuplicateIdWarning,
    DuplicateLabelError,
    MissingColumnError,
)
from annomatrix.core.selectors import ByIndex, resolve
from annomatrix.core.tables import id_only_table, subset_to_ids, take_rows

__all__ = ['AnnotatedMatrix']

ID_COLUMN = "id"


def _as_ids(ids: Any, axis_name: str) -> pd.Index:
    if ids is None:
        raise ValueError(f"{axis_name}_ids are required when the matrix carries no labels")
    index = pd.Index([str(i) for i in ids], dtype=object)
    if index.has_duplicates:
        dups = index[index.duplicated()].unique().tolist()
        warnings.warn(
            f"{axis_name} ids contain duplicated values: {dups[:10]}",
            DuplicateIdWarning,
            stacklevel=3,
        )
    return index


def _align_meta(meta: Any, ids: pd.Index, axis_name: str) -> pd.DataFrame:
    """Return a copy of ``meta`` whose id column equals ``ids``."""
    if meta is None:
        return id_only_table(ids)
    if isinstance(meta, Mapping):
        meta = pd.DataFrame(dict(meta))
    if not isinstance(meta, pd.DataFrame):
        raise TypeError(f"{axis_name}_meta must be pd.DataFrame, got {type(meta)}")
    if meta.shape[1] == 0:
        return id_only_table(ids)
    if ID_COLUMN not in meta.columns:
        raise MissingColumnError(f"{axis_name}_meta must contain an '{ID_COLUMN}' column")

    meta = meta.copy()
    meta[ID_COLUMN] = meta[ID_COLUMN].astype(str).astype(object)
    meta = meta[[ID_COLUMN] + [c for c in meta.columns if c != ID_COLUMN]]

    if len(meta) == len(ids) and np.array_equal(meta[ID_COLUMN].to_numpy(), ids.to_numpy()):
        return meta.reset_index(drop=True)

    if meta[ID_COLUMN].duplicated().any():
        dups = meta.loc[meta[ID_COLUMN].duplicated(), ID_COLUMN].unique().tolist()
        raise DuplicateLabelError(
            f"{axis_name}_meta has duplicated ids: {dups[:10]}"
        )
    return subset_to_ids(meta, ids)


class AnnotatedMatrix:
    """
    Numeric matrix with ids and annotation tables on both axes.

    Attributes:
        matrix: Float matrix (rows × columns), NaN marks missing values
        row_ids: Row identifiers (e.g., gene or probe ids)
        col_ids: Column identifiers (e.g., sample or signature ids)
        row_meta: Row annotations, ``id`` column first, ordered as row_ids
        col_meta: Column annotations, ``id`` column first, ordered as col_ids

    Design Principles:
        1. Immutability: operations return new instances
        2. Validation: constructor and setters ensure consistency
        3. Symmetry: column operations reuse row code through transpose()
    """

    def __init__(
        self,
        matrix: np.ndarray | pd.DataFrame,
        row_ids: Optional[Sequence[str]] = None,
        col_ids: Optional[Sequence[str]] = None,
        row_meta: Optional[pd.DataFrame] = None,
        col_meta: Optional[pd.DataFrame] = None,
    ):
        """
        Initialize AnnotatedMatrix with validation.

        Args:
            matrix: 2D numeric array, or a DataFrame whose index/columns supply
                the ids when row_ids/col_ids are not given
            row_ids: Row identifiers, converted to strings
            col_ids: Column identifiers, converted to strings
            row_meta: Row annotation table with an ``id`` column (None = ids only)
            col_meta: Column annotation table with an ``id`` column (None = ids only)

        Raises:
            TypeError: If matrix or metadata have the wrong type
            ValueError: If shapes are inconsistent or values are not numeric
            MissingColumnError: If a non-empty metadata table has no ``id`` column
            DuplicateLabelError: If a metadata table must be re-ordered but
                repeats an id
        """
        if isinstance(matrix, pd.DataFrame):
            if row_ids is None:
                row_ids = matrix.index
            if col_ids is None:
                col_ids = matrix.columns
            matrix = matrix.to_numpy()

        self._row_ids = _as_ids(row_ids, "row")
        self._col_ids = _as_ids(col_ids, "col")
        self._matrix = self._validate_matrix(matrix)
        self._row_meta = _align_meta(row_meta, self._row_ids, "row")
        self._col_meta = _align_meta(col_meta, self._col_ids, "col")

    def _validate_matrix(self, matrix: Any) -> np.ndarray:
        if not isinstance(matrix, np.ndarray):
            raise TypeError(f"matrix must be np.ndarray or pd.DataFrame, got {type(matrix)}")
        if matrix.ndim != 2:
            raise ValueError(f"matrix must be 2D, got shape {matrix.shape}")
        try:
            matrix = matrix.astype(np.float64, copy=True)
        except (TypeError, ValueError) as e:
            raise ValueError(f"matrix must be numeric: {e}") from e

        n_rows, n_cols = matrix.shape
        if len(self._row_ids) != n_rows:
            raise ValueError(
                f"row_ids length ({len(self._row_ids)}) must match matrix rows ({n_rows})"
            )
        if len(self._col_ids) != n_cols:
            raise ValueError(
                f"col_ids length ({len(self._col_ids)}) must match matrix columns ({n_cols})"
            )
        return matrix

    @property
    def matrix(self) -> np.ndarray:
        """Numeric matrix (rows × columns)."""
        return self._matrix

    @matrix.setter
    def matrix(self, value: np.ndarray) -> None:
        if isinstance(value, pd.DataFrame):
            value = value.to_numpy()
        self._matrix = self._validate_matrix(value)

    @property
    def row_ids(self) -> pd.Index:
        """Row identifiers."""
        return self._row_ids

    @property
    def col_ids(self) -> pd.Index:
        """Column identifiers."""
        return self._col_ids

    @property
    def row_meta(self) -> pd.DataFrame:
        """Row annotations, ordered as row_ids."""
        return self._row_meta

    @row_meta.setter
    def row_meta(self, value: pd.DataFrame) -> None:
        self._row_meta = _align_meta(value, self._row_ids, "row")

    @property
    def col_meta(self) -> pd.DataFrame:
        """Column annotations, ordered as col_ids."""
        return self._col_meta

    @col_meta.setter
    def col_meta(self, value: pd.DataFrame) -> None:
        self._col_meta = _align_meta(value, self._col_ids, "col")

    @property
    def shape(self) -> tuple[int, int]:
        """Matrix dimensions (n_rows, n_cols)."""
        return self._matrix.shape

    @property
    def n_rows(self) -> int:
        return self._matrix.shape[0]

    @property
    def n_cols(self) -> int:
        return self._matrix.shape[1]

    def ids(self, axis: str | Axis = "row") -> pd.Index:
        """Id vector of ``axis``."""
        return self._row_ids if parse_axis(axis) is Axis.ROW else self._col_ids

    def meta(self, axis: str | Axis = "row") -> pd.DataFrame:
        """Annotation table of ``axis``."""
        return self._row_meta if parse_axis(axis) is Axis.ROW else self._col_meta

    def to_frame(self) -> pd.DataFrame:
        """Matrix as a DataFrame labelled by row and column ids."""
        return pd.DataFrame(self._matrix, index=self._row_ids, columns=self._col_ids)

    def subset(self, rows: Any = None, cols: Any = None, config: Optional[AnnoMatrixConfig] = None) -> AnnotatedMatrix:
        """
        Subset rows and/or columns.

        Args:
            rows: Row selector: ids, zero-based positions, or None for all rows
            cols: Column selector: ids, zero-based positions, or None for all columns
            config: Supplies integer_tolerance, the distance from an integer
                under which a float selector value counts as a position

        Returns:
            New AnnotatedMatrix in selector order. Unmatched ids are dropped with
            an UnmatchedIdWarning; an empty axis triggers a DegenerateResultWarning.

        Raises:
            InvalidSelectorError: If a selector mixes ids and positions or has an
                unsupported type

        Examples:
            >>> g.subset(rows=["gene3", "gene1"], cols=[0, 2])
        """
        tol = (config or DEFAULT_CONFIG).integer_tolerance
        row_ids, ridx = resolve(rows, self._row_ids, "row", tol=tol)
        col_ids, cidx = resolve(cols, self._col_ids, "col", tol=tol)

        result = AnnotatedMatrix(
            matrix=self._matrix[np.ix_(ridx, cidx)],
            row_ids=row_ids,
            col_ids=col_ids,
            row_meta=take_rows(self._row_meta, ridx),
            col_meta=take_rows(self._col_meta, cidx),
        )

        if 0 in result.shape:
            warnings.warn(
                "one or more returned dimension is length 0; check that at least some "
                "of the requested row and/or column ids match this matrix",
                DegenerateResultWarning,
                stacklevel=2,
            )
        return result

    def select_rows(self, mask: np.ndarray | pd.Series) -> AnnotatedMatrix:
        """
        Subset rows with a boolean mask.

        Raises:
            ValueError: If mask length doesn't match n_rows

        Examples:
            >>> kinases = g.select_rows(g.row_meta["family"] == "kinase")
        """
        return self.subset(rows=self._mask_positions(mask, self.n_rows, "n_rows"))

    def select_cols(self, mask: np.ndarray | pd.Series) -> AnnotatedMatrix:
        """
        Subset columns with a boolean mask.

        Raises:
            ValueError: If mask length doesn't match n_cols
        """
        return self.subset(cols=self._mask_positions(mask, self.n_cols, "n_cols"))

    @staticmethod
    def _mask_positions(mask: np.ndarray | pd.Series, n: int, name: str) -> Any:
        if isinstance(mask, pd.Series):
            mask = mask.to_numpy()
        mask = np.asarray(mask, dtype=bool)
        if len(mask) != n:
            raise ValueError(f"mask length ({len(mask)}) must match {name} ({n})")
        # ByIndex keeps an all-False mask an empty selection rather than "everything"
        return ByIndex(tuple(int(i) for i in np.flatnonzero(mask)))

    def transpose(self) -> AnnotatedMatrix:
        """Swap rows and columns, together with their ids and annotation tables."""
        return AnnotatedMatrix(
            matrix=self._matrix.T,
            row_ids=self._col_ids,
            col_ids=self._row_ids,
            row_meta=self._col_meta,
            col_meta=self._row_meta,
        )

    @property
    def T(self) -> AnnotatedMatrix:
        return self.transpose()

    def merge(self, other: AnnotatedMatrix, axis: str | Axis = "row", matrix_only: bool = False) -> AnnotatedMatrix:
        """Append ``other`` along ``axis``; see ``annomatrix.ops.merge.merge``."""
        from annomatrix.ops.merge import merge
        return merge(self, other, axis=axis, matrix_only=matrix_only)

    def annotate(self, annot: Any, axis: str | Axis = "row", keyfield: str = "id") -> AnnotatedMatrix:
        """Add annotation fields to an axis; see ``annomatrix.ops.annotate.annotate``."""
        from annomatrix.ops.annotate import annotate
        return annotate(self, annot, axis=axis, keyfield=keyfield)

    def rank(self, axis: str | Axis = "col", descending: bool = True) -> AnnotatedMatrix:
        """Replace values by their ranks; see ``annomatrix.ops.rank.rank``."""
        from annomatrix.ops.rank import rank
        return rank(self, axis=axis, descending=descending)

    def copy(self, deep: bool = True) -> AnnotatedMatrix:
        """
        Create a copy of this matrix.

        The constructor always copies the matrix and tables, so ``deep`` only
        exists for interface compatibility.
        """
        return AnnotatedMatrix(
            matrix=self._matrix,
            row_ids=self._row_ids,
            col_ids=self._col_ids,
            row_meta=self._row_meta,
            col_meta=self._col_meta,
        )

    def equals(self, other: AnnotatedMatrix, rtol: float = 1e-07, atol: float = 0.0) -> bool:
        """
        Compare ids, order, values (NaN == NaN) and annotation tables.

        Numeric annotation columns compare by value, so an integer column equals
        the same column stored as float.
        """
        if not isinstance(other, AnnotatedMatrix):
            return False
        if self.shape != other.shape:
            return False
        if not (self._row_ids.equals(other._row_ids) and self._col_ids.equals(other._col_ids)):
            return False
        if not np.allclose(self._matrix, other._matrix, rtol=rtol, atol=atol, equal_nan=True):
            return False
        for mine, theirs in ((self._row_meta, other._row_meta), (self._col_meta, other._col_meta)):
            try:
                pd.testing.assert_frame_equal(mine, theirs, check_dtype=False, rtol=rtol, atol=atol)
            except AssertionError:
                return False
        return True

    def __repr__(self) -> str:
        """String representation for debugging."""
        def _span(ids: pd.Index) -> str:
            if len(ids) == 0:
                return "(none)"
            return f"{ids[0]}...{ids[-1]}"

        return (
            f"AnnotatedMatrix({self.n_rows} rows × {self.n_cols} columns)\n"
            f"  Rows: {_span(self._row_ids)}\n"
            f"  Columns: {_span(self._col_ids)}\n"
            f"  Row fields: {list(self._row_meta.columns)}\n"
            f"  Column fields: {list(self._col_meta.columns)}"
        )

    def __str__(self) -> str:
        """Human-readable string representation."""
        return self.__repr__()

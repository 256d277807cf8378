"""
Group-wise aggregation of rows (or columns) sharing an annotation value.

Typical use: collapse probe-level rows to gene level by "gene_symbol".

Algorithm (rows; columns go through transpose before and after):
    1. Partition row positions by the value of ``field`` in first-appearance
       order (rows with a missing value are excluded with a warning)
    2. Groups with several members: ``fn`` applied per column over the member
       rows; id = group value; other fields = distinct member values joined by
       the separator; n_agg = group size
    3. Singleton groups: passed through with id = group value, n_agg = 1
    4. Result = merge(singletons, aggregated, axis="row"): singleton rows in
       their original relative order, then aggregated rows in partition order
"""

from __future__ import annotations

import logging
import warnings
from typing import Callable, Dict, List, Optional

import numpy as np
import pandas as pd

from annomatrix.config import DEFAULT_CONFIG, AnnoMatrixConfig
from annomatrix.core.annotated import AnnotatedMatrix
from annomatrix.core.axis import Axis, parse_axis
from annomatrix.core.exceptions import (
    AnnotationCoverageWarning,
    DegenerateResultWarning,
    DuplicateLabelError,
)
from annomatrix.core.selectors import ByIndex
from annomatrix.core.tables import check_columns, collapse_groups, key_string, take_rows
from annomatrix.core.transform import Transform
from annomatrix.ops.merge import merge

logger = logging.getLogger(__name__)

__all__ = ['GroupAggregation', 'aggregate', 'partition']

N_AGG = "n_agg"


def partition(values: pd.Series) -> Dict[object, List[int]]:
    """
    Group positions of ``values`` by value, in first-appearance order.

    Missing values form no group.
    """
    groups: Dict[object, List[int]] = {}
    for pos, value in enumerate(values):
        if pd.isna(value):
            continue
        groups.setdefault(value, []).append(pos)
    return groups


class GroupAggregation(Transform):
    """
    Collapse rows (or columns) that share a value of an annotation field.

    Params:
        field: Annotation field defining the groups
        axis: "row" or "col"/"column"
        fn: Reduction applied per column to the member rows of a group
            (default numpy.median); called as fn(values_1d)
        separator: Joins distinct annotation values of aggregated rows
            (default from config, "|")

    Examples:
        >>> genes = GroupAggregation(field="pr_gene_symbol").apply(probes)
        >>> genes.row_meta[["id", "n_agg"]].head()
    """

    def __init__(
        self,
        field: str,
        axis: str | Axis = "row",
        fn: Optional[Callable[[np.ndarray], float]] = None,
        separator: Optional[str] = None,
        config: Optional[AnnoMatrixConfig] = None,
    ):
        config = config or DEFAULT_CONFIG
        self.field = field
        self.axis = parse_axis(axis)
        self.fn = fn if fn is not None else np.median
        self.separator = separator if separator is not None else config.aggregate_separator
        super().__init__(
            name="GroupAggregation",
            params={
                "field": field,
                "axis": self.axis.value,
                "fn": getattr(self.fn, "__name__", repr(self.fn)),
            },
        )

    def validate(self, matrix: AnnotatedMatrix) -> list[str]:
        errors = super().validate(matrix)
        if self.field not in matrix.meta(self.axis).columns:
            errors.append(f"field '{self.field}' not found in {self.axis.value} annotations")
        return errors

    def apply(self, matrix: AnnotatedMatrix) -> AnnotatedMatrix:
        g = matrix.transpose() if self.axis is Axis.COL else matrix
        check_columns(g.row_meta, self.field, name=f"{self.axis.value} annotations")

        logger.info(f"Aggregating {g.n_rows} {self.axis.value}s by '{self.field}'")
        values = g.row_meta[self.field]
        missing = values.isna()
        if missing.any():
            warnings.warn(
                f"{int(missing.sum())} {self.axis.value}s have no '{self.field}' value "
                "and are left out of the aggregation",
                AnnotationCoverageWarning,
                stacklevel=3,
            )

        groups = partition(values)
        labels = pd.Series([key_string(value) for value in groups])
        clashes = labels[labels.duplicated()].unique().tolist()
        if clashes:
            raise DuplicateLabelError(
                f"distinct '{self.field}' values map to the same {self.axis.value} id: {clashes}"
            )
        singles = [members[0] for members in groups.values() if len(members) == 1]
        singles.sort()
        multi = {value: members for value, members in groups.items() if len(members) > 1}
        logger.debug(f"{len(multi)} groups to aggregate, {len(singles)} singletons")

        parts = []
        if singles:
            parts.append(self._pass_through(g, singles))
        if multi:
            parts.append(self._aggregate_groups(g, multi))

        if not parts:
            warnings.warn(
                f"no {self.axis.value}s could be grouped by '{self.field}'",
                DegenerateResultWarning,
                stacklevel=3,
            )
            result = g.subset(rows=ByIndex(()))
            result.row_meta = result.row_meta.assign(**{N_AGG: pd.Series(dtype=int)})
        elif len(parts) == 1:
            result = parts[0]
        else:
            result = merge(parts[0], parts[1], axis="row")

        return result.transpose() if self.axis is Axis.COL else result

    def _pass_through(self, g: AnnotatedMatrix, positions: List[int]) -> AnnotatedMatrix:
        meta = take_rows(g.row_meta, positions)
        new_ids = [key_string(v) for v in meta[self.field]]
        meta["id"] = new_ids
        meta[N_AGG] = 1
        return AnnotatedMatrix(
            matrix=g.matrix[positions, :],
            row_ids=new_ids,
            col_ids=g.col_ids,
            row_meta=meta,
            col_meta=g.col_meta,
        )

    def _aggregate_groups(self, g: AnnotatedMatrix, groups: Dict[object, List[int]]) -> AnnotatedMatrix:
        members = list(groups.values())
        agg = np.empty((len(members), g.n_cols), dtype=np.float64)
        for i, rows in enumerate(members):
            block = g.matrix[rows, :]
            if g.n_cols > 0:
                agg[i, :] = np.apply_along_axis(self.fn, 0, block)

        meta = collapse_groups(g.row_meta, members, separator=self.separator)
        new_ids = [key_string(v) for v in groups.keys()]
        meta[self.field] = list(groups.keys())
        meta["id"] = new_ids
        meta[N_AGG] = [len(rows) for rows in members]
        return AnnotatedMatrix(
            matrix=agg,
            row_ids=new_ids,
            col_ids=g.col_ids,
            row_meta=meta,
            col_meta=g.col_meta,
        )


def aggregate(
    g: AnnotatedMatrix,
    field: str,
    axis: str | Axis = "row",
    fn: Optional[Callable[[np.ndarray], float]] = None,
    separator: Optional[str] = None,
    config: Optional[AnnoMatrixConfig] = None,
) -> AnnotatedMatrix:
    """
    Aggregate rows (axis="row") or columns (axis="col") of ``g`` by ``field``.

    Returns:
        New AnnotatedMatrix with one row (column) per distinct field value and
        an ``n_agg`` annotation counting the aggregated members

    Raises:
        MissingColumnError: If field is absent from the axis annotations
        InvalidAxisError: If axis is not a row/column value
        DuplicateLabelError: If distinct field values share a string id
            (e.g. 1 and "1")
    """
    return GroupAggregation(field, axis=axis, fn=fn, separator=separator, config=config).apply(g)

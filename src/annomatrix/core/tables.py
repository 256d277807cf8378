"""
Annotation table primitives.

Annotation tables are pandas DataFrames keyed by an ``id`` column. The
structural operators only ever combine them through the functions below, so the
null/fill semantics live in one place:

    - take_rows: positional row selection
    - subset_to_ids: re-order a table to an id vector (first match wins,
      missing ids filled with NaN)
    - concat_rows: row-bind with column union (absent columns filled with NaN)
    - add_new_records: union by key, existing records win
    - merge_precedence: left join where the primary table wins conflicting
      columns
    - collapse_groups: one row per group, distinct member values joined
    - key_strings: string form of key values for matching against ids

Examples:
    >>> import pandas as pd
    >>> from annomatrix.core.tables import merge_precedence
    >>> rows = pd.DataFrame({"id": ["a", "b"], "type": ["x", "y"]})
    >>> annot = pd.DataFrame({"id": ["b", "a"], "type": ["?", "?"], "dose": [1, 2]})
    >>> merge_precedence(rows, annot, by="id")
      id type  dose
    0  a    x     2
    1  b    y     1
"""

from __future__ import annotations

import logging
import warnings
from typing import Iterable, List, Sequence

import numpy as np
import pandas as pd

from annomatrix.core.exceptions import (
    CartesianProductError,
    MissingColumnError,
    UnmatchedIdWarning,
)

logger = logging.getLogger(__name__)

__all__ = [
    'check_columns',
    'id_only_table',
    'take_rows',
    'subset_to_ids',
    'concat_rows',
    'add_new_records',
    'merge_precedence',
    'collapse_groups',
    'key_string',
    'key_strings',
]


def check_columns(
    table: pd.DataFrame,
    required: str | Iterable[str],
    name: str = "table",
    raise_error: bool = True,
    error_class: type[MissingColumnError] = MissingColumnError,
) -> bool:
    """
    Check that ``table`` contains every column in ``required``.

    Returns:
        True when all columns are present; False when some are missing and
        ``raise_error`` is False

    Raises:
        MissingColumnError (or ``error_class``): When columns are missing and
            ``raise_error`` is True
    """
    if isinstance(required, str):
        required = [required]
    missing = [col for col in required if col not in table.columns]
    if missing:
        if raise_error:
            raise error_class(
                f"the following column names are not found in {name}: {' '.join(map(str, missing))}"
            )
        return False
    return True


def id_only_table(ids: Sequence[str], key: str = "id") -> pd.DataFrame:
    """Table with a single key column."""
    return pd.DataFrame({key: pd.Series(list(ids), dtype=object)})


def take_rows(table: pd.DataFrame, indices: Sequence[int] | np.ndarray) -> pd.DataFrame:
    """Rows of ``table`` at ``indices`` (positional), with a fresh RangeIndex."""
    return table.iloc[np.asarray(indices, dtype=np.intp)].reset_index(drop=True)


def subset_to_ids(table: pd.DataFrame, ids: Sequence[str], key: str = "id") -> pd.DataFrame:
    """
    Re-order ``table`` so its ``key`` column equals ``ids``.

    Each id takes the first table row carrying it; ids without a row get a row
    of missing values (with the key filled in). Table rows whose key is not in
    ``ids`` are dropped.

    Raises:
        MissingColumnError: If ``key`` is not a column of ``table``
    """
    check_columns(table, key)
    ids = list(ids)
    first = table.drop_duplicates(subset=key, keep="first")
    positions = pd.Index(first[key]).get_indexer(ids)

    if (positions >= 0).all():
        out = first.iloc[positions].reset_index(drop=True)
    else:
        out = first.set_index(key, drop=False).reindex(ids).reset_index(drop=True)
        out[key] = pd.Series(ids, dtype=object)
    return out


def concat_rows(tables: Sequence[pd.DataFrame]) -> pd.DataFrame:
    """
    Row-bind tables with a permissive column union.

    Column order is first-seen order across the inputs; a row of a table
    lacking a column gets a missing value there.
    """
    tables = [t for t in tables if t is not None]
    if not tables:
        return pd.DataFrame()

    columns: List[str] = []
    for t in tables:
        columns.extend(c for c in t.columns if c not in columns)

    # reindex first so that empty inputs keep the full column set
    aligned = [t.reindex(columns=columns) for t in tables]
    non_empty = [t for t in aligned if len(t) > 0]
    if not non_empty:
        return aligned[0].iloc[0:0].reset_index(drop=True)
    return pd.concat(non_empty, ignore_index=True, sort=False)


def add_new_records(primary: pd.DataFrame, secondary: pd.DataFrame, key: str = "id") -> pd.DataFrame:
    """
    Union two tables by ``key``.

    Records of ``primary`` are kept as they are (it wins for keys present in
    both); records of ``secondary`` with keys unseen in ``primary`` are
    appended in their original order.
    """
    check_columns(primary, key, name="primary")
    check_columns(secondary, key, name="secondary")
    new = secondary[~secondary[key].isin(primary[key])]
    return concat_rows([primary, new])


def merge_precedence(
    primary: pd.DataFrame,
    secondary: pd.DataFrame,
    by: str | Sequence[str],
    allow_cartesian: bool = True,
    warn_unmatched: bool = True,
) -> pd.DataFrame:
    """
    Left-join ``secondary`` onto ``primary``; ``primary`` wins conflicting columns.

    Columns present in both tables (other than ``by``) are taken from
    ``primary``: the conflicting columns of ``secondary`` are dropped before
    merging. Every ``primary`` row is kept, in ``primary`` order; rows without a
    match get missing values for the ``secondary``-only columns.

    Args:
        primary: Table whose rows and columns take precedence
        secondary: Table contributing additional columns
        by: Key column name(s), present in both tables
        allow_cartesian: Allow a ``primary`` key to match several
            ``secondary`` rows (the ``primary`` row is then repeated)
        warn_unmatched: Warn when some ``primary`` keys have no match

    Returns:
        The merged table with a fresh RangeIndex

    Raises:
        MissingColumnError: If a key column is missing from either table
        CartesianProductError: If expansion occurs and ``allow_cartesian`` is False

    Examples:
        >>> merged = merge_precedence(row_meta, gene_info, by="id")
        >>> len(merged) == len(row_meta)  # when gene_info keys are unique
        True
    """
    by = [by] if isinstance(by, str) else list(by)
    check_columns(primary, by, name="primary")
    check_columns(secondary, by, name="secondary")

    common = set(primary.columns) & set(secondary.columns)
    keep_cols = list(dict.fromkeys(by + [c for c in secondary.columns if c not in common]))
    secondary = secondary.loc[:, keep_cols]

    primary_keys = pd.MultiIndex.from_frame(primary[by]) if len(by) > 1 else pd.Index(primary[by[0]])
    secondary_keys = pd.MultiIndex.from_frame(secondary[by]) if len(by) > 1 else pd.Index(secondary[by[0]])

    matched = primary_keys.isin(secondary_keys)
    if warn_unmatched and not matched.all():
        warnings.warn(
            f"{int((~matched).sum())} of {len(primary)} rows of the primary table had no match "
            "in the secondary table; their secondary columns are missing",
            UnmatchedIdWarning,
            stacklevel=2,
        )

    duplicated = secondary_keys[secondary_keys.duplicated()]
    expanding = primary_keys.isin(duplicated)
    if expanding.any():
        if not allow_cartesian:
            raise CartesianProductError(
                f"{int(expanding.sum())} primary rows match several secondary rows; "
                "pass allow_cartesian=True to permit the expansion"
            )
        logger.debug(f"Merge expands {int(expanding.sum())} primary rows (cartesian)")

    merged = primary.reset_index(drop=True).merge(secondary, on=by, how="left", sort=False)
    return merged.reset_index(drop=True)


def key_string(value: object) -> str:
    """String form of a key value; integral floats print as integers ("7.0" -> "7")."""
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    return str(value)


def key_strings(values: Sequence[object] | pd.Series) -> pd.Series:
    """
    Element-wise ``key_string`` with missing values kept missing.

    Integer key columns with a blank cell come out of pandas as float64; this
    keeps their keys matching the string ids of a matrix.
    """
    values = pd.Series(values)
    return values.map(key_string, na_action="ignore").astype(object)


def collapse_groups(
    table: pd.DataFrame,
    groups: Sequence[Sequence[int]],
    separator: str = "|",
) -> pd.DataFrame:
    """
    Reduce each group of rows of ``table`` to a single row.

    For every column, the distinct non-missing member values (first-seen
    order) are joined with ``separator``; a single distinct value is kept with
    its original type, and a group with no values gets a missing value.

    Args:
        table: Source table
        groups: Lists of positional row indices, one per output row
        separator: Joins distinct values

    Returns:
        One row per group, same columns as ``table``
    """
    n_groups = len(groups)
    if n_groups == 0:
        return table.iloc[0:0].reset_index(drop=True)

    labels = np.repeat(np.arange(n_groups), [len(members) for members in groups])
    positions = np.concatenate([np.asarray(members, dtype=np.intp) for members in groups])
    block = table.iloc[positions].reset_index(drop=True)

    collapsed = {}
    for col in table.columns:
        distinct = (
            pd.DataFrame({"group": labels, "value": block[col].to_numpy()})
            .dropna(subset=["value"])
            .drop_duplicates()
        )
        n_distinct = distinct.groupby("group")["value"].transform("size")
        single = distinct.loc[n_distinct == 1].set_index("group")["value"]
        joined = (
            distinct.loc[n_distinct > 1]
            .groupby("group", sort=True)["value"]
            .agg(lambda v: separator.join(str(x) for x in v))
        )
        parts = [s for s in (single, joined) if len(s) > 0]
        values = pd.concat(parts) if parts else pd.Series(dtype=object)
        collapsed[col] = values.reindex(range(n_groups)).to_numpy()
    return pd.DataFrame(collapsed, columns=table.columns)

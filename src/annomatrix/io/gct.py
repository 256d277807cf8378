"""
GCT text format reader and writer.

GCT is the tab-delimited exchange format for annotated matrices. Version 1.3
carries annotation tables for both axes:

    #1.3
    <n_rows> <n_cols> <n_row_fields> <n_col_fields>
    id      <row fields...>  <col id 1> ... <col id C>
    <col field>  na ... na   <value per column>        (one line per column field)
    <row id>     <row field values>  <matrix values>   (one line per row)

Version 1.2 (read only) has a two-number dimension line and a
``Name  Description  <col ids>`` header; Description becomes a row field.

Engineering Design:
    - Whole-file parse with pandas (all cells as text), then typed:
      matrix cells to float, annotation columns to numbers when every
      non-missing value parses as one
    - Selectors are applied after parsing; the text layout offers no random
      access, so partial reads cost a full parse
    - Atomic writes: temp file + rename

Examples:
    >>> from annomatrix.io.gct import read_gct, write_gct
    >>> g = read_gct("signatures.gct", cols=["sig_001", "sig_007"])
    >>> write_gct(g, "subset.gct")
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any, List, Optional, Tuple

import numpy as np
import pandas as pd

from annomatrix.config import DEFAULT_CONFIG, AnnoMatrixConfig
from annomatrix.core.annotated import AnnotatedMatrix
from annomatrix.utils.fileio import atomic_write_text

logger = logging.getLogger(__name__)

__all__ = ['read_gct', 'write_gct']

NA_TOKENS = ["", "na", "NA", "NaN", "nan", "N/A", "#N/A", "null", "NULL", "None"]
FILLER = "na"


def _parse_dimensions(version: str, line: str, path: Path) -> Tuple[int, int, int, int]:
    try:
        dims = [int(x) for x in line.strip().split("\t") if x.strip() != ""]
    except ValueError as e:
        raise ValueError(f"Malformed dimension line in {path}: {line.strip()!r}") from e

    if version == "#1.3":
        if len(dims) != 4:
            raise ValueError(f"GCT 1.3 dimension line must have 4 numbers in {path}, got {dims}")
        return dims[0], dims[1], dims[2], dims[3]
    if version == "#1.2":
        if len(dims) != 2:
            raise ValueError(f"GCT 1.2 dimension line must have 2 numbers in {path}, got {dims}")
        return dims[0], dims[1], 1, 0
    raise ValueError(f"Unsupported GCT version {version!r} in {path}; expected #1.2 or #1.3")


def _missing_to_nan(values: pd.Series | pd.DataFrame) -> Any:
    return values.mask(values.isin(NA_TOKENS))


def _infer_column(values: pd.Series) -> pd.Series:
    """Numeric when every non-missing value parses as a number, else strings."""
    values = _missing_to_nan(values)
    try:
        return pd.to_numeric(values)
    except (ValueError, TypeError):
        return values


def read_gct(
    path: Path,
    rows: Any = None,
    cols: Any = None,
    matrix_only: bool = False,
    config: Optional[AnnoMatrixConfig] = None,
) -> AnnotatedMatrix:
    """
    Load a GCT file into an AnnotatedMatrix.

    Args:
        path: GCT file (version 1.2 or 1.3)
        rows: Row selector (ids or zero-based positions); None for all rows
        cols: Column selector; None for all columns
        matrix_only: Drop annotation fields (id-only tables)
        config: Supplies the integer tolerance for float positional selectors

    Returns:
        AnnotatedMatrix

    Raises:
        FileNotFoundError: If path does not exist
        ValueError: If the header, dimensions or matrix cells are malformed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"GCT file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Path is not a file: {path}")

    with open(path, "r", encoding="utf-8") as f:
        version = f.readline().strip()
        dim_line = f.readline()
    n_rows, n_cols, n_rfields, n_cfields = _parse_dimensions(version, dim_line, path)

    logger.info(f"Reading GCT {version[1:]} file {path} ({n_rows} rows x {n_cols} columns)")

    try:
        raw = pd.read_csv(
            path,
            sep="\t",
            skiprows=2,
            header=None,
            dtype=object,
            keep_default_na=False,
            na_filter=False,
        )
    except pd.errors.EmptyDataError as e:
        raise ValueError(f"GCT file has no header line: {path}") from e
    except pd.errors.ParserError as e:
        raise ValueError(f"Failed to parse GCT file {path}: {e}") from e

    expected_width = 1 + n_rfields + n_cols
    expected_height = 1 + n_cfields + n_rows
    if raw.shape != (expected_height, expected_width):
        raise ValueError(
            f"GCT dimensions in {path} do not match its content: expected "
            f"{expected_height} lines x {expected_width} fields, found "
            f"{raw.shape[0]} x {raw.shape[1]}"
        )

    header = raw.iloc[0].tolist()
    row_fields = header[1:1 + n_rfields]
    col_ids = header[1 + n_rfields:]

    col_block = raw.iloc[1:1 + n_cfields]
    col_meta = pd.DataFrame({"id": col_ids})
    for _, line in col_block.iterrows():
        values = pd.Series(line.iloc[1 + n_rfields:].to_numpy(), dtype=object)
        col_meta[line.iloc[0]] = _infer_column(values)

    data = raw.iloc[1 + n_cfields:].reset_index(drop=True)
    row_ids = data.iloc[:, 0].tolist()
    row_meta = pd.DataFrame({"id": row_ids})
    for k, field in enumerate(row_fields):
        row_meta[field] = _infer_column(data.iloc[:, 1 + k])

    cells = _missing_to_nan(data.iloc[:, 1 + n_rfields:])
    try:
        matrix = cells.to_numpy(dtype=np.float64)
    except ValueError as e:
        raise ValueError(f"GCT matrix in {path} contains non-numeric values: {e}") from e

    g = AnnotatedMatrix(
        matrix=matrix,
        row_ids=row_ids,
        col_ids=col_ids,
        row_meta=row_meta,
        col_meta=col_meta,
    )

    if rows is not None or cols is not None:
        g = g.subset(rows=rows, cols=cols, config=config)
    if matrix_only:
        g = AnnotatedMatrix(matrix=g.matrix, row_ids=g.row_ids, col_ids=g.col_ids)
    return g


def write_gct(
    g: AnnotatedMatrix,
    path: Path,
    config: Optional[AnnoMatrixConfig] = None,
) -> Path:
    """
    Write an AnnotatedMatrix as GCT 1.3.

    Args:
        g: Matrix to write
        path: Output file (parent directories are created)
        config: Supplies the missing-value token (default "NaN")

    Returns:
        The path written

    Raises:
        TypeError: If g is not an AnnotatedMatrix
        OSError: If path is not writable
    """
    if not isinstance(g, AnnotatedMatrix):
        raise TypeError(f"g must be AnnotatedMatrix, got {type(g)}")
    config = config or DEFAULT_CONFIG
    path = Path(path)

    row_fields: List[str] = [c for c in g.row_meta.columns if c != "id"]
    col_fields: List[str] = [c for c in g.col_meta.columns if c != "id"]

    header = pd.DataFrame([["id"] + [str(f) for f in row_fields] + list(g.col_ids)])
    col_lines = pd.DataFrame(
        [[str(f)] + [FILLER] * len(row_fields) + g.col_meta[f].tolist() for f in col_fields]
    )
    body = pd.concat(
        [
            pd.DataFrame({"id": list(g.row_ids)}),
            g.row_meta[row_fields].reset_index(drop=True),
            pd.DataFrame(g.matrix),
        ],
        axis=1,
    )

    buf = io.StringIO()
    buf.write("#1.3\n")
    buf.write(f"{g.n_rows}\t{g.n_cols}\t{len(row_fields)}\t{len(col_fields)}\n")
    for block in (header, col_lines, body):
        if block.shape[0] == 0:
            continue
        block.to_csv(
            buf,
            sep="\t",
            header=False,
            index=False,
            na_rep=config.gct_na_string,
            lineterminator="\n",
        )

    atomic_write_text(path, buf.getvalue())
    logger.info(f"Wrote {g.n_rows} x {g.n_cols} matrix to {path}")
    return path

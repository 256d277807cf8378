"""
Reader for delimited annotation tables.

Annotation files (gene info, sample sheets, compound lists) arrive as CSV or
TSV with a header row. The delimiter is sniffed from the first bytes so callers
can pass any of them to ``annotate``.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path

import pandas as pd

logger = logging.getLogger(__name__)

__all__ = ['sniff_delimiter', 'read_annotation_table']


def sniff_delimiter(path: Path, sample_size: int = 8192) -> str:
    """
    Auto-detect delimiter from file content.

    Uses Python's csv.Sniffer with fallback heuristics. The pipe character is
    not a candidate because aggregated annotation values are pipe-joined.

    Args:
        path: Path to data file
        sample_size: Bytes to sample for detection

    Returns:
        Detected delimiter character ('\\t', ',' or ';')

    Raises:
        ValueError: If delimiter cannot be determined
    """
    with open(path, 'r', encoding='utf-8', errors='ignore') as f:
        sample = f.read(sample_size)

    # Try csv.Sniffer first
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters='\t,;')
        return dialect.delimiter
    except csv.Error:
        pass

    # Fallback: count delimiter occurrences in first line
    first_line = sample.split('\n')[0]
    counts = {
        '\t': first_line.count('\t'),
        ',': first_line.count(','),
        ';': first_line.count(';'),
    }

    if max(counts.values()) == 0:
        raise ValueError(
            f"Could not detect delimiter in {path}. "
            "Please pass the annotations as a DataFrame instead"
        )

    return max(counts, key=counts.get)


def read_annotation_table(path: Path, delimiter: str | None = None) -> pd.DataFrame:
    """
    Read a delimited annotation table with a header row.

    Args:
        path: CSV/TSV file
        delimiter: Field separator; sniffed when None

    Returns:
        DataFrame with pandas' default type inference

    Raises:
        FileNotFoundError: If path does not exist
        ValueError: If the file is empty or unparseable
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Annotation file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Path is not a file: {path}")

    if delimiter is None:
        delimiter = sniff_delimiter(path)

    try:
        table = pd.read_csv(path, sep=delimiter)
    except pd.errors.EmptyDataError as e:
        raise ValueError(f"Annotation file is empty: {path}") from e
    except pd.errors.ParserError as e:
        raise ValueError(f"Failed to parse annotation file {path}: {e}") from e

    logger.info(f"Read {len(table)} annotation records with {table.shape[1]} fields from {path}")
    return table

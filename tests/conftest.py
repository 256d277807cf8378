"""
Pytest configuration and shared fixtures.

This module provides synthetic annotated matrices shaped like small
transcriptional signature datasets (probes x signatures) for all test suites.
"""

import numpy as np
import pandas as pd
import pytest

from annomatrix.core.annotated import AnnotatedMatrix


CELL_LINES = ["A375", "MCF7", "PC3", "HT29"]


def generate_synthetic_annotated_matrix(
    n_rows: int,
    n_cols: int,
    missing_fraction: float = 0.0,
    seed: int = 42
) -> AnnotatedMatrix:
    """
    Generate a synthetic annotated matrix with realistic annotations.

    Args:
        n_rows: Number of rows (probes)
        n_cols: Number of columns (signatures)
        missing_fraction: Fraction of cells set to NaN
        seed: Random seed for reproducibility

    Returns:
        AnnotatedMatrix with z-score-like values

    Design:
        - Row fields: pr_gene_symbol (string), pr_gene_id (int), pr_score (float)
        - Column fields: cell_id (string), pert_dose (float), pert_time (int)
        - No field name is shared between the two axes
    """
    rng = np.random.RandomState(seed)

    data = rng.randn(n_rows, n_cols) * 2.0
    if missing_fraction > 0:
        n_missing = int(n_rows * n_cols * missing_fraction)
        positions = rng.choice(n_rows * n_cols, size=n_missing, replace=False)
        data.flat[positions] = np.nan

    row_ids = [f"{200000 + i}_at" for i in range(n_rows)]
    col_ids = [f"SIG_{j:03d}" for j in range(n_cols)]

    row_meta = pd.DataFrame({
        "id": row_ids,
        "pr_gene_symbol": [f"GENE{i % 7}" for i in range(n_rows)],
        "pr_gene_id": [1000 + i for i in range(n_rows)],
        "pr_score": rng.uniform(0, 1, size=n_rows).round(4),
    })
    col_meta = pd.DataFrame({
        "id": col_ids,
        "cell_id": [CELL_LINES[j % len(CELL_LINES)] for j in range(n_cols)],
        "pert_dose": [float(2 ** (j % 3)) for j in range(n_cols)],
        "pert_time": [6 if j % 2 == 0 else 24 for j in range(n_cols)],
    })

    return AnnotatedMatrix(
        matrix=data,
        row_ids=row_ids,
        col_ids=col_ids,
        row_meta=row_meta,
        col_meta=col_meta,
    )


@pytest.fixture
def small_matrix():
    """Small test matrix (10 rows x 4 columns) for fast unit tests."""
    return generate_synthetic_annotated_matrix(n_rows=10, n_cols=4, seed=42)


@pytest.fixture
def sparse_matrix():
    """Test matrix (12 rows x 6 columns) with 20% missing cells."""
    return generate_synthetic_annotated_matrix(n_rows=12, n_cols=6, missing_fraction=0.2, seed=7)


@pytest.fixture
def symmetric_matrix():
    """Dense symmetric 4 x 4 matrix (correlation-like) with unit diagonal."""
    values = np.array([
        [1.0, 0.2, 0.3, 0.4],
        [0.2, 1.0, 0.5, 0.6],
        [0.3, 0.5, 1.0, 0.7],
        [0.4, 0.6, 0.7, 1.0],
    ])
    ids = ["p1", "p2", "p3", "p4"]
    return AnnotatedMatrix(
        matrix=values,
        row_ids=ids,
        col_ids=ids,
        row_meta=pd.DataFrame({"id": ids, "family": ["kinase", "kinase", "gpcr", "gpcr"]}),
        col_meta=pd.DataFrame({"id": ids, "family": ["kinase", "kinase", "gpcr", "gpcr"]}),
    )


@pytest.fixture
def grouped_matrix():
    """
    20 x 5 matrix whose rows fall into three groups of sizes 7, 7 and 6.

    Group labels interleave (A, B, C, A, B, C, ...) so that groups are not
    contiguous blocks.
    """
    rng = np.random.RandomState(0)
    n_rows, n_cols = 20, 5
    row_ids = [f"probe_{i:02d}" for i in range(n_rows)]
    return AnnotatedMatrix(
        matrix=rng.randn(n_rows, n_cols),
        row_ids=row_ids,
        col_ids=[f"s{j}" for j in range(n_cols)],
        row_meta=pd.DataFrame({
            "id": row_ids,
            "gene": [["A", "B", "C"][i % 3] for i in range(n_rows)],
            "platform": ["L1000"] * n_rows,
        }),
    )

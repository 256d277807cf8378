"""
I/O module for reading and writing annotated matrices.

Key Functions:
    - load / read_gct: Read a GCT 1.2 or 1.3 file, optionally a subset of it
    - store / write_gct: Write an AnnotatedMatrix as GCT 1.3
    - read_annotation_table: Read a delimited annotation table (used by annotate)

Design Philosophy:
    - Selectors follow the same rules as AnnotatedMatrix.subset
    - Clear error messages for malformed files
    - Atomic writes so interrupted runs never leave half-written files

Examples:
    >>> from annomatrix.io import load, store
    >>> g = load("level5.gct", rows=["200814_at", "222103_at"])
    >>> store("subset.gct", g)
"""

from pathlib import Path
from typing import Optional

from annomatrix.config import AnnoMatrixConfig
from annomatrix.core.annotated import AnnotatedMatrix
from annomatrix.io.annotations import read_annotation_table, sniff_delimiter
from annomatrix.io.gct import read_gct, write_gct

load = read_gct


def store(path: Path, g: AnnotatedMatrix, config: Optional[AnnoMatrixConfig] = None) -> Path:
    """
    Write ``g`` to ``path`` as GCT 1.3 and return the path.

    Path-first counterpart of ``write_gct``, so ``load(store(path, g))``
    reads back what was written.
    """
    return write_gct(g, path, config=config)


__all__ = [
    'load',
    'store',
    'read_gct',
    'write_gct',
    'read_annotation_table',
    'sniff_delimiter',
]

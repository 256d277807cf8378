"""
annomatrix - Annotated numeric matrices

A numeric matrix with identifiers and annotation tables on both axes, plus the
structural operators that keep the three in sync: subsetting, merging,
annotation joins, alignment, reshaping, extraction, ranking and aggregation.
"""

__version__ = "0.1.0"

from annomatrix.core.annotated import AnnotatedMatrix
from annomatrix.core.axis import Axis
from annomatrix.core.transform import Transform
from annomatrix.ops import aggregate, align, annotate, extract, melt, merge, pad, rank

__all__ = [
    "AnnotatedMatrix",
    "Axis",
    "Transform",
    "aggregate",
    "align",
    "annotate",
    "extract",
    "melt",
    "merge",
    "pad",
    "rank",
]

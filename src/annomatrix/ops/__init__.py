"""
Structural operators over annotated matrices.

Every operator is a pure function: inputs are never modified and the result
is a new AnnotatedMatrix (or an auxiliary table/result object).

    - align, pad: NaN-padding and alignment of labelled matrices
    - merge: concatenation along an axis
    - annotate: join an external annotation table onto an axis
    - rank / RankTransform: rank transformation along an axis
    - melt: wide-to-long reshape
    - extract: cells where row and column annotations agree
    - aggregate / GroupAggregation: collapse rows or columns by a field
"""

from annomatrix.ops.aggregate import GroupAggregation, aggregate, partition
from annomatrix.ops.align import AlignedStack, align, pad
from annomatrix.ops.annotate import annotate
from annomatrix.ops.extract import ExtractResult, extract
from annomatrix.ops.melt import is_symmetric, melt
from annomatrix.ops.merge import merge
from annomatrix.ops.rank import RankTransform, rank

__all__ = [
    'AlignedStack',
    'align',
    'pad',
    'merge',
    'annotate',
    'RankTransform',
    'rank',
    'melt',
    'is_symmetric',
    'ExtractResult',
    'extract',
    'GroupAggregation',
    'aggregate',
    'partition',
]

"""
Core data structures for annotated matrices.

1. AnnotatedMatrix: numeric matrix with ids and annotation tables on both axes
2. Axis: row/column parameter for the symmetric operators
3. Selectors: parsing and resolution of row/column selections
4. Tables: annotation table primitives, including the left-precedence merge
5. Transform: base class for matrix-to-matrix operators
6. Exceptions and warnings shared by every module

Examples:
    >>> from annomatrix.core import AnnotatedMatrix, merge_precedence
    >>> g = AnnotatedMatrix(matrix, row_ids=genes, col_ids=samples)
    >>> g.subset(rows=genes[:10])
"""

from annomatrix.core.annotated import AnnotatedMatrix
from annomatrix.core.axis import Axis, parse_axis
from annomatrix.core.exceptions import (
    AnnoMatrixError,
    AnnoMatrixWarning,
    AnnotationCoverageWarning,
    CartesianProductError,
    DegenerateResultWarning,
    DuplicateIdWarning,
    DuplicateLabelError,
    InvalidAxisError,
    InvalidSelectorError,
    MissingColumnError,
    MissingKeyFieldError,
    UnmatchedIdWarning,
)
from annomatrix.core.selectors import (
    AllAxis,
    ByIndex,
    ByLabel,
    Selector,
    is_whole_number,
    parse_selector,
    resolve,
)
from annomatrix.core.tables import (
    add_new_records,
    check_columns,
    collapse_groups,
    concat_rows,
    key_string,
    key_strings,
    merge_precedence,
    subset_to_ids,
    take_rows,
)
from annomatrix.core.transform import Transform

__all__ = [
    'AnnotatedMatrix',
    'Axis',
    'parse_axis',
    'AllAxis',
    'ByIndex',
    'ByLabel',
    'Selector',
    'is_whole_number',
    'parse_selector',
    'resolve',
    'add_new_records',
    'check_columns',
    'collapse_groups',
    'concat_rows',
    'key_string',
    'key_strings',
    'merge_precedence',
    'subset_to_ids',
    'take_rows',
    'Transform',
    'AnnoMatrixError',
    'AnnoMatrixWarning',
    'AnnotationCoverageWarning',
    'CartesianProductError',
    'DegenerateResultWarning',
    'DuplicateIdWarning',
    'DuplicateLabelError',
    'InvalidAxisError',
    'InvalidSelectorError',
    'MissingColumnError',
    'MissingKeyFieldError',
    'UnmatchedIdWarning',
]

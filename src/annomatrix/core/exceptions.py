"""
Exception and warning taxonomy for annotated matrix operations.

Two families:

    Errors (raised immediately at the point of detection):
        Structural or type problems that make an operation meaningless, such as
        a malformed selector, a duplicated alignment label, an unknown axis or
        a required column missing from a table.

    Warnings (issued through ``warnings.warn``, the operation completes):
        Data-completeness issues such as selector labels with no match, a
        result with an empty axis, or annotation tables that only partially
        cover the ids of a matrix. Missing values are filled with NaN and the
        operation proceeds with best-effort semantics.

Examples:
    >>> import warnings
    >>> from annomatrix.core.exceptions import UnmatchedIdWarning
    >>> with warnings.catch_warnings():
    ...     warnings.simplefilter("error", UnmatchedIdWarning)
    ...     g.subset(rows=["not-a-row"])  # now raises
"""

from __future__ import annotations

__all__ = [
    'AnnoMatrixError',
    'InvalidSelectorError',
    'DuplicateLabelError',
    'InvalidAxisError',
    'MissingColumnError',
    'MissingKeyFieldError',
    'CartesianProductError',
    'AnnoMatrixWarning',
    'UnmatchedIdWarning',
    'DegenerateResultWarning',
    'AnnotationCoverageWarning',
    'DuplicateIdWarning',
]


class AnnoMatrixError(Exception):
    """Base class for all annomatrix errors."""
    pass


class InvalidSelectorError(AnnoMatrixError, TypeError):
    """Raised when a row/column selector mixes types or has an unsupported type."""
    pass


class DuplicateLabelError(AnnoMatrixError, ValueError):
    """Raised when an axis that must be unique-keyed contains repeated labels."""
    pass


class InvalidAxisError(AnnoMatrixError, ValueError):
    """Raised when an axis argument is neither 'row' nor 'col'/'column'."""
    pass


class MissingColumnError(AnnoMatrixError, ValueError):
    """Raised when a required column is absent from a table."""
    pass


class MissingKeyFieldError(MissingColumnError):
    """Raised when the key field used to annotate a matrix is absent from the annotation table."""
    pass


class CartesianProductError(AnnoMatrixError, ValueError):
    """Raised when a merge would expand one key into several rows and expansion is disallowed."""
    pass


class AnnoMatrixWarning(UserWarning):
    """Base class for recoverable data-completeness warnings."""
    pass


class UnmatchedIdWarning(AnnoMatrixWarning):
    """Some requested labels or merge keys had no match and were skipped."""
    pass


class DegenerateResultWarning(AnnoMatrixWarning):
    """An operation produced a result with a zero-length axis."""
    pass


class AnnotationCoverageWarning(AnnoMatrixWarning):
    """An annotation table did not cover every id of the annotated axis."""
    pass


class DuplicateIdWarning(AnnoMatrixWarning):
    """An id vector contains repeated values outside an alignment operation."""
    pass

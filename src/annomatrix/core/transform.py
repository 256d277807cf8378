"""
Base class for matrix-to-matrix transformations.

A Transform is a named, parameterized, pure operation: it takes an
AnnotatedMatrix and returns a new one, never modifying its input. Parameters
are kept on the instance so a chain of transforms can be logged and replayed.

Examples:
    >>> from annomatrix.ops.rank import RankTransform
    >>> from annomatrix.ops.aggregate import GroupAggregation
    >>>
    >>> steps = [GroupAggregation(field="gene"), RankTransform(axis="col")]
    >>> result = g
    >>> for step in steps:
    ...     errors = step.validate(result)
    ...     if errors:
    ...         raise ValueError("; ".join(errors))
    ...     result = step.apply(result)
    >>> print(" -> ".join(str(s) for s in steps))
    GroupAggregation(field=gene, axis=row, fn=median) -> RankTransform(axis=col, descending=True)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from annomatrix.core.annotated import AnnotatedMatrix

__all__ = ['Transform']


class Transform(ABC):
    """
    Abstract base class for AnnotatedMatrix transformations.

    Attributes:
        name: Human-readable transformation name (e.g., "RankTransform")
        params: Parameters used for this transformation
        timestamp: When this transform instance was created (for audit trail)
    """

    def __init__(self, name: str, params: dict[str, Any]) -> None:
        self.name = name
        self.params = params
        self.timestamp = datetime.now()

    @abstractmethod
    def apply(self, matrix: AnnotatedMatrix) -> AnnotatedMatrix:
        """
        Execute the transformation and return a new matrix.

        Must never modify the input matrix.

        Raises:
            AnnoMatrixError: If the transformation cannot be applied
        """
        pass

    def validate(self, matrix: AnnotatedMatrix) -> list[str]:
        """
        Check preconditions before applying the transformation.

        Subclasses should override and call super().validate() first.

        Returns:
            List of error messages (empty list = valid)
        """
        errors: list[str] = []

        if matrix.matrix.size == 0:
            errors.append("Cannot process empty matrix")

        return errors

    def __call__(self, matrix: AnnotatedMatrix) -> AnnotatedMatrix:
        return self.apply(matrix)

    def __repr__(self) -> str:
        """String like "RankTransform(axis=col, descending=True)"."""
        params_str = ", ".join(f"{k}={v}" for k, v in self.params.items())
        return f"{self.name}({params_str})"

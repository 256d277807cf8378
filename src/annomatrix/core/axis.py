"""Row/column axis parameter shared by the symmetric operators."""

from __future__ import annotations

from enum import Enum

from annomatrix.core.exceptions import InvalidAxisError

__all__ = ['Axis', 'parse_axis']


class Axis(str, Enum):
    """Matrix dimension. Compares equal to its string value."""

    ROW = "row"
    COL = "col"

    @property
    def other(self) -> Axis:
        """The orthogonal axis."""
        return Axis.COL if self is Axis.ROW else Axis.ROW


_ALIASES = {
    "row": Axis.ROW,
    "col": Axis.COL,
    "column": Axis.COL,
}


def parse_axis(axis: str | Axis) -> Axis:
    """
    Normalize an axis argument.

    Accepts ``Axis`` members and the strings "row", "col" and "column".

    Raises:
        InvalidAxisError: For anything else
    """
    if isinstance(axis, Axis):
        return axis
    if isinstance(axis, str) and axis.lower() in _ALIASES:
        return _ALIASES[axis.lower()]
    raise InvalidAxisError(f"axis must be one of 'row', 'col' or 'column', got {axis!r}")

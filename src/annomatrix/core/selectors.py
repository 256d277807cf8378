"""
Row/column selectors and their resolution against an axis.

User input for "which rows/columns" arrives in many shapes: ``None``, a single
id, a list of ids, a numpy array of positions, a pandas Index. It is parsed
once into a tagged variant and then resolved against the reference id vector:

    Selector = AllAxis | ByLabel(labels) | ByIndex(indices)

Resolution rules:
    - AllAxis (absent or empty selector): the full axis in original order
    - ByLabel: each label looked up through an index map built once; labels
      without a match are dropped with a single UnmatchedIdWarning
    - ByIndex: zero-based positions used directly; out-of-range positions are
      dropped with an UnmatchedIdWarning
    - The result follows the selector's order and multiplicity

Examples:
    >>> import pandas as pd
    >>> from annomatrix.core.selectors import resolve
    >>> ref = pd.Index(["a", "b", "c"])
    >>> ids, idx = resolve(["c", "a"], ref, "row")
    >>> list(ids), list(idx)
    (['c', 'a'], [2, 0])
    >>> ids, idx = resolve([1.0, 2], ref, "row")
    >>> list(ids)
    ['b', 'c']
"""

from __future__ import annotations

import numbers
import warnings
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

import numpy as np
import pandas as pd

from annomatrix.core.exceptions import InvalidSelectorError, UnmatchedIdWarning

__all__ = [
    'AllAxis',
    'ByLabel',
    'ByIndex',
    'Selector',
    'parse_selector',
    'resolve',
    'is_whole_number',
]

_DEFAULT_TOLERANCE = float(np.finfo(float).eps ** 0.5)


@dataclass(frozen=True)
class AllAxis:
    """Select the whole axis in its original order."""
    pass


@dataclass(frozen=True)
class ByLabel:
    """Select by id label."""
    labels: Tuple[str, ...]


@dataclass(frozen=True)
class ByIndex:
    """Select by zero-based position."""
    indices: Tuple[int, ...]


Selector = Union[AllAxis, ByLabel, ByIndex]


def is_whole_number(values: Any, tol: float = _DEFAULT_TOLERANCE) -> np.ndarray:
    """Elementwise test that ``values`` lie within ``tol`` of an integer."""
    arr = np.asarray(values, dtype=float)
    return np.abs(arr - np.round(arr)) < tol


def _is_label(value: Any) -> bool:
    return isinstance(value, (str, np.str_))


def _is_number(value: Any) -> bool:
    # bool is an Integral subtype but never a position
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, numbers.Real)


def parse_selector(selector: Any, tol: Optional[float] = None) -> Selector:
    """
    Convert loose selector input into the ``Selector`` variant.

    Args:
        selector: None, a Selector, a single string id, or a sequence
            (list, tuple, numpy array, pandas Index/Series) of string ids or of
            integer-valued numbers
        tol: Integer tolerance for float positions (default machine eps ** 0.5)

    Returns:
        AllAxis, ByLabel or ByIndex

    Raises:
        InvalidSelectorError: Mixed element types, booleans, non-integral
            numbers, or an unsupported container
    """
    if tol is None:
        tol = _DEFAULT_TOLERANCE

    if selector is None:
        return AllAxis()
    if isinstance(selector, (AllAxis, ByLabel, ByIndex)):
        return selector
    if _is_label(selector):
        return ByLabel((str(selector),))
    if isinstance(selector, (dict, set, frozenset)) or _is_number(selector):
        raise InvalidSelectorError(
            f"selector must be a sequence of ids or positions, got {type(selector).__name__}"
        )

    try:
        values = list(selector)
    except TypeError as e:
        raise InvalidSelectorError(
            f"selector must be a sequence of ids or positions, got {type(selector).__name__}"
        ) from e

    if len(values) == 0:
        return AllAxis()

    if all(_is_label(v) for v in values):
        return ByLabel(tuple(str(v) for v in values))

    if all(_is_number(v) for v in values):
        whole = is_whole_number(values, tol)
        if not whole.all():
            bad = [v for v, ok in zip(values, whole) if not ok]
            raise InvalidSelectorError(
                f"positional selectors must be integer-valued, got {bad[:5]}"
            )
        return ByIndex(tuple(int(round(float(v))) for v in values))

    kinds = sorted({type(v).__name__ for v in values})
    raise InvalidSelectorError(
        f"selector must contain only string ids or only integer positions, got types {kinds}"
    )


def resolve(
    selector: Any,
    reference_ids: pd.Index,
    axis_name: str = "row",
    tol: Optional[float] = None,
) -> Tuple[pd.Index, np.ndarray]:
    """
    Resolve a selector against an axis.

    Args:
        selector: Anything accepted by ``parse_selector``
        reference_ids: The axis' id vector
        axis_name: Used in warning messages ("row", "col")
        tol: Integer tolerance for float positions

    Returns:
        (ordered_ids, ordered_indices): the matched ids and their positions in
        ``reference_ids``, in selector order

    Raises:
        InvalidSelectorError: See ``parse_selector``
    """
    reference_ids = pd.Index(reference_ids)
    parsed = parse_selector(selector, tol=tol)
    n = len(reference_ids)

    if isinstance(parsed, AllAxis):
        idx = np.arange(n, dtype=np.intp)

    elif isinstance(parsed, ByLabel):
        if reference_ids.is_unique:
            positions = reference_ids.get_indexer(list(parsed.labels))
        else:
            lookup = {}
            for pos, label in enumerate(reference_ids):
                lookup.setdefault(label, pos)
            positions = np.array([lookup.get(label, -1) for label in parsed.labels], dtype=np.intp)
        positions = np.asarray(positions, dtype=np.intp)
        found = positions >= 0
        if not found.all():
            missing = [label for label, ok in zip(parsed.labels, found) if not ok]
            warnings.warn(
                f"the following {axis_name} ids were not found:\n" + "\n".join(missing),
                UnmatchedIdWarning,
                stacklevel=3,
            )
        idx = positions[found]

    else:
        positions = np.asarray(parsed.indices, dtype=np.intp)
        in_range = (positions >= 0) & (positions < n)
        if not in_range.all():
            bad = positions[~in_range].tolist()
            warnings.warn(
                f"the following {axis_name} positions are out of range for an axis of "
                f"length {n}: {bad}",
                UnmatchedIdWarning,
                stacklevel=3,
            )
        idx = positions[in_range]

    return reference_ids[idx], idx

"""Shared utilities."""

from annomatrix.utils.fileio import atomic_write_text

__all__ = [
    'atomic_write_text',
]

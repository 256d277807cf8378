"""
Atomic file-write utilities.

Prevents corrupted output when a process is interrupted mid-write by
writing to a temporary file in the same directory and then performing an
atomic ``os.replace()`` (POSIX rename guarantee).
"""

from __future__ import annotations

import os
import tempfile


def atomic_write_text(path: str | os.PathLike, content: str) -> None:
    """Write *content* as text atomically via temp-file + rename.

    Parent directories are created when missing. Readers see either the old
    file or the new one, never a partially written GCT or config file.

    Parameters
    ----------
    path:
        Destination file path.
    content:
        Text content to write.
    """
    path = str(path)
    dir_path = os.path.dirname(path) or "."
    os.makedirs(dir_path, exist_ok=True)
    tmp_path: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", dir=dir_path, suffix=".tmp", delete=False, encoding="utf-8", newline=""
        ) as tmp:
            tmp_path = tmp.name
            tmp.write(content)
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any failure
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise

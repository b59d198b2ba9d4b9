"""Filesystem helpers."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

TEMP_PREFIX = ".tmp_"


def atomic_write(path: Path, data: str) -> None:
    """
    Write text to ``path`` via a temp file in the same directory + rename.

    ``os.replace`` is atomic on POSIX, so readers see either the old or the
    new content, never a partial file. The temp file is removed on failure.
    """
    fd, tmp_path = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise

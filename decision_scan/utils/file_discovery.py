"""Source file reading for the analyzers.

Resolves project-relative paths and decodes file content with the same
encoding fallbacks for every caller.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# Encodings to attempt when reading source files, in order.
_ENCODINGS: tuple[str, ...] = ("utf-8", "utf-8-sig", "latin-1")


def resolve_source_path(project_root: str | Path, file_path: str | Path) -> Path:
    """Absolute path of *file_path*, taken relative to *project_root*."""
    return (Path(project_root) / file_path).resolve()


def read_source_file(file_path: str | Path) -> str:
    """Read and return the text content of *file_path*.

    Tries multiple encodings to handle files written on different
    platforms.  ``OSError`` (missing file, permissions) propagates so the
    caller can decide whether to skip the file.
    """
    raw = Path(file_path).read_bytes()
    for encoding in _ENCODINGS[:-1]:
        try:
            return raw.decode(encoding)
        except UnicodeDecodeError:
            continue
    logger.warning("Falling back to %s for %s", _ENCODINGS[-1], file_path)
    return raw.decode(_ENCODINGS[-1])

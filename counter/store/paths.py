"""Counter file naming and path resolution."""

from __future__ import annotations

import hashlib
from pathlib import Path

from counter.constants import COUNTER_FILE_PREFIX, COUNTER_FILE_SUFFIX, DIRECTORY_MODE
from counter.errors import DirectoryMissing

# Hex-digest slices reassembled into the file token; changing them orphans existing counters.
_TOKEN_SLICES: tuple[tuple[int, int], ...] = ((96, 99), (39, 45), (63, 69), (93, 99), (69, 72))


def counter_file_name(name: str) -> str:
    """Return the stable hidden file name for a named counter."""

    digest = hashlib.sha512(name.encode("utf-8")).hexdigest()
    token = "".join(digest[start:end] for start, end in _TOKEN_SLICES)
    return f"{COUNTER_FILE_PREFIX}{token}{COUNTER_FILE_SUFFIX}"


def ensure_directory(directory: Path, force: bool = False) -> Path:
    """Return ``directory``, creating it only when ``force`` is set."""

    if directory.is_dir():
        return directory
    if not force:
        raise DirectoryMissing(directory)
    directory.mkdir(mode=DIRECTORY_MODE, parents=True, exist_ok=True)
    return directory


def resolve_symlink(path: Path) -> Path:
    """Return the real path behind ``path``, or ``path`` itself if it cannot be resolved."""

    try:
        return path.resolve(strict=True)
    except (OSError, RuntimeError):
        return path


def resolve_counter_path(directory: Path, *, name: str | None = None, file: str | None = None) -> Path:
    """Locate the file backing a counter.

    An explicit ``file`` wins: absolute paths are used as given, relative ones
    live under ``directory``. Otherwise the file name is derived from ``name``.
    """

    base = resolve_symlink(directory)
    if file:
        candidate = Path(file).expanduser()
        if not candidate.is_absolute():
            candidate = base / candidate
    elif name:
        candidate = base / counter_file_name(name)
    else:
        raise ValueError("a counter name or file is required")
    return resolve_symlink(candidate)

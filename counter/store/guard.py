"""Read-only permission guard for counter files.

The guard makes accidental writes by other programs fail visibly. It is
advisory protection against non-cooperating writers, not a lock: two counter
invocations racing on one file still lose updates.
"""

from __future__ import annotations

import os
import stat
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from counter.constants import GUARD_MODE, WRITABLE_MODE, WRITE_BITS
from counter.errors import PermissionGuardFailure
from counter.lib.logger import get_logger

logger = get_logger(__name__)


def lift_guard(path: Path) -> int | None:
    """Make ``path`` owner-writable and return its previous mode (None if absent)."""

    try:
        original = stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise PermissionGuardFailure(path, "inspect") from exc

    try:
        os.chmod(path, WRITABLE_MODE)
    except OSError as exc:
        raise PermissionGuardFailure(path, "lift") from exc
    return original


def apply_guard(path: Path, original_mode: int | None = None) -> int:
    """Make ``path`` read-only, keeping the non-write bits of ``original_mode``."""

    mode = GUARD_MODE if original_mode is None else (original_mode & ~WRITE_BITS) | stat.S_IRUSR
    try:
        os.chmod(path, mode)
    except OSError as exc:
        raise PermissionGuardFailure(path, "apply") from exc
    return mode


@contextmanager
def unguarded(path: Path) -> Iterator[int | None]:
    """Lift the guard for the duration of the block, then reapply it.

    Failing to lift is fatal. Failing to reapply is logged as a warning since
    the content has already been written by then.
    """

    original_mode = lift_guard(path)
    try:
        yield original_mode
    finally:
        if path.exists():
            try:
                apply_guard(path, original_mode)
            except PermissionGuardFailure as exc:
                logger.warning(
                    "counter.guard.failed",
                    extra={"path": str(path), "reason": str(exc.__cause__ or exc)},
                )

"""Storage helpers for reading, writing and deleting counter files."""

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path

from pydantic import ValidationError

from counter.constants import INT64_MAX, INT64_MIN
from counter.errors import PermissionGuardFailure, ReadError, WriteError
from counter.lib.logger import get_logger
from counter.store.guard import lift_guard, unguarded
from counter.store.paths import ensure_directory
from counter.store.schemas import Counter

logger = get_logger(__name__)

_LEGACY_VALUE = re.compile(r"[+-]?\d+")


def read_counter(path: Path) -> Counter:
    """Return the counter stored at ``path``; a missing file is a fresh zero counter."""

    try:
        data = path.read_bytes()
    except FileNotFoundError:
        return Counter(value=0, path=str(path))
    except OSError as exc:
        raise ReadError(f"failed to read counter file {path}") from exc

    try:
        raw = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ReadError(f"counter file {path} is not valid UTF-8") from exc

    try:
        counter = Counter.model_validate_json(raw)
    except ValidationError as exc:
        counter = _read_legacy(path, raw, exc)
    return counter.model_copy(update={"path": str(path)})


def _read_legacy(path: Path, raw: str, structured_error: ValidationError) -> Counter:
    """Decode a pre-JSON record holding nothing but a decimal integer."""

    text = raw.strip()
    if not _LEGACY_VALUE.fullmatch(text):
        raise ReadError(f"invalid counter value in {path}") from structured_error
    value = int(text)
    if not INT64_MIN <= value <= INT64_MAX:
        raise ReadError(f"counter value in {path} is outside the 64-bit range") from structured_error
    logger.info("counter.store.legacy_read", extra={"path": str(path)})
    return Counter(value=value, path=str(path))


def write_counter(counter: Counter, *, force: bool = False) -> None:
    """Persist the full record to ``counter.path`` and leave the file read-only."""

    if not counter.path:
        raise WriteError("counter has no backing path")
    path = Path(counter.path)
    ensure_directory(path.parent, force)

    payload = counter.model_dump_json(indent=2)
    if not payload:
        raise WriteError(f"refusing to write an empty record to {path}")

    try:
        with unguarded(path):
            _atomic_write_text(path, payload)
    except PermissionGuardFailure as exc:
        raise WriteError(f"could not make {path} writable") from exc
    logger.info("counter.store.write", extra={"path": str(path), "value": counter.value})


def _atomic_write_text(path: Path, content: str) -> None:
    with tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", delete=False, dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    ) as tmp:
        temp_path = Path(tmp.name)
        try:
            written = tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
        except OSError as exc:
            tmp.close()
            temp_path.unlink(missing_ok=True)
            raise WriteError(f"failed to write counter file {path}") from exc

    if written == 0 or written != len(content):
        temp_path.unlink(missing_ok=True)
        raise WriteError(f"only wrote {written} of {len(content)} characters to {path}")

    try:
        os.replace(temp_path, path)
    except OSError as exc:
        temp_path.unlink(missing_ok=True)
        raise WriteError(f"failed to replace counter file {path}") from exc


def delete_counter(path: Path) -> bool:
    """Remove the counter file after lifting its guard. Returns False if absent."""

    try:
        if lift_guard(path) is None:
            return False
    except PermissionGuardFailure as exc:
        raise WriteError(f"could not make {path} removable") from exc

    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise WriteError(f"failed to delete counter file {path}") from exc
    logger.info("counter.store.delete", extra={"path": str(path)})
    return True

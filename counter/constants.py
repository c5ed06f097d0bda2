"""Shared constants for counter defaults and on-disk conventions."""

from __future__ import annotations

import stat

VERSION: str = "2.0.0"

DEFAULT_COUNTER_DIR: str = "/tmp/.counters"
DEFAULT_QUANTITY: int = 1

INT64_MIN: int = -(2**63)
INT64_MAX: int = 2**63 - 1

# Calendar cycles without an explicit time of day fire at this local hour.
ANCHOR_HOUR: int = 3

COUNTER_FILE_PREFIX: str = ".named."
COUNTER_FILE_SUFFIX: str = ".counter"

GUARD_MODE: int = stat.S_IRUSR | stat.S_IRGRP | stat.S_IROTH
WRITABLE_MODE: int = stat.S_IRUSR | stat.S_IWUSR | stat.S_IRGRP | stat.S_IROTH
WRITE_BITS: int = stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH
DIRECTORY_MODE: int = 0o755

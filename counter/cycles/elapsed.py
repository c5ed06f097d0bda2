"""Elapsed-interval reset decisions.

A counter with a cycle is due for reset once the time since its file was last
written reaches the cycle's interval. This is independent of calendar alignment:
a daily counter written at 23:59 is not due at 00:00.
"""

from __future__ import annotations

import os
import re
from datetime import datetime
from pathlib import Path

from counter.errors import InvalidParameter, ReadError, UnknownCycleKind

MINUTES_PER_DAY = 24 * 60

INTERVAL_MINUTES: dict[str, int] = {
    "unas": 1,
    "tres": 3,
    "quinhora": 5,
    "sex": 6,
    "novem": 9,
    "quarhora": 15,
    "semhora": 30,
    "trihora": 45,
    "hourly": 60,
    "daily": MINUTES_PER_DAY,
    "weekly": 7 * MINUTES_PER_DAY,
    "biweekly": 14 * MINUTES_PER_DAY,
    "monthly": 30 * MINUTES_PER_DAY,
    "bimonthly": 60 * MINUTES_PER_DAY,
    "quarterly": 90 * MINUTES_PER_DAY,
    "semiannual": 180 * MINUTES_PER_DAY,
    "annually": 365 * MINUTES_PER_DAY,
}

EVERY_CYCLE = "every"
_MINUTE_SUFFIX = "min"
_DIGITS = re.compile(r"\d+")


def interval_minutes(cycle: str, cycle_in: str = "") -> int:
    """Return the reset interval in minutes for ``cycle``.

    Named cycles come from :data:`INTERVAL_MINUTES`. ``every`` takes the minute
    count from ``cycle_in``; a cycle such as ``90min`` carries it in its name.
    """

    kind = cycle.strip().lower()
    if kind in INTERVAL_MINUTES:
        return INTERVAL_MINUTES[kind]

    if kind == EVERY_CYCLE:
        return _positive_minutes(cycle, cycle_in, cycle_in.strip())
    if kind.endswith(_MINUTE_SUFFIX):
        numeral = kind[: -len(_MINUTE_SUFFIX)]
        if _DIGITS.fullmatch(numeral):
            return _positive_minutes(cycle, cycle_in, numeral)
        raise InvalidParameter(cycle, cycle_in, "expected a whole number of minutes before 'min'")

    raise UnknownCycleKind(cycle)


def _positive_minutes(cycle: str, cycle_in: str, text: str) -> int:
    if not _DIGITS.fullmatch(text):
        raise InvalidParameter(cycle, cycle_in, "expected a whole number of minutes")
    minutes = int(text)
    if minutes < 1:
        raise InvalidParameter(cycle, cycle_in, "interval must be at least one minute")
    return minutes


def is_due(last_modified: datetime, cycle: str, cycle_in: str = "", now: datetime | None = None) -> bool:
    """Return True once at least one cycle interval has elapsed since ``last_modified``.

    Naive datetimes are interpreted as local time.
    """

    minutes = interval_minutes(cycle, cycle_in)
    current = datetime.now() if now is None else now
    elapsed_seconds = current.timestamp() - last_modified.timestamp()
    return elapsed_seconds / 60 >= minutes


def should_reset(path: Path, cycle: str, cycle_in: str = "", now: datetime | None = None) -> bool:
    """Decide from the file's modification time whether its counter is due.

    A missing file is always due. Any other filesystem error is raised as
    :class:`ReadError`.
    """

    try:
        mtime = os.stat(path).st_mtime
    except FileNotFoundError:
        return True
    except OSError as exc:
        raise ReadError(f"failed to inspect counter file {path}") from exc
    return is_due(datetime.fromtimestamp(mtime), cycle, cycle_in, now=now)

"""Forward-looking cycle scheduling.

``next_occurrence`` answers *when* a calendar cycle fires next. It reasons in
local wall-clock time and is used for display only; the decision to zero a
counter is made by :mod:`counter.cycles.elapsed`.
"""

from __future__ import annotations

import calendar
import re
from collections.abc import Callable
from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

from counter.constants import ANCHOR_HOUR
from counter.errors import InvalidParameter, UnknownCycleKind

CALENDAR_CYCLES: tuple[str, ...] = ("hourly", "daily", "weekly", "monthly", "annually")

WEEKDAYS: dict[str, int] = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}

_TIME_TOKENS: dict[str, tuple[int, int]] = {
    "noon": (12, 0),
    "midnight": (0, 0),
}

_SMALL_INT = re.compile(r"\d{1,2}")
_CLOCK_TIME = re.compile(r"\d{2}:\d{2}")


def next_occurrence(cycle: str, cycle_in: str, now: datetime | None = None) -> datetime:
    """Return the next instant, strictly after ``now``, at which ``cycle`` fires.

    ``now`` defaults to the current local time; a naive value is taken as
    local wall-clock time. The result is timezone-aware in the local zone.

    Raises:
        InvalidParameter: if ``cycle_in`` is malformed for the cycle.
        UnknownCycleKind: if ``cycle`` is not a calendar cycle.
    """

    step = _STEPS.get(cycle.strip().lower())
    if step is None:
        raise UnknownCycleKind(cycle)

    current = (datetime.now() if now is None else now).astimezone()
    candidate = step(cycle, cycle_in, current.replace(tzinfo=None))
    while True:
        # A wall time repeated by a DST fall-back maps to two instants.
        for fold in (0, 1):
            result = candidate.replace(fold=fold).astimezone()
            if result > current:
                return result
        candidate = step(cycle, cycle_in, candidate)


def _small_int(cycle: str, cycle_in: str, text: str, low: int, high: int, label: str) -> int:
    if not _SMALL_INT.fullmatch(text):
        raise InvalidParameter(cycle, cycle_in, f"{label} must be a number")
    value = int(text)
    if not low <= value <= high:
        raise InvalidParameter(cycle, cycle_in, f"{label} must be between {low} and {high}")
    return value


def _next_hourly(cycle: str, cycle_in: str, wall: datetime) -> datetime:
    minutes = _small_int(cycle, cycle_in, cycle_in.strip(), 0, 59, "minutes past the hour")
    candidate = wall.replace(minute=0, second=0, microsecond=0) + timedelta(minutes=minutes)
    if candidate <= wall:
        candidate += timedelta(hours=1)
    return candidate


def _next_daily(cycle: str, cycle_in: str, wall: datetime) -> datetime:
    token = cycle_in.strip().lower()
    if token in _TIME_TOKENS:
        hour, minute = _TIME_TOKENS[token]
    else:
        if not _CLOCK_TIME.fullmatch(token):
            raise InvalidParameter(cycle, cycle_in, "expected noon, midnight or HH:MM")
        try:
            parsed = datetime.strptime(token, "%H:%M")
        except ValueError as exc:
            raise InvalidParameter(cycle, cycle_in, "expected noon, midnight or HH:MM") from exc
        hour, minute = parsed.hour, parsed.minute

    candidate = wall.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if candidate <= wall:
        candidate += timedelta(days=1)
    return candidate


def _next_weekly(cycle: str, cycle_in: str, wall: datetime) -> datetime:
    weekday = WEEKDAYS.get(cycle_in.strip().lower())
    if weekday is None:
        raise InvalidParameter(cycle, cycle_in, "expected a weekday name")

    candidate = wall.replace(hour=ANCHOR_HOUR, minute=0, second=0, microsecond=0)
    while candidate.weekday() != weekday:
        candidate += timedelta(days=1)
    if candidate <= wall:
        candidate += timedelta(days=7)
    return candidate


def _month_anchor(year: int, month: int, day: int) -> datetime:
    """Return ``day`` of the month at the anchor hour, clamped to the month's length."""

    last_day = calendar.monthrange(year, month)[1]
    return datetime(year, month, min(day, last_day), ANCHOR_HOUR)


def _next_monthly(cycle: str, cycle_in: str, wall: datetime) -> datetime:
    day = _small_int(cycle, cycle_in, cycle_in.strip(), 1, 31, "day of month")

    candidate = _month_anchor(wall.year, wall.month, day)
    if candidate <= wall:
        following = datetime(wall.year, wall.month, 1) + relativedelta(months=1)
        candidate = _month_anchor(following.year, following.month, day)
    return candidate


def _next_annually(cycle: str, cycle_in: str, wall: datetime) -> datetime:
    parts = cycle_in.strip().split("-")
    if len(parts) != 2:
        raise InvalidParameter(cycle, cycle_in, "expected MM-DD")
    month = _small_int(cycle, cycle_in, parts[0], 1, 12, "month")
    # 2000 is a leap year, so 02-29 is accepted and clamped in other years.
    longest = calendar.monthrange(2000, month)[1]
    day = _small_int(cycle, cycle_in, parts[1], 1, longest, "day")

    candidate = _month_anchor(wall.year, month, day)
    if candidate <= wall:
        candidate = _month_anchor(wall.year + 1, month, day)
    return candidate


_STEPS: dict[str, Callable[[str, str, datetime], datetime]] = {
    "hourly": _next_hourly,
    "daily": _next_daily,
    "weekly": _next_weekly,
    "monthly": _next_monthly,
    "annually": _next_annually,
}

"""Cycle resolution: calendar scheduling and elapsed-interval reset checks."""

from counter.cycles.elapsed import INTERVAL_MINUTES, interval_minutes, is_due, should_reset
from counter.cycles.schedule import CALENDAR_CYCLES, next_occurrence

__all__ = [
    "CALENDAR_CYCLES",
    "INTERVAL_MINUTES",
    "interval_minutes",
    "is_due",
    "next_occurrence",
    "should_reset",
]

"""Durable named counters with cycle-based automatic resets."""

from counter.constants import VERSION

__version__ = VERSION

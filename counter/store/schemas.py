"""Pydantic schema for the persisted counter record."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from counter.constants import INT64_MAX, INT64_MIN

_SUB_MICROSECOND = re.compile(r"(\.\d{6})\d+")


def _now() -> datetime:
    return datetime.now().astimezone()


class Counter(BaseModel):
    """A named integer counter and the metadata stored alongside it.

    Records written by the 1.x tool used capitalised keys; they are accepted on
    read and rewritten with the snake_case names.
    """

    model_config = ConfigDict(extra="forbid")

    value: int = Field(ge=INT64_MIN, le=INT64_MAX, validation_alias=AliasChoices("value", "Value"))
    path: str = Field(default="", validation_alias=AliasChoices("path", "Path"))
    created_at: datetime = Field(
        default_factory=_now, validation_alias=AliasChoices("created_at", "CreatedAt")
    )
    cycle: str = Field(default="", validation_alias=AliasChoices("cycle", "Cycle"))
    cycle_in: str = Field(default="", validation_alias=AliasChoices("cycle_in", "CycleIn"))

    @field_validator("created_at", mode="before")
    @classmethod
    def _truncate_nanoseconds(cls, value: Any) -> Any:
        # 1.x timestamps carry nanoseconds; keep microseconds.
        if isinstance(value, str):
            return _SUB_MICROSECOND.sub(r"\1", value, count=1)
        return value

    @property
    def has_cycle(self) -> bool:
        return bool(self.cycle)

    def with_value(self, value: int) -> "Counter":
        """Return a copy holding ``value`` saturated to the signed 64-bit range."""

        return self.model_copy(update={"value": saturate(value)})


def saturate(value: int) -> int:
    """Clamp ``value`` to the signed 64-bit range instead of wrapping."""

    return max(INT64_MIN, min(INT64_MAX, value))

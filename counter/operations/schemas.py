"""Pydantic schemas for counter operations."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from counter.constants import INT64_MAX, INT64_MIN
from counter.store.schemas import Counter

Action = Literal["show", "add", "subtract", "set", "reset", "delete", "cycle", "remove_cycle"]


class OperationRequest(BaseModel):
    """A single invocation's worth of requested changes to one counter."""

    name: str | None = None
    file: str | None = None
    add: bool = False
    subtract: bool = False
    set_to: int | None = Field(default=None, ge=INT64_MIN, le=INT64_MAX)
    quantity: int | None = Field(default=None, ge=INT64_MIN, le=INT64_MAX)
    reset: bool = False
    delete: bool = False
    confirm: bool = False
    cycle: str | None = None
    cycle_in: str = ""
    remove_cycle: bool = False

    @field_validator("name", "file", "cycle")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None

    @model_validator(mode="after")
    def require_identity(self) -> "OperationRequest":
        if not self.name and not self.file:
            raise ValueError("a counter name or file is required")
        return self

    @property
    def label(self) -> str:
        return self.name or self.file or ""


class OperationResult(BaseModel):
    """Outcome of running an operation against a counter."""

    counter: Counter
    action: Action
    message: str | None = None
    auto_reset: bool = False
    deleted: bool = False
    next_reset_at: datetime | None = None

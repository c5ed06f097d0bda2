"""Counter configuration loading via Pydantic settings."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from counter.constants import DEFAULT_COUNTER_DIR, DEFAULT_QUANTITY, INT64_MAX, INT64_MIN
from counter.errors import ConfigurationError


class Settings(BaseSettings):
    """Runtime configuration sourced from COUNTER_* environment variables."""

    counter_dir: Path = Field(default=Path(DEFAULT_COUNTER_DIR), alias="COUNTER_DIR")
    quantity: int = Field(default=DEFAULT_QUANTITY, ge=INT64_MIN, le=INT64_MAX, alias="COUNTER_QUANTITY")
    use_force: bool = Field(default=False, alias="COUNTER_USE_FORCE")
    always_yes: bool = Field(default=False, alias="COUNTER_ALWAYS_YES")
    never_add: bool = Field(default=False, alias="COUNTER_NEVER_ADD")
    never_subtract: bool = Field(default=False, alias="COUNTER_NEVER_SUBTRACT")
    never_set_to: bool = Field(default=False, alias="COUNTER_NEVER_SET_TO")
    never_reset: bool = Field(default=False, alias="COUNTER_NEVER_RESET")
    never_delete: bool = Field(default=False, alias="COUNTER_NEVER_DELETE")
    never_cycle: bool = Field(default=False, alias="COUNTER_NEVER_CYCLE")
    never_delete_cycle: bool = Field(default=False, alias="COUNTER_NEVER_DELETE_CYCLE")
    log_level: str = Field(default="WARNING", alias="COUNTER_LOG_LEVEL")

    model_config = {
        "extra": "ignore",
        "frozen": True,
        "populate_by_name": True,
    }

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if not isinstance(logging.getLevelName(normalized), int):
            raise ValueError(f"unknown log level {value!r}")
        return normalized

    def as_env(self) -> dict[str, str]:
        """Render the settings back as ``{VARIABLE: value}`` for display."""

        rendered: dict[str, str] = {}
        for name, field in type(self).model_fields.items():
            value = getattr(self, name)
            if isinstance(value, bool):
                text = "true" if value else "false"
            else:
                text = str(value)
            rendered[field.alias or name] = text
        return rendered


def load_settings(**overrides: object) -> Settings:
    """Build settings from the environment, raising ConfigurationError on bad input."""

    try:
        return Settings(**overrides)  # type: ignore[arg-type]
    except ValidationError as exc:
        aliases = {name: field.alias or name for name, field in Settings.model_fields.items()}
        variables = sorted(
            {aliases.get(str(error["loc"][0]), str(error["loc"][0])) for error in exc.errors() if error.get("loc")}
        )
        raise ConfigurationError(f"invalid configuration for {', '.join(variables) or 'settings'}") from exc

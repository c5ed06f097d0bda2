"""Typed failures raised by the counter core."""

from __future__ import annotations

from pathlib import Path


class CounterError(RuntimeError):
    """Base class for every failure the counter surfaces to its caller."""


class InvalidParameter(CounterError):
    """Raised when a cycle parameter is malformed or out of range."""

    def __init__(self, cycle: str, cycle_in: str, reason: str) -> None:
        self.cycle = cycle
        self.cycle_in = cycle_in
        self.reason = reason
        super().__init__(f"invalid parameter {cycle_in!r} for cycle {cycle!r}: {reason}")


class UnknownCycleKind(CounterError):
    """Raised when a cycle name is not recognised."""

    def __init__(self, cycle: str) -> None:
        self.cycle = cycle
        super().__init__(f"unknown cycle: {cycle!r}")


class ReadError(CounterError):
    """Raised when a counter file cannot be read or decoded."""


class WriteError(CounterError):
    """Raised when a counter record could not be persisted."""


class DirectoryMissing(CounterError):
    """Raised when the counter directory does not exist and force is off."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory
        super().__init__(f"directory {directory} does not exist")


class PermissionGuardFailure(CounterError):
    """Raised when the read-only guard on a counter file cannot be toggled."""

    def __init__(self, path: Path, action: str) -> None:
        self.path = path
        self.action = action
        super().__init__(f"could not {action} the read-only guard on {path}")


class ConfigurationError(CounterError):
    """Raised when environment configuration fails validation."""


class OperationRefused(CounterError):
    """Raised when a COUNTER_NEVER_* policy blocks the requested operation."""

    def __init__(self, operation: str, variable: str) -> None:
        self.operation = operation
        self.variable = variable
        super().__init__(f"{operation} operation is disabled by {variable}")


class ConfirmationRequired(CounterError):
    """Raised when a destructive operation was requested without confirmation."""

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        super().__init__(message)


def describe(exc: BaseException) -> str:
    """Render an exception and its ``__cause__`` chain as one line."""

    parts: list[str] = []
    current: BaseException | None = exc
    while current is not None:
        text = str(current) or type(current).__name__
        if text not in parts:
            parts.append(text)
        current = current.__cause__
    return ": ".join(parts)

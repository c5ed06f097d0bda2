"""Counter operation dispatch: read, auto-reset, mutate, persist."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from counter.config import Settings
from counter.cycles import CALENDAR_CYCLES, interval_minutes, next_occurrence, should_reset
from counter.errors import ConfirmationRequired, OperationRefused
from counter.lib.logger import get_logger
from counter.operations.schemas import Action, OperationRequest, OperationResult
from counter.store.paths import ensure_directory, resolve_counter_path
from counter.store.schemas import Counter
from counter.store.storage import delete_counter, read_counter, write_counter

logger = get_logger(__name__)


def run_operation(request: OperationRequest, settings: Settings) -> OperationResult:
    """Apply ``request`` to its counter and return the resulting state."""

    path = resolve_counter_path(settings.counter_dir, name=request.name, file=request.file)
    ensure_directory(path.parent, settings.use_force)

    counter = read_counter(path)
    auto_reset = False
    if counter.has_cycle and counter.value != 0 and should_reset(path, counter.cycle, counter.cycle_in):
        logger.info(
            "counter.cycle.auto_reset",
            extra={"path": str(path), "cycle": counter.cycle, "previous": counter.value},
        )
        counter = counter.with_value(0)
        auto_reset = True

    confirmed = request.confirm or settings.always_yes

    if request.delete:
        return _delete(request, settings, counter, confirmed)

    action: Action = "show"
    message: str | None = None
    next_reset_at: datetime | None = None

    if request.remove_cycle:
        _refuse_if(settings.never_delete_cycle, "remove cycle", "COUNTER_NEVER_DELETE_CYCLE")
        counter = counter.model_copy(update={"cycle": "", "cycle_in": ""})
        action = "remove_cycle"
        message = f"cycle removed from {request.label}"

    if request.cycle:
        _refuse_if(settings.never_cycle, "cycle", "COUNTER_NEVER_CYCLE")
        next_reset_at = validate_cycle(request.cycle, request.cycle_in)
        counter = counter.model_copy(update={"cycle": request.cycle, "cycle_in": request.cycle_in})
        action = "cycle"
        message = _describe_cycle(request)

    value_action = _apply_value_change(request, settings, counter, confirmed)
    if value_action is not None:
        action, counter = value_action
        message = None

    if next_reset_at is None and counter.has_cycle:
        next_reset_at = _display_next_reset(counter)

    if action != "show" or auto_reset:
        write_counter(counter, force=settings.use_force)

    return OperationResult(
        counter=counter,
        action=action,
        message=message,
        auto_reset=auto_reset,
        next_reset_at=next_reset_at,
    )


def validate_cycle(cycle: str, cycle_in: str) -> datetime | None:
    """Check that both reset algorithms accept the cycle; return its next calendar firing.

    Calendar cycles configured without a parameter have no calendar firing and
    reset purely on elapsed time.
    """

    interval_minutes(cycle, cycle_in)
    if cycle.strip().lower() in CALENDAR_CYCLES and cycle_in.strip():
        return next_occurrence(cycle, cycle_in)
    return None


def _display_next_reset(counter: Counter) -> datetime | None:
    if counter.cycle.strip().lower() not in CALENDAR_CYCLES or not counter.cycle_in.strip():
        return None
    return next_occurrence(counter.cycle, counter.cycle_in)


def _describe_cycle(request: OperationRequest) -> str:
    cycle = request.cycle or ""
    if request.cycle_in:
        return f"counter {request.label} will reset {cycle} at {request.cycle_in}"
    return f"counter {request.label} will reset {cycle}"


def _refuse_if(disabled: bool, operation: str, variable: str) -> None:
    if disabled:
        raise OperationRefused(operation, variable)


def _delete(request: OperationRequest, settings: Settings, counter: Counter, confirmed: bool) -> OperationResult:
    _refuse_if(settings.never_delete, "delete", "COUNTER_NEVER_DELETE")
    if not confirmed:
        raise ConfirmationRequired(
            "delete",
            f"deleting counter {request.label} ({counter.value}) when you re-run with --yes",
        )
    removed = delete_counter(Path(counter.path))
    return OperationResult(
        counter=counter,
        action="delete",
        message=f"counter {request.label} deleted",
        deleted=removed,
    )


def _apply_value_change(
    request: OperationRequest,
    settings: Settings,
    counter: Counter,
    confirmed: bool,
) -> tuple[Action, Counter] | None:
    if request.reset:
        _refuse_if(settings.never_reset, "reset", "COUNTER_NEVER_RESET")
        if not confirmed:
            raise ConfirmationRequired(
                "reset",
                f"will reset counter {request.label} to 0 after you re-run with --yes",
            )
        return "reset", counter.with_value(0)

    if request.set_to is not None:
        _refuse_if(settings.never_set_to, "set", "COUNTER_NEVER_SET_TO")
        return "set", counter.with_value(request.set_to)

    if not request.add and not request.subtract:
        return None

    quantity = settings.quantity if request.quantity is None else request.quantity
    action: Action = "add"
    if request.add:
        _refuse_if(settings.never_add, "add", "COUNTER_NEVER_ADD")
        counter = counter.with_value(counter.value + quantity)
    if request.subtract:
        _refuse_if(settings.never_subtract, "subtract", "COUNTER_NEVER_SUBTRACT")
        counter = counter.with_value(counter.value - quantity)
        action = "subtract" if not request.add else action
    return action, counter

"""Tests for counter operation dispatch."""

from __future__ import annotations

import json
import os
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from counter.config import Settings
from counter.constants import INT64_MAX, INT64_MIN
from counter.errors import (
    ConfirmationRequired,
    DirectoryMissing,
    InvalidParameter,
    OperationRefused,
    UnknownCycleKind,
)
from counter.operations.schemas import OperationRequest
from counter.operations.service import run_operation
from counter.store.paths import counter_file_name
from counter.store.storage import read_counter


def _run(settings: Settings, **fields: object):
    fields.setdefault("name", "hits")
    return run_operation(OperationRequest(**fields), settings)


def _path(settings: Settings, name: str = "hits") -> Path:
    return settings.counter_dir.resolve() / counter_file_name(name)


def _age(path: Path, delta: timedelta) -> None:
    stamp = (datetime.now() - delta).timestamp()
    os.utime(path, (stamp, stamp))


def test_show_missing_counter_does_not_create_file(settings: Settings) -> None:
    result = _run(settings)

    assert result.action == "show"
    assert result.counter.value == 0
    assert not _path(settings).exists()


def test_add_and_subtract_persist(settings: Settings) -> None:
    assert _run(settings, add=True).counter.value == 1
    assert _run(settings, add=True).counter.value == 2
    assert _run(settings, subtract=True, quantity=5).counter.value == -3
    assert read_counter(_path(settings)).value == -3


def test_quantity_defaults_to_settings(settings: Settings) -> None:
    stepped = settings.model_copy(update={"quantity": 10})

    assert _run(stepped, add=True).counter.value == 10


def test_arithmetic_saturates(settings: Settings) -> None:
    _run(settings, set_to=INT64_MAX)
    assert _run(settings, add=True).counter.value == INT64_MAX

    _run(settings, set_to=INT64_MIN)
    assert _run(settings, subtract=True).counter.value == INT64_MIN


def test_set_overrides_add(settings: Settings) -> None:
    result = _run(settings, set_to=1000, add=True)

    assert result.action == "set"
    assert result.counter.value == 1000


def test_reset_requires_confirmation(settings: Settings) -> None:
    _run(settings, set_to=20)

    with pytest.raises(ConfirmationRequired) as excinfo:
        _run(settings, reset=True)
    assert "re-run with --yes" in str(excinfo.value)
    assert read_counter(_path(settings)).value == 20

    assert _run(settings, reset=True, confirm=True).counter.value == 0
    assert read_counter(_path(settings)).value == 0


def test_always_yes_confirms(settings: Settings) -> None:
    _run(settings, set_to=4)
    agreeable = settings.model_copy(update={"always_yes": True})

    assert _run(agreeable, reset=True).counter.value == 0


@pytest.mark.parametrize(
    ("flag", "fields"),
    [
        ("never_add", {"add": True}),
        ("never_subtract", {"subtract": True}),
        ("never_set_to", {"set_to": 3}),
        ("never_reset", {"reset": True, "confirm": True}),
        ("never_delete", {"delete": True, "confirm": True}),
        ("never_cycle", {"cycle": "daily", "cycle_in": "noon"}),
        ("never_delete_cycle", {"remove_cycle": True}),
    ],
)
def test_never_policies_refuse(settings: Settings, flag: str, fields: dict[str, object]) -> None:
    restricted = settings.model_copy(update={flag: True})

    with pytest.raises(OperationRefused):
        _run(restricted, **fields)


def test_delete_removes_counter(settings: Settings) -> None:
    _run(settings, add=True)

    with pytest.raises(ConfirmationRequired):
        _run(settings, delete=True)
    assert _path(settings).exists()

    result = _run(settings, delete=True, confirm=True)

    assert result.deleted is True
    assert result.message == "counter hits deleted"
    assert not _path(settings).exists()
    assert _run(settings).counter.value == 0


def test_configure_cycle(settings: Settings) -> None:
    result = _run(settings, name="daily_hits", cycle="daily", cycle_in="noon")

    assert result.action == "cycle"
    assert result.message == "counter daily_hits will reset daily at noon"
    assert result.next_reset_at is not None
    assert result.next_reset_at > datetime.now().astimezone()

    stored = read_counter(_path(settings, "daily_hits"))
    assert (stored.cycle, stored.cycle_in) == ("daily", "noon")


def test_configure_interval_cycle_has_no_calendar_time(settings: Settings) -> None:
    result = _run(settings, cycle="every", cycle_in="15")

    assert result.next_reset_at is None
    assert read_counter(_path(settings)).cycle == "every"


def test_invalid_cycle_is_not_stored(settings: Settings) -> None:
    with pytest.raises(InvalidParameter):
        _run(settings, cycle="monthly", cycle_in="45")
    with pytest.raises(UnknownCycleKind):
        _run(settings, cycle="fortnightly")

    assert not _path(settings).exists()


def test_unschedulable_stored_cycle_leaves_file_untouched(settings: Settings) -> None:
    path = _path(settings)
    path.write_text(
        json.dumps({"value": 1, "cycle": "weekly", "cycle_in": "funday"}),
        encoding="utf-8",
    )
    before = path.read_text(encoding="utf-8")

    with pytest.raises(InvalidParameter):
        _run(settings, add=True)

    assert path.read_text(encoding="utf-8") == before
    assert read_counter(path).value == 1


def test_remove_cycle(settings: Settings) -> None:
    _run(settings, name="daily_hits", cycle="daily", cycle_in="noon")

    result = _run(settings, name="daily_hits", remove_cycle=True)

    assert result.message == "cycle removed from daily_hits"
    assert read_counter(_path(settings, "daily_hits")).cycle == ""


def test_stale_cycle_resets_value(settings: Settings) -> None:
    _run(settings, cycle="hourly")
    _run(settings, set_to=5)
    _age(_path(settings), timedelta(hours=2))

    result = _run(settings)

    assert result.auto_reset is True
    assert result.counter.value == 0
    assert read_counter(_path(settings)).value == 0


def test_stale_cycle_resets_before_add(settings: Settings) -> None:
    _run(settings, cycle="every", cycle_in="30")
    _run(settings, set_to=5)
    _age(_path(settings), timedelta(minutes=31))

    assert _run(settings, add=True).counter.value == 1


def test_recent_cycle_keeps_value(settings: Settings) -> None:
    _run(settings, cycle="daily", cycle_in="midnight")
    _run(settings, set_to=5)

    result = _run(settings)

    assert result.auto_reset is False
    assert result.counter.value == 5
    assert result.next_reset_at is not None


def test_missing_directory_without_force(tmp_path: Path) -> None:
    settings = Settings(counter_dir=tmp_path / "absent")

    with pytest.raises(DirectoryMissing):
        _run(settings, add=True)

    forced = settings.model_copy(update={"use_force": True})
    assert _run(forced, add=True).counter.value == 1


def test_file_counter_relative_to_directory(settings: Settings) -> None:
    result = run_operation(OperationRequest(file="plain.counter", add=True), settings)

    path = settings.counter_dir.resolve() / "plain.counter"
    assert result.counter.path == str(path)
    assert json.loads(path.read_text(encoding="utf-8"))["value"] == 1


def test_request_requires_identity() -> None:
    with pytest.raises(ValueError):
        OperationRequest(add=True)

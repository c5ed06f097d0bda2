"""Pytest fixtures for counter tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from counter.config import Settings


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's COUNTER_* variables out of every test."""

    for variable in list(os.environ):
        if variable.startswith("COUNTER_"):
            monkeypatch.delenv(variable, raising=False)


@pytest.fixture()
def counter_dir(tmp_path: Path) -> Path:
    """Return an existing directory for counter files."""

    directory = tmp_path / "counters"
    directory.mkdir()
    return directory


@pytest.fixture()
def settings(counter_dir: Path) -> Settings:
    """Return settings pointed at the temporary counter directory."""

    return Settings(counter_dir=counter_dir)

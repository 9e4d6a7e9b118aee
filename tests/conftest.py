# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from daily_todo.cli.bootstrap import create_initial_state
from daily_todo.core.state import AppState
from daily_todo.tasks.task_store import TaskStore

from .fakes import FakeClock


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and the terminal driver.

    We intentionally use a SimpleNamespace rather than reading the environment,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="daily-todo-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        log_dir=tmp_path,
        seed_defaults=False,
        directional_marks=False,
        tick_ms=50,
        ascii_boxes=True,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(tmp_path: Path, clock: FakeClock) -> TaskStore:
    return TaskStore(tmp_path / "store.sqlite3", clock=clock)


@pytest.fixture()
def state(settings: SimpleNamespace, clock: FakeClock) -> AppState:
    """
    AppState wired the same way the CLI does it.

    NOTE: the real SQLite TaskStore is used because its correctness is part
    of what we want to test.
    """
    return create_initial_state(settings=settings, clock=clock)

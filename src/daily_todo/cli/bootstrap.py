# src/daily_todo/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- opens the task store (seeding defaults into a brand-new database),
- wires the input state machine and command registry into AppState.
"""

from __future__ import annotations

import datetime as dt
import logging
import sqlite3

from ..config import get_settings
from ..core.modes import InputMachine
from ..core.state import AppState
from ..tasks.task_api import seed_defaults
from ..tasks.task_store import Clock, TaskStore
from .commands import registry as command_registry

logger = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Persistence could not be opened; the app must not start with an empty task set."""


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def open_task_store(settings, *, clock: Clock = dt.date.today) -> TaskStore:
    db_path = settings.tasks_db_path
    is_new = not db_path.exists()
    try:
        _ensure_local_dirs(settings)
        store = TaskStore(db_path, clock=clock)
        if is_new and settings.seed_defaults:
            seed_defaults(store)
    except (sqlite3.Error, OSError) as e:
        logger.exception("Failed to open task store at %s", db_path)
        raise StartupError(f"could not open task database {db_path}: {e}") from e
    return store


def create_initial_state(*, settings=None, clock: Clock = dt.date.today) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    store = open_task_store(settings, clock=clock)
    machine = InputMachine(store=store, directional_marks=settings.directional_marks)
    state = AppState(settings=settings, task_store=store, machine=machine)
    machine.command_handler = lambda line: command_registry.handle(state, line)
    return state


def shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.task_store.close()
    except Exception:
        logger.exception("Task store close failed.")

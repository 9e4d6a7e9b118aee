# src/daily_todo/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from .modes import InputMachine
from .ports import TaskRepo


@dataclass
class AppState:
    # Settings live on the state so commands and the terminal driver can read them.
    settings: object

    task_store: TaskRepo
    machine: InputMachine

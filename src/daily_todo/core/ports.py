# src/daily_todo/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage and the terminal driver swappable and makes testing easier.
"""

import datetime as dt
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..tasks.task_models import RecurringTemplate, Task, TaskId, Weekday


class TaskRepo(Protocol):
    def today(self) -> dt.date: ...

    # Edit-mode operations
    def create(self, text: str) -> TaskId: ...
    def create_recurring(self, text: str, weekdays: Iterable[Weekday]) -> TaskId: ...
    def remove(self, task_id: TaskId) -> None: ...
    def toggle_done(self, task_id: TaskId, today: dt.date | None = None) -> bool: ...
    def set_done(self, task_id: TaskId, done: bool, today: dt.date | None = None) -> bool: ...

    # Views
    def list_visible(self, today: dt.date | None = None) -> list[Task]: ...
    def list_manual(self) -> list[Task]: ...
    def list_templates(self) -> list[RecurringTemplate]: ...
    def count_tasks(self) -> int: ...

    # Header labels
    def get_day_label(self, weekday: Weekday) -> str | None: ...
    def day_labels(self) -> dict[Weekday, str]: ...
    def set_day_label(self, weekday: Weekday, label: str | None) -> None: ...

    # Snapshot import
    def replace_contents(
            self,
            *,
            tasks: Iterable[tuple[str, bool]],
            templates: Iterable[tuple[str, frozenset[Weekday], Mapping[dt.date, bool]]],
            day_labels: Mapping[Weekday, str],
    ) -> None: ...

    def close(self) -> None: ...

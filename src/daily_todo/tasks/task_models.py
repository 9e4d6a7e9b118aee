# src/daily_todo/tasks/task_models.py

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import IntEnum, StrEnum

TaskId = str
# "m<n>" for manual tasks, "r<n>" for instances of recurring template <n>.

MANUAL_PREFIX = "m"
RECURRING_PREFIX = "r"


class TaskError(Exception):
    """Base class for task store errors."""


class InvalidInput(TaskError, ValueError):
    """Empty task text, unknown weekday, malformed snapshot..."""


class NotFound(TaskError, KeyError):
    """Operation targets an unknown or already removed id."""

    def __str__(self) -> str:
        # KeyError.__str__ quotes its argument; keep messages readable.
        return str(self.args[0]) if self.args else "not found"


class Weekday(IntEnum):
    """Weekdays numbered like datetime.date.weekday()."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def of(cls, day: dt.date) -> Weekday:
        return cls(day.weekday())

    @property
    def label(self) -> str:
        return self.name.lower()

    @property
    def short(self) -> str:
        return self.name[:3].lower()


class OriginKind(StrEnum):
    MANUAL = "manual"
    RECURRING = "recurring"


@dataclass(slots=True, frozen=True)
class TaskOrigin:
    kind: OriginKind
    template_id: int | None = None
    weekdays: frozenset[Weekday] = frozenset()

    @classmethod
    def manual(cls) -> TaskOrigin:
        return cls(kind=OriginKind.MANUAL)

    @classmethod
    def recurring(cls, template_id: int, weekdays: frozenset[Weekday]) -> TaskOrigin:
        return cls(kind=OriginKind.RECURRING, template_id=template_id, weekdays=frozenset(weekdays))

    @property
    def is_recurring(self) -> bool:
        return self.kind is OriginKind.RECURRING


@dataclass(slots=True, frozen=True)
class Task:
    id: TaskId
    text: str
    done: bool
    origin: TaskOrigin


@dataclass(slots=True)
class RecurringTemplate:
    id: int
    text: str
    weekdays: frozenset[Weekday]
    done_log: dict[dt.date, bool] = field(default_factory=dict)

    def applies_to(self, day: dt.date) -> bool:
        return Weekday.of(day) in self.weekdays

    def is_done_on(self, day: dt.date) -> bool:
        return self.done_log.get(day, False)


def manual_task_id(rowid: int) -> TaskId:
    return f"{MANUAL_PREFIX}{int(rowid)}"


def recurring_task_id(template_id: int) -> TaskId:
    return f"{RECURRING_PREFIX}{int(template_id)}"


def parse_task_id(task_id: TaskId) -> tuple[OriginKind, int]:
    """
    Split a TaskId into (origin kind, numeric id).

    Raises NotFound for anything that could never name a task.
    """
    raw = (task_id or "").strip()
    if len(raw) < 2 or not raw[1:].isdigit():
        raise NotFound(f"unknown task id: {task_id!r}")
    prefix, num = raw[0], int(raw[1:])
    if prefix == MANUAL_PREFIX:
        return OriginKind.MANUAL, num
    if prefix == RECURRING_PREFIX:
        return OriginKind.RECURRING, num
    raise NotFound(f"unknown task id: {task_id!r}")

# src/daily_todo/tasks/recurrence.py

from __future__ import annotations

"""
Recurrence engine.

Recurring templates are projected onto a calendar day by a pure function:
the same templates and date always produce the same instances. Completion
state comes from the template's per-date done log only, so an instance
ticked off on Monday shows as open again the following Monday.
"""

import datetime as dt
import re
from collections.abc import Iterable

from .task_models import InvalidInput, RecurringTemplate, Task, TaskOrigin, Weekday, recurring_task_id

_ALIASES: dict[str, frozenset[Weekday]] = {
    "daily": frozenset(Weekday),
    "everyday": frozenset(Weekday),
    "weekdays": frozenset(Weekday(i) for i in range(5)),
    "workdays": frozenset(Weekday(i) for i in range(5)),
    "weekends": frozenset({Weekday.SATURDAY, Weekday.SUNDAY}),
}

_TOKEN_SPLIT = re.compile(r"[,\s]+")


def materialize(templates: Iterable[RecurringTemplate], today: dt.date) -> list[Task]:
    """Return today's instances, in template order."""
    out: list[Task] = []
    for tpl in templates:
        if not tpl.applies_to(today):
            continue
        out.append(
            Task(
                id=recurring_task_id(tpl.id),
                text=tpl.text,
                done=tpl.is_done_on(today),
                origin=TaskOrigin.recurring(tpl.id, tpl.weekdays),
            )
        )
    return out


def parse_weekday(token: str) -> Weekday:
    """
    Resolve a single weekday name.

    Accepts full names and unambiguous prefixes of at least two letters
    ("mo", "tue", "Thursday").
    """
    key = token.strip().lower()
    if len(key) < 2:
        raise InvalidInput(f"unknown weekday: {token!r}")
    matches = [d for d in Weekday if d.label.startswith(key)]
    if len(matches) != 1:
        raise InvalidInput(f"unknown weekday: {token!r}")
    return matches[0]


def parse_weekdays(text: str) -> frozenset[Weekday]:
    """
    Parse a weekday set such as "mon,wed fri", "mon-fri" or "weekends".

    Ranges wrap around the week ("fri-mon" is Friday..Monday).
    """
    days: set[Weekday] = set()
    for token in _TOKEN_SPLIT.split((text or "").strip()):
        if not token:
            continue
        low = token.lower()
        if low in _ALIASES:
            days.update(_ALIASES[low])
            continue
        if "-" in low:
            start_raw, end_raw = low.split("-", 1)
            start, end = parse_weekday(start_raw), parse_weekday(end_raw)
            span = (end - start) % 7
            days.update(Weekday((start + i) % 7) for i in range(span + 1))
            continue
        days.add(parse_weekday(low))
    if not days:
        raise InvalidInput("at least one weekday is required")
    return frozenset(days)


def parse_recurring_input(text: str) -> tuple[frozenset[Weekday], str]:
    """Split "mon,fri: check mail" into ({MONDAY, FRIDAY}, "check mail")."""
    head, sep, body = (text or "").partition(":")
    if not sep:
        raise InvalidInput("expected '<weekdays>: <text>'")
    body = body.strip()
    if not body:
        raise InvalidInput("task text is required")
    return parse_weekdays(head), body


def format_weekdays(days: Iterable[Weekday]) -> str:
    ordered = sorted(set(days))
    if len(ordered) == 7:
        return "daily"
    return ",".join(d.short for d in ordered)

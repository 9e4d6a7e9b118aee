# src/daily_todo/tasks/task_api.py

from __future__ import annotations

import datetime as dt
import json
import logging
import os
from pathlib import Path
from typing import Any

from ..core.ports import TaskRepo
from .recurrence import parse_recurring_input
from .task_models import InvalidInput, TaskId, Weekday

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1

# First-run content: a couple of recurring mail chores and their day labels.
DEFAULT_TEMPLATES: list[tuple[str, frozenset[Weekday]]] = [
    ("check mail", frozenset({Weekday.MONDAY})),
    ("cleanup mail", frozenset({Weekday.FRIDAY})),
]
DEFAULT_DAY_LABELS: dict[Weekday, str] = {
    Weekday.MONDAY: "business day",
    Weekday.FRIDAY: "wrap up day",
}


def seed_defaults(store: TaskRepo) -> None:
    """Populate a brand-new store with the default templates and labels."""
    for text, weekdays in DEFAULT_TEMPLATES:
        store.create_recurring(text, weekdays)
    for weekday, label in DEFAULT_DAY_LABELS.items():
        store.set_day_label(weekday, label)
    logger.info("Seeded default recurring tasks: %d templates", len(DEFAULT_TEMPLATES))


def create_recurring_from_input(store: TaskRepo, text: str) -> TaskId:
    """
    Convenience helper: create a template from "<weekdays>: <text>",
    e.g. "mon,wed: water plants" or "weekdays: stand-up".
    """
    weekdays, body = parse_recurring_input(text)
    return store.create_recurring(body, weekdays)


# ---- snapshot (serialize / deserialize) ----


def export_snapshot(store: TaskRepo) -> dict[str, Any]:
    """Serialize manual tasks, templates with their done logs, and day labels."""
    tasks = [{"text": t.text, "done": t.done} for t in store.list_manual()]
    templates = [
        {
            "text": tpl.text,
            "weekdays": sorted(int(d) for d in tpl.weekdays),
            "done_log": {day.isoformat(): done for day, done in sorted(tpl.done_log.items())},
        }
        for tpl in store.list_templates()
    ]
    labels = {str(int(day)): label for day, label in store.day_labels().items()}
    return {
        "version": SNAPSHOT_VERSION,
        "tasks": tasks,
        "templates": templates,
        "day_labels": labels,
    }


def _require(cond: bool, message: str) -> None:
    if not cond:
        raise InvalidInput(f"bad snapshot: {message}")


def import_snapshot(store: TaskRepo, data: Any) -> None:
    """
    Replace the store's contents with a snapshot produced by export_snapshot().

    The whole snapshot is validated before anything is written.
    """
    _require(isinstance(data, dict), "top level must be an object")
    _require(data.get("version") == SNAPSHOT_VERSION, f"unsupported version {data.get('version')!r}")

    raw_tasks = data.get("tasks", [])
    raw_templates = data.get("templates", [])
    raw_labels = data.get("day_labels", {})
    _require(isinstance(raw_tasks, list), "tasks must be a list")
    _require(isinstance(raw_templates, list), "templates must be a list")
    _require(isinstance(raw_labels, dict), "day_labels must be an object")

    tasks: list[tuple[str, bool]] = []
    for item in raw_tasks:
        _require(isinstance(item, dict), "task entries must be objects")
        text = str(item.get("text", "")).strip()
        _require(bool(text), "task text is required")
        tasks.append((text, bool(item.get("done", False))))

    templates: list[tuple[str, frozenset[Weekday], dict[dt.date, bool]]] = []
    for item in raw_templates:
        _require(isinstance(item, dict), "template entries must be objects")
        text = str(item.get("text", "")).strip()
        _require(bool(text), "template text is required")
        try:
            weekdays = frozenset(Weekday(int(d)) for d in item.get("weekdays", []))
            done_log = {
                dt.date.fromisoformat(str(day)): bool(done)
                for day, done in dict(item.get("done_log", {})).items()
            }
        except (TypeError, ValueError, OverflowError) as e:
            raise InvalidInput(f"bad snapshot: {e}") from e
        _require(bool(weekdays), f"template {text!r} has no weekdays")
        templates.append((text, weekdays, done_log))

    labels: dict[Weekday, str] = {}
    for key, label in raw_labels.items():
        try:
            labels[Weekday(int(key))] = str(label)
        except (TypeError, ValueError, OverflowError) as e:
            raise InvalidInput(f"bad snapshot: {e}") from e

    store.replace_contents(tasks=tasks, templates=templates, day_labels=labels)
    logger.info("Imported snapshot: %d tasks, %d templates", len(tasks), len(templates))


def save_snapshot(store: TaskRepo, path: str | Path) -> Path:
    """Write a JSON snapshot atomically (tmp file + os.replace)."""
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(export_snapshot(store), ensure_ascii=False, indent=2), "utf-8")
    os.replace(tmp, path)
    logger.info("Saved snapshot to %s", path)
    return path


def load_snapshot(store: TaskRepo, path: str | Path) -> None:
    path = Path(path).expanduser()
    try:
        data = json.loads(path.read_text("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidInput(f"bad snapshot: {e}") from e
    import_snapshot(store, data)

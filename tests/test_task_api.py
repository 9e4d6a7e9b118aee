# tests/test_task_api.py

from __future__ import annotations

import json
from pathlib import Path

import pytest

from daily_todo.cli.bootstrap import StartupError, create_initial_state
from daily_todo.tasks.task_api import (
    create_recurring_from_input,
    export_snapshot,
    import_snapshot,
    load_snapshot,
    save_snapshot,
    seed_defaults,
)
from daily_todo.tasks.task_models import InvalidInput, Weekday
from daily_todo.tasks.task_store import TaskStore

from .fakes import MONDAY, FakeClock


def _populate(store: TaskStore) -> None:
    store.create("buy milk")
    done = store.create("call mom")
    store.toggle_done(done)
    tpl = store.create_recurring("check mail", {Weekday.MONDAY})
    store.toggle_done(tpl)
    store.create_recurring("gym", {Weekday.TUESDAY, Weekday.THURSDAY})
    store.set_day_label(Weekday.MONDAY, "business day")


def test_snapshot_export_import_reproduces_view(store: TaskStore, tmp_path: Path, clock: FakeClock) -> None:
    _populate(store)
    path = save_snapshot(store, tmp_path / "snapshot.json")

    other = TaskStore(tmp_path / "other.sqlite3", clock=clock)
    load_snapshot(other, path)

    def view(s: TaskStore):
        return [(t.text, t.done, t.origin.kind) for t in s.list_visible(MONDAY)]

    assert view(other) == view(store)
    assert other.day_labels() == {Weekday.MONDAY: "business day"}
    assert [tpl.weekdays for tpl in other.list_templates()] == [
        frozenset({Weekday.MONDAY}),
        frozenset({Weekday.TUESDAY, Weekday.THURSDAY}),
    ]


def test_snapshot_shape(store: TaskStore) -> None:
    _populate(store)
    data = export_snapshot(store)
    assert data["version"] == 1
    assert data["tasks"] == [
        {"text": "buy milk", "done": False},
        {"text": "call mom", "done": True},
    ]
    assert data["templates"][0] == {
        "text": "check mail",
        "weekdays": [0],
        "done_log": {MONDAY.isoformat(): True},
    }
    assert data["day_labels"] == {"0": "business day"}
    json.dumps(data)


@pytest.mark.parametrize(
    "data",
    [
        [],
        {"version": 99},
        {"version": 1, "tasks": {}},
        {"version": 1, "tasks": [{"text": ""}]},
        {"version": 1, "templates": [{"text": "x", "weekdays": []}]},
        {"version": 1, "templates": [{"text": "x", "weekdays": [9]}]},
        {"version": 1, "templates": [{"text": "x", "weekdays": [0], "done_log": {"not-a-date": True}}]},
        {"version": 1, "day_labels": {"monday": "x"}},
    ],
)
def test_import_rejects_bad_snapshot_without_touching_store(store: TaskStore, data) -> None:
    store.create("keep")
    with pytest.raises(InvalidInput):
        import_snapshot(store, data)
    assert [t.text for t in store.list_visible()] == ["keep"]


def test_load_snapshot_rejects_invalid_json(store: TaskStore, tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", "utf-8")
    with pytest.raises(InvalidInput):
        load_snapshot(store, path)


def test_load_snapshot_rejects_non_utf8_file(store: TaskStore, tmp_path: Path) -> None:
    store.create("keep")
    path = tmp_path / "binary.json"
    path.write_bytes(b"\xff\xfe\x00garbage")
    with pytest.raises(InvalidInput):
        load_snapshot(store, path)
    assert [t.text for t in store.list_visible()] == ["keep"]


def test_import_rejects_infinite_weekday(store: TaskStore, tmp_path: Path) -> None:
    path = tmp_path / "big.json"
    path.write_text('{"version": 1, "templates": [{"text": "x", "weekdays": [1e400]}]}', "utf-8")
    with pytest.raises(InvalidInput):
        load_snapshot(store, path)
    assert store.list_templates() == []


def test_seed_defaults(store: TaskStore) -> None:
    seed_defaults(store)
    assert [t.text for t in store.list_visible(MONDAY)] == ["check mail"]
    assert store.get_day_label(Weekday.MONDAY) == "business day"
    assert store.get_day_label(Weekday.FRIDAY) == "wrap up day"


def test_create_recurring_from_input(store: TaskStore) -> None:
    task_id = create_recurring_from_input(store, "weekdays: stand-up")
    assert task_id.startswith("r")
    assert store.list_templates()[0].weekdays == frozenset(Weekday(i) for i in range(5))


def test_bootstrap_seeds_only_new_database(settings, clock: FakeClock) -> None:
    settings.seed_defaults = True
    state = create_initial_state(settings=settings, clock=clock)
    assert [t.text for t in state.task_store.list_visible()] == ["check mail"]

    state.task_store.remove("r1")
    again = create_initial_state(settings=settings, clock=clock)
    assert again.task_store.list_visible() == []


def test_bootstrap_wires_directional_marks(settings, clock: FakeClock) -> None:
    settings.directional_marks = True
    state = create_initial_state(settings=settings, clock=clock)
    assert state.machine.directional_marks is True
    assert state.machine.command_handler is not None


def test_bootstrap_fails_loudly_on_corrupt_database(settings, clock: FakeClock) -> None:
    settings.tasks_db_path.write_bytes(b"this is not an sqlite database" * 64)
    with pytest.raises(StartupError):
        create_initial_state(settings=settings, clock=clock)

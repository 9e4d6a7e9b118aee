# tests/test_task_store.py

from __future__ import annotations

import datetime as dt
from pathlib import Path

import pytest

from daily_todo.tasks.task_models import InvalidInput, NotFound, OriginKind, Weekday
from daily_todo.tasks.task_store import TaskStore

from .fakes import MONDAY, FakeClock


def test_create_adds_exactly_one_open_task(store: TaskStore) -> None:
    before = store.list_visible(MONDAY)
    task_id = store.create("  buy milk  ")

    after = store.list_visible(MONDAY)
    new = [t for t in after if t.id not in {b.id for b in before}]
    assert len(new) == 1
    assert new[0].id == task_id
    assert new[0].text == "buy milk"
    assert new[0].done is False
    assert new[0].origin.kind is OriginKind.MANUAL


@pytest.mark.parametrize("text", ["", "   ", "\t\n"])
def test_create_rejects_blank_text(store: TaskStore, text: str) -> None:
    with pytest.raises(InvalidInput):
        store.create(text)
    assert store.list_visible(MONDAY) == []


def test_toggle_done_is_its_own_inverse(store: TaskStore) -> None:
    manual = store.create("write report")
    recurring = store.create_recurring("stand-up", {Weekday.MONDAY})

    for task_id in (manual, recurring):
        assert store.toggle_done(task_id, MONDAY) is True
        assert store.toggle_done(task_id, MONDAY) is False

    assert all(not t.done for t in store.list_visible(MONDAY))


def test_recurring_instance_visible_only_on_its_weekdays(store: TaskStore) -> None:
    store.create_recurring("check mail", {Weekday.MONDAY})

    for offset in range(7):
        day = MONDAY + dt.timedelta(days=offset)
        texts = [t.text for t in store.list_visible(day)]
        if day.weekday() == Weekday.MONDAY:
            assert texts == ["check mail"]
        else:
            assert texts == []


def test_recurring_done_does_not_carry_over_to_next_week(store: TaskStore, clock: FakeClock) -> None:
    task_id = store.create_recurring("check mail", {Weekday.MONDAY})

    store.toggle_done(task_id)
    assert store.list_visible()[0].done is True

    clock.advance(7)
    next_monday = store.list_visible()
    assert [t.id for t in next_monday] == [task_id]
    assert next_monday[0].done is False

    # The previous Monday keeps its own entry.
    assert store.list_visible(MONDAY)[0].done is True


def test_manual_tasks_survive_day_changes(store: TaskStore, clock: FakeClock) -> None:
    task_id = store.create("file taxes")
    store.toggle_done(task_id)
    clock.advance(3)
    tasks = store.list_visible()
    assert [(t.id, t.done) for t in tasks] == [(task_id, True)]


def test_list_visible_order_is_manual_then_templates_and_stable(store: TaskStore) -> None:
    r1 = store.create_recurring("first template", {Weekday.MONDAY})
    m1 = store.create("first manual")
    r2 = store.create_recurring("second template", set(Weekday))
    m2 = store.create("second manual")

    ids = [t.id for t in store.list_visible(MONDAY)]
    assert ids == [m1, m2, r1, r2]
    assert [t.id for t in store.list_visible(MONDAY)] == ids
    assert len(set(ids)) == len(ids)


def test_remove_manual_and_unknown_ids(store: TaskStore) -> None:
    keep = store.create("keep me")
    drop = store.create("drop me")

    store.remove(drop)
    assert [t.id for t in store.list_visible(MONDAY)] == [keep]

    for stale in (drop, "m999", "r999", "zz", ""):
        with pytest.raises(NotFound):
            store.remove(stale)
    assert [t.id for t in store.list_visible(MONDAY)] == [keep]


def test_remove_template_cascades_and_is_not_resurrected(store: TaskStore, clock: FakeClock) -> None:
    task_id = store.create_recurring("water plants", {Weekday.MONDAY, Weekday.TUESDAY})
    store.toggle_done(task_id)

    store.remove(task_id)
    assert store.list_visible(MONDAY) == []
    assert store.list_templates() == []

    # A new template never reuses the removed id.
    new_id = store.create_recurring("water plants", {Weekday.MONDAY})
    assert new_id != task_id
    assert store.list_visible(MONDAY)[0].done is False

    with pytest.raises(NotFound):
        store.toggle_done(task_id)


def test_set_done_is_explicit(store: TaskStore) -> None:
    task_id = store.create("pay rent")
    assert store.set_done(task_id, True) is True
    assert store.set_done(task_id, True) is True
    assert store.list_visible()[0].done is True
    store.set_done(task_id, False)
    assert store.list_visible()[0].done is False


def test_create_recurring_validation(store: TaskStore) -> None:
    with pytest.raises(InvalidInput):
        store.create_recurring("  ", {Weekday.MONDAY})
    with pytest.raises(InvalidInput):
        store.create_recurring("no days", set())


def test_day_labels(store: TaskStore) -> None:
    assert store.get_day_label(Weekday.MONDAY) is None
    store.set_day_label(Weekday.MONDAY, " business day ")
    assert store.get_day_label(Weekday.MONDAY) == "business day"
    assert store.day_labels() == {Weekday.MONDAY: "business day"}
    store.set_day_label(Weekday.MONDAY, "")
    assert store.get_day_label(Weekday.MONDAY) is None


def test_state_survives_reopen(tmp_path: Path, clock: FakeClock) -> None:
    db = tmp_path / "tasks.sqlite3"
    first = TaskStore(db, clock=clock)
    manual = first.create("persist me")
    recurring = first.create_recurring("weekly review", {Weekday.MONDAY})
    first.toggle_done(recurring)

    second = TaskStore(db, clock=clock)
    tasks = second.list_visible()
    assert [(t.id, t.text, t.done) for t in tasks] == [
        (manual, "persist me", False),
        (recurring, "weekly review", True),
    ]
    assert second.count_tasks() == 2

# src/daily_todo/tasks/task_store.py

from __future__ import annotations

import contextlib
import datetime as dt
import logging
import sqlite3
import time
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path

from .recurrence import materialize
from .task_models import (
    InvalidInput,
    NotFound,
    OriginKind,
    RecurringTemplate,
    Task,
    TaskId,
    TaskOrigin,
    Weekday,
    manual_task_id,
    parse_task_id,
    recurring_task_id,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], dt.date]


def _weekdays_to_str(days: Iterable[Weekday]) -> str:
    return ",".join(str(int(d)) for d in sorted(set(days)))


def _str_to_weekdays(raw: str | None) -> frozenset[Weekday]:
    out: set[Weekday] = set()
    for part in (raw or "").split(","):
        part = part.strip()
        if not part:
            continue
        try:
            out.add(Weekday(int(part)))
        except ValueError:
            logger.warning("Ignoring bad weekday value in store: %r", part)
    return frozenset(out)


class TaskStore:
    """
    SQLite task store.

    Holds manual tasks, recurring templates with their per-date done log,
    and optional per-weekday header labels.

    The schema is intentionally simple and migration-safe:
    - create tables if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Every public method opens its own connection and commits before
    returning, so a mutation is on disk as soon as the call completes.
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3", *, clock: Clock = dt.date.today) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._clock = clock
        self._ensure_schema()
        logger.info("TaskStore ready db=%s total=%s", self._db_path, self.count_tasks())

    @property
    def db_path(self) -> Path:
        return self._db_path

    def today(self) -> dt.date:
        return self._clock()

    def close(self) -> None:
        """Shutdown hook (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.OperationalError):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    text TEXT NOT NULL,
                    done INTEGER NOT NULL DEFAULT 0,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS templates (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    text TEXT NOT NULL,
                    weekdays TEXT NOT NULL DEFAULT '',
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS done_log (
                    template_id INTEGER NOT NULL,
                    day TEXT NOT NULL,
                    done INTEGER NOT NULL DEFAULT 0,
                    PRIMARY KEY (template_id, day)
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS day_labels (
                    weekday INTEGER PRIMARY KEY,
                    label TEXT NOT NULL
                )
                """
            )

            # Migrations (safe): add missing columns.
            def add_col(table: str, name: str, decl: str) -> None:
                cur.execute(f"PRAGMA table_info({table})")
                cols = {row["name"] for row in cur.fetchall()}
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE {table} ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s.%s", table, name)

            add_col("tasks", "done", "INTEGER NOT NULL DEFAULT 0")
            add_col("tasks", "created_at", "REAL NOT NULL DEFAULT 0")
            add_col("tasks", "updated_at", "REAL NOT NULL DEFAULT 0")
            add_col("templates", "weekdays", "TEXT NOT NULL DEFAULT ''")
            add_col("templates", "created_at", "REAL NOT NULL DEFAULT 0")
            add_col("templates", "updated_at", "REAL NOT NULL DEFAULT 0")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_done_log_day ON done_log(day)")

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=manual_task_id(row["id"]),
            text=str(row["text"] or ""),
            done=bool(row["done"]),
            origin=TaskOrigin.manual(),
        )

    def _load_templates(self, conn: sqlite3.Connection) -> list[RecurringTemplate]:
        cur = conn.cursor()
        cur.execute("SELECT id, text, weekdays FROM templates ORDER BY id ASC")
        templates = [
            RecurringTemplate(
                id=int(row["id"]),
                text=str(row["text"] or ""),
                weekdays=_str_to_weekdays(row["weekdays"]),
            )
            for row in cur.fetchall()
        ]
        by_id = {t.id: t for t in templates}
        cur.execute("SELECT template_id, day, done FROM done_log")
        for row in cur.fetchall():
            tpl = by_id.get(int(row["template_id"]))
            if tpl is None:
                continue
            try:
                day = dt.date.fromisoformat(row["day"])
            except (TypeError, ValueError):
                continue
            tpl.done_log[day] = bool(row["done"])
        return templates

    def _resolve_day(self, today: dt.date | None) -> dt.date:
        return today if today is not None else self._clock()

    # ---- public API ----

    def count_tasks(self) -> int:
        """Manual tasks plus recurring templates."""
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT (SELECT COUNT(*) FROM tasks) + (SELECT COUNT(*) FROM templates)")
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def create(self, text: str) -> TaskId:
        body = (text or "").strip()
        if not body:
            raise InvalidInput("task text is required")

        now = time.time()
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                "INSERT INTO tasks(text, done, created_at, updated_at) VALUES (?, 0, ?, ?)",
                (body, now, now),
            )
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for tasks insert")
            task_id = manual_task_id(rowid)
            logger.debug("Task added id=%s", task_id)
            return task_id
        finally:
            conn.close()

    def create_recurring(self, text: str, weekdays: Iterable[Weekday]) -> TaskId:
        body = (text or "").strip()
        if not body:
            raise InvalidInput("task text is required")
        days = frozenset(Weekday(int(d)) for d in weekdays)
        if not days:
            raise InvalidInput("at least one weekday is required")

        now = time.time()
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                "INSERT INTO templates(text, weekdays, created_at, updated_at) VALUES (?, ?, ?, ?)",
                (body, _weekdays_to_str(days), now, now),
            )
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for templates insert")
            task_id = recurring_task_id(rowid)
            logger.debug("Recurring template added id=%s weekdays=%s", task_id, _weekdays_to_str(days))
            return task_id
        finally:
            conn.close()

    def remove(self, task_id: TaskId) -> None:
        """
        Remove a manual task, or a recurring template together with its
        done log (and therefore today's derived instance).
        """
        kind, num = parse_task_id(task_id)
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            table = "tasks" if kind is OriginKind.MANUAL else "templates"
            cur.execute(f"DELETE FROM {table} WHERE id = ?", (num,))
            if cur.rowcount == 0:
                conn.rollback()
                raise NotFound(f"unknown task id: {task_id!r}")
            if kind is OriginKind.RECURRING:
                cur.execute("DELETE FROM done_log WHERE template_id = ?", (num,))
            conn.commit()
        finally:
            conn.close()
        logger.debug("Task removed id=%s", task_id)

    def _get_done(self, conn: sqlite3.Connection, kind: OriginKind, num: int, day: dt.date) -> bool:
        cur = conn.cursor()
        if kind is OriginKind.MANUAL:
            cur.execute("SELECT done FROM tasks WHERE id = ?", (num,))
            row = cur.fetchone()
            if row is None:
                raise NotFound(f"unknown task id: {manual_task_id(num)!r}")
            return bool(row["done"])

        cur.execute("SELECT 1 FROM templates WHERE id = ?", (num,))
        if cur.fetchone() is None:
            raise NotFound(f"unknown task id: {recurring_task_id(num)!r}")
        cur.execute(
            "SELECT done FROM done_log WHERE template_id = ? AND day = ?",
            (num, day.isoformat()),
        )
        row = cur.fetchone()
        return bool(row["done"]) if row else False

    def _write_done(
        self, conn: sqlite3.Connection, kind: OriginKind, num: int, day: dt.date, done: bool
    ) -> None:
        if kind is OriginKind.MANUAL:
            conn.execute(
                "UPDATE tasks SET done = ?, updated_at = ? WHERE id = ?",
                (int(done), time.time(), num),
            )
            return
        conn.execute(
            """
            INSERT INTO done_log(template_id, day, done) VALUES (?, ?, ?)
            ON CONFLICT(template_id, day) DO UPDATE SET done = excluded.done
            """,
            (num, day.isoformat(), int(done)),
        )

    def set_done(self, task_id: TaskId, done: bool, today: dt.date | None = None) -> bool:
        """Set completion explicitly. Recurring instances write done_log[today]."""
        kind, num = parse_task_id(task_id)
        day = self._resolve_day(today)
        conn = self._get_conn()
        try:
            self._get_done(conn, kind, num, day)
            self._write_done(conn, kind, num, day, bool(done))
            conn.commit()
        finally:
            conn.close()
        logger.debug("Task done set id=%s day=%s done=%s", task_id, day, done)
        return bool(done)

    def toggle_done(self, task_id: TaskId, today: dt.date | None = None) -> bool:
        """Flip completion and return the new value."""
        kind, num = parse_task_id(task_id)
        day = self._resolve_day(today)
        conn = self._get_conn()
        try:
            new_done = not self._get_done(conn, kind, num, day)
            self._write_done(conn, kind, num, day, new_done)
            conn.commit()
        finally:
            conn.close()
        logger.debug("Task toggled id=%s day=%s done=%s", task_id, day, new_done)
        return new_done

    def list_manual(self) -> list[Task]:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT id, text, done FROM tasks ORDER BY id ASC")
            return [self._row_to_task(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def list_templates(self) -> list[RecurringTemplate]:
        conn = self._get_conn()
        try:
            return self._load_templates(conn)
        finally:
            conn.close()

    def list_visible(self, today: dt.date | None = None) -> list[Task]:
        """
        Manual tasks (insertion order) followed by today's recurring
        instances (template order).
        """
        day = self._resolve_day(today)
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT id, text, done FROM tasks ORDER BY id ASC")
            manual = [self._row_to_task(r) for r in cur.fetchall()]
            templates = self._load_templates(conn)
        finally:
            conn.close()
        return manual + materialize(templates, day)

    def get_day_label(self, weekday: Weekday) -> str | None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT label FROM day_labels WHERE weekday = ?", (int(weekday),))
            row = cur.fetchone()
            return str(row["label"]) if row else None
        finally:
            conn.close()

    def day_labels(self) -> dict[Weekday, str]:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT weekday, label FROM day_labels ORDER BY weekday ASC")
            return {Weekday(int(r["weekday"])): str(r["label"]) for r in cur.fetchall()}
        finally:
            conn.close()

    def set_day_label(self, weekday: Weekday, label: str | None) -> None:
        """Set the header label for a weekday; empty/None clears it."""
        text = (label or "").strip()
        conn = self._get_conn()
        try:
            if text:
                conn.execute(
                    """
                    INSERT INTO day_labels(weekday, label) VALUES (?, ?)
                    ON CONFLICT(weekday) DO UPDATE SET label = excluded.label
                    """,
                    (int(weekday), text),
                )
            else:
                conn.execute("DELETE FROM day_labels WHERE weekday = ?", (int(weekday),))
            conn.commit()
        finally:
            conn.close()

    def replace_contents(
        self,
        *,
        tasks: Iterable[tuple[str, bool]],
        templates: Iterable[tuple[str, frozenset[Weekday], Mapping[dt.date, bool]]],
        day_labels: Mapping[Weekday, str],
    ) -> None:
        """
        Replace everything in one transaction (used by snapshot import).

        Ids are reassigned in iteration order.
        """
        now = time.time()
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("DELETE FROM tasks")
            cur.execute("DELETE FROM templates")
            cur.execute("DELETE FROM done_log")
            cur.execute("DELETE FROM day_labels")
            for text, done in tasks:
                cur.execute(
                    "INSERT INTO tasks(text, done, created_at, updated_at) VALUES (?, ?, ?, ?)",
                    (text, int(bool(done)), now, now),
                )
            for text, weekdays, done_log in templates:
                cur.execute(
                    "INSERT INTO templates(text, weekdays, created_at, updated_at) VALUES (?, ?, ?, ?)",
                    (text, _weekdays_to_str(weekdays), now, now),
                )
                tpl_id = cur.lastrowid
                for day, done in done_log.items():
                    cur.execute(
                        "INSERT INTO done_log(template_id, day, done) VALUES (?, ?, ?)",
                        (tpl_id, day.isoformat(), int(bool(done))),
                    )
            for weekday, label in day_labels.items():
                if label.strip():
                    cur.execute(
                        "INSERT INTO day_labels(weekday, label) VALUES (?, ?)",
                        (int(weekday), label.strip()),
                    )
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        logger.info("TaskStore contents replaced total=%s", self.count_tasks())

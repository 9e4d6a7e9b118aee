# src/daily_todo/core/modes.py

from __future__ import annotations

"""
Input mode state machine.

The terminal driver feeds normalized key tokens into InputMachine.handle_key():
- single characters ("i", "j", "a", " ") as themselves,
- special keys as the upper-case names in SpecialKey (ENTER, ESC, ...).

Each Mode owns a handler; a key with no transition in the current mode is an
explicit no-op, never an error.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from ..tasks.task_api import create_recurring_from_input
from ..tasks.task_models import InvalidInput, NotFound, Task
from .ports import TaskRepo

logger = logging.getLogger(__name__)

CommandHandler = Callable[[str], str | None]


class Mode(StrEnum):
    EDIT = "edit"
    INSERT = "insert"
    TERMINATED = "terminated"


class InsertTarget(StrEnum):
    """What submitting the Insert-mode buffer produces."""

    TASK = "task"
    RECURRING = "recurring"
    COMMAND = "command"


class SpecialKey(StrEnum):
    ENTER = "ENTER"
    ESC = "ESC"
    BACKSPACE = "BACKSPACE"
    UP = "UP"
    DOWN = "DOWN"
    LEFT = "LEFT"
    RIGHT = "RIGHT"


INSERT_PROMPTS: dict[InsertTarget, str] = {
    InsertTarget.TASK: "new task",
    InsertTarget.RECURRING: "new recurring task (e.g. mon,fri: check mail)",
    InsertTarget.COMMAND: ":",
}


def is_printable(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


@dataclass(slots=True)
class InputMachine:
    store: TaskRepo
    directional_marks: bool = False
    command_handler: CommandHandler | None = None

    mode: Mode = Mode.EDIT
    target: InsertTarget = InsertTarget.TASK
    buffer: str = ""
    cursor: int = 0
    status: str = ""

    # ---- views ----

    def visible(self) -> list[Task]:
        return self.store.list_visible(self.store.today())

    def selected(self) -> Task | None:
        items = self.visible()
        if not items:
            return None
        self.cursor = max(0, min(self.cursor, len(items) - 1))
        return items[self.cursor]

    def clamp_cursor(self, count: int | None = None) -> None:
        n = len(self.visible()) if count is None else count
        self.cursor = 0 if n <= 0 else max(0, min(self.cursor, n - 1))

    @property
    def prompt(self) -> str:
        return INSERT_PROMPTS[self.target]

    # ---- dispatch ----

    def handle_key(self, key: str) -> Mode:
        """Process one key event completely and return the resulting mode."""
        before = self.mode
        if self.mode is Mode.EDIT:
            self._handle_edit(key)
        elif self.mode is Mode.INSERT:
            self._handle_insert(key)
        # Mode.TERMINATED ignores every key.
        if self.mode is not before:
            logger.debug("Mode %s -> %s (key=%r)", before, self.mode, key)
        return self.mode

    # ---- Edit mode ----

    def _handle_edit(self, key: str) -> None:
        action = _EDIT_ACTIONS.get(key)
        if action is None:
            return
        self.status = ""
        action(self)

    def _begin(self, target: InsertTarget) -> None:
        self.mode = Mode.INSERT
        self.target = target
        self.buffer = ""

    def _begin_task(self) -> None:
        self._begin(InsertTarget.TASK)

    def _begin_recurring(self) -> None:
        self._begin(InsertTarget.RECURRING)

    def _begin_command(self) -> None:
        self._begin(InsertTarget.COMMAND)

    def _move_down(self) -> None:
        self.cursor += 1
        self.clamp_cursor()

    def _move_up(self) -> None:
        self.cursor -= 1
        self.clamp_cursor()

    def _mark(self, done: bool | None) -> None:
        task = self.selected()
        if task is None:
            return
        try:
            if done is None:
                self.store.toggle_done(task.id)
            else:
                self.store.set_done(task.id, done)
        except NotFound:
            logger.debug("Mark ignored, task vanished id=%s", task.id)

    def _mark_left(self) -> None:
        self._mark(False if self.directional_marks else None)

    def _mark_right(self) -> None:
        self._mark(True if self.directional_marks else None)

    def _remove_selected(self) -> None:
        task = self.selected()
        if task is None:
            return
        try:
            self.store.remove(task.id)
        except NotFound:
            logger.debug("Remove ignored, task vanished id=%s", task.id)
        self.clamp_cursor()

    def _quit(self) -> None:
        self.mode = Mode.TERMINATED

    # ---- Insert mode ----

    def _handle_insert(self, key: str) -> None:
        if key == SpecialKey.ENTER:
            self._submit()
        elif key == SpecialKey.ESC:
            self.mode = Mode.EDIT
            self.buffer = ""
        elif key == SpecialKey.BACKSPACE:
            self.buffer = self.buffer[:-1]
        elif is_printable(key):
            self.buffer += key

    def _submit(self) -> None:
        text = self.buffer
        if self.target is InsertTarget.COMMAND:
            self.mode = Mode.EDIT
            self.buffer = ""
            if text.strip():
                self.status = self._run_command(text.strip())
            self.clamp_cursor()
            return

        try:
            if self.target is InsertTarget.RECURRING:
                task_id = create_recurring_from_input(self.store, text)
            else:
                task_id = self.store.create(text)
        except InvalidInput as e:
            # Stay in Insert with the buffer intact.
            if text.strip():
                self.status = str(e)
            return

        self.mode = Mode.EDIT
        self.buffer = ""
        self.status = ""
        ids = [t.id for t in self.visible()]
        if task_id in ids:
            self.cursor = ids.index(task_id)
        else:
            self.clamp_cursor(len(ids))

    def _run_command(self, line: str) -> str:
        if self.command_handler is None:
            return "Commands are not available."
        return self.command_handler(line) or ""


_EDIT_ACTIONS: dict[str, Callable[[InputMachine], None]] = {
    "i": InputMachine._begin_task,
    "r": InputMachine._begin_recurring,
    ":": InputMachine._begin_command,
    "j": InputMachine._move_down,
    SpecialKey.DOWN: InputMachine._move_down,
    "k": InputMachine._move_up,
    SpecialKey.UP: InputMachine._move_up,
    "h": InputMachine._mark_left,
    SpecialKey.LEFT: InputMachine._mark_left,
    "l": InputMachine._mark_right,
    SpecialKey.RIGHT: InputMachine._mark_right,
    "x": InputMachine._remove_selected,
    "q": InputMachine._quit,
}

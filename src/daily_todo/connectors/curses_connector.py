# src/daily_todo/connectors/curses_connector.py

from __future__ import annotations

import curses
import datetime as dt
import logging
import os

from ..core.modes import InputMachine, Mode, SpecialKey
from ..core.state import AppState
from ..tasks.task_models import Task, Weekday

logger = logging.getLogger(__name__)

EDIT_HELP = "i new  r recurring  j/k move  h/l done  x remove  :help  q quit"

_STR_KEYS: dict[str, str] = {
    "\n": SpecialKey.ENTER,
    "\r": SpecialKey.ENTER,
    "\x1b": SpecialKey.ESC,
    "\x7f": SpecialKey.BACKSPACE,
    "\b": SpecialKey.BACKSPACE,
}

_INT_KEYS: dict[int, str] = {
    curses.KEY_ENTER: SpecialKey.ENTER,
    10: SpecialKey.ENTER,
    13: SpecialKey.ENTER,
    27: SpecialKey.ESC,
    curses.KEY_BACKSPACE: SpecialKey.BACKSPACE,
    127: SpecialKey.BACKSPACE,
    curses.KEY_UP: SpecialKey.UP,
    curses.KEY_DOWN: SpecialKey.DOWN,
    curses.KEY_LEFT: SpecialKey.LEFT,
    curses.KEY_RIGHT: SpecialKey.RIGHT,
}


def normalize_key(raw: str | int) -> str | None:
    """Translate a get_wch() result into a key token for InputMachine (None = ignore)."""
    if isinstance(raw, int):
        return _INT_KEYS.get(raw)
    if raw in _STR_KEYS:
        return _STR_KEYS[raw]
    if len(raw) == 1 and raw.isprintable():
        return raw
    return None


def status_box(done: bool, *, ascii_boxes: bool = False) -> str:
    if ascii_boxes:
        return "[D]" if done else "[ ]"
    return "☑" if done else "☐"


def header_text(day: dt.date, label: str | None) -> str:
    name = Weekday.of(day).label
    return f"{name} - {label}" if label else name


def format_task(task: Task, *, ascii_boxes: bool = False) -> str:
    marker = ""
    if task.origin.is_recurring:
        marker = " (r)" if ascii_boxes else " ↻"
    return f"{status_box(task.done, ascii_boxes=ascii_boxes)} {task.text}{marker}"


def bottom_line(machine: InputMachine) -> tuple[str, str]:
    """(label, text) for the bottom row: the input prompt in Insert mode, else status/help."""
    if machine.mode is Mode.INSERT:
        return machine.prompt, machine.buffer
    return "", machine.status or EDIT_HELP


def draw(stdscr: curses.window, state: AppState, today: dt.date) -> None:
    machine = state.machine
    ascii_boxes = bool(getattr(state.settings, "ascii_boxes", False))
    stdscr.erase()
    height, width = stdscr.getmaxyx()
    if height < 4 or width < 20:
        stdscr.addnstr(0, 0, "terminal too small", max(0, width - 1))
        stdscr.refresh()
        return

    label = state.task_store.get_day_label(Weekday.of(today))
    title = header_text(today, label)
    date_text = today.isoformat()
    stdscr.addnstr(0, 1, title, max(0, width - len(date_text) - 3), curses.A_BOLD)
    if len(title) + len(date_text) + 3 < width:
        stdscr.addnstr(0, width - len(date_text) - 1, date_text, len(date_text), curses.A_DIM)
    try:
        stdscr.hline(1, 0, curses.ACS_HLINE | curses.A_DIM, width)
    except curses.error:
        pass

    tasks = state.task_store.list_visible(today)
    machine.clamp_cursor(len(tasks))
    list_top = 2
    list_rows = max(1, height - list_top - 2)
    # Keep the cursor on screen.
    offset = max(0, machine.cursor - list_rows + 1)

    if not tasks:
        stdscr.addnstr(list_top, 2, "nothing to do today", max(0, width - 3), curses.A_DIM)
    for row, task in enumerate(tasks[offset : offset + list_rows]):
        idx = offset + row
        attr = curses.A_NORMAL
        if task.done:
            attr |= curses.A_DIM
        if idx == machine.cursor and machine.mode is Mode.EDIT:
            attr = curses.color_pair(1) | curses.A_BOLD
        text = format_task(task, ascii_boxes=ascii_boxes)
        stdscr.addnstr(list_top + row, 1, text.ljust(width - 2), max(0, width - 2), attr)

    prompt, text = bottom_line(machine)
    y = height - 1
    if prompt:
        lead = f"{prompt}: " if prompt != ":" else ":"
        visible = max(0, width - len(lead) - 1)
        segment = text[-visible:] if visible else ""
        stdscr.addnstr(y, 0, lead + segment, max(0, width - 1), curses.A_BOLD)
        curses.curs_set(1)
        stdscr.move(y, min(width - 1, len(lead) + len(segment)))
    else:
        curses.curs_set(0)
        stdscr.addnstr(y, 1, text, max(0, width - 2), curses.A_DIM)
    stdscr.refresh()


def _main(stdscr: curses.window, state: AppState) -> None:
    curses.curs_set(0)
    try:
        curses.use_default_colors()
        curses.start_color()
        curses.init_pair(1, curses.COLOR_BLACK, curses.COLOR_MAGENTA)  # selection
    except curses.error:
        logger.debug("Terminal has no color support.")
    stdscr.keypad(True)
    stdscr.timeout(int(getattr(state.settings, "tick_ms", 250)))

    machine = state.machine
    clock = state.task_store.today
    current_day = clock()
    logger.info("Terminal session started day=%s", current_day)

    while machine.mode is not Mode.TERMINATED:
        draw(stdscr, state, current_day)
        try:
            raw = stdscr.get_wch()
        except curses.error:
            raw = None  # tick

        day = clock()
        if day != current_day:
            logger.info("Day boundary crossed %s -> %s", current_day, day)
            current_day = day
            machine.clamp_cursor()

        if raw is None or raw == curses.KEY_RESIZE:
            continue
        key = normalize_key(raw)
        if key is None:
            continue
        machine.handle_key(key)

    logger.info("Terminal session finished.")


def run_curses_loop(state: AppState) -> None:
    """Run the TUI until the state machine terminates (q)."""
    # Make Esc leave Insert mode without the default one-second delay.
    os.environ.setdefault("ESCDELAY", "25")
    curses.wrapper(_main, state)

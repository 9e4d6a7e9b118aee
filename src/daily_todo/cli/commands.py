# src/daily_todo/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.state import AppState
from ..tasks.recurrence import format_weekdays, parse_weekday
from ..tasks.task_api import load_snapshot, save_snapshot
from ..tasks.task_models import InvalidInput, Weekday

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple ':' command registry used by the command line (:help, :label, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "label mon business day" (a leading ':' is optional).
        Returns a reply string or None for a blank line.
        """
        parts = line.strip().removeprefix(":").split()
        if not parts:
            return None

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: :{name}. Use :help to list available commands."

        try:
            return handler(state, args)
        except InvalidInput as e:
            return str(e)
        except OSError as e:
            logger.warning("Command :%s failed: %s", name, e)
            return f"{name}: {e.strerror or e}"

    def build_help(self) -> str:
        parts = [f":{name} - {help_text}" for name, help_text in self._help.items()]
        return " | ".join(parts)


registry = CommandRegistry()


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_label(state: AppState, args: list[str]) -> str:
    """
    :label mon business day  -> set Monday's header label
    :label mon               -> clear it
    """
    if not args:
        return "Usage: :label <weekday> [text]"
    day: Weekday = parse_weekday(args[0])
    text = " ".join(args[1:])
    state.task_store.set_day_label(day, text)
    if text:
        return f"{day.label} - {text}"
    return f"Label cleared for {day.label}."


def cmd_templates(state: AppState, args: list[str]) -> str:
    templates = state.task_store.list_templates()
    if not templates:
        return "No recurring tasks."
    return "; ".join(f"{tpl.text} ({format_weekdays(tpl.weekdays)})" for tpl in templates)


def cmd_export(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: :export <path>"
    path = save_snapshot(state.task_store, " ".join(args))
    return f"Exported to {path}"


def cmd_import(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: :import <path>"
    path = " ".join(args)
    load_snapshot(state.task_store, path)
    state.machine.clamp_cursor()
    return f"Imported {state.task_store.count_tasks()} tasks from {path}"


registry.register("help", cmd_help, help_text="show commands", aliases=["h", "?"])
registry.register("label", cmd_label, help_text="set a weekday header: :label mon business day")
registry.register("templates", cmd_templates, help_text="list recurring tasks", aliases=["t"])
registry.register("export", cmd_export, help_text="save a JSON snapshot: :export <path>")
registry.register("import", cmd_import, help_text="replace tasks from a JSON snapshot: :import <path>")

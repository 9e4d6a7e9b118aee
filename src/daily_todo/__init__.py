"""daily-todo: a terminal task manager with weekday-recurring tasks."""

__version__ = "0.1.0"

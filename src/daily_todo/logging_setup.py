# src/daily_todo/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable:
    - allow daily_todo logs
    - suppress everything else (third-party, 'py.warnings') unless ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("daily_todo."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/daily_todo",
    console_level: int | None = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Configure logging with:
    - File handler: full logs for debugging
    - Console handler (stderr): filtered; pass console_level=None while curses
      owns the terminal, since stderr writes would corrupt the screen

    Call this ONCE, very early (before first logger.info). Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "daily_todo.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if console_level is not None:
        ch = logging.StreamHandler(sys.stderr)
        ch.setLevel(console_level)
        ch.setFormatter(fmt)
        ch.addFilter(_ConsoleNoiseFilter())
        root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)
    return log_file

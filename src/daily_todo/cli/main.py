# src/daily_todo/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState (opening the task database), then hands
the terminal to the curses driver until the user quits with q.
"""

from __future__ import annotations

import logging
import sys

from ..cli.bootstrap import StartupError, create_initial_state, shutdown
from ..config import get_settings
from ..connectors.curses_connector import run_curses_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()

    # curses owns the terminal: file logging only, at the configured level and above.
    file_level = getattr(logging, settings.log_level, logging.INFO)
    log_file = setup_logging(log_dir=settings.log_dir, console_level=None, file_level=file_level)

    logger.info("Starting %s...", settings.app_name)

    try:
        state = create_initial_state(settings=settings)
    except StartupError as e:
        print(f"{settings.app_name}: {e}", file=sys.stderr)
        print(f"See {log_file} for details.", file=sys.stderr)
        return 1

    try:
        run_curses_loop(state)
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt, exiting.")
    finally:
        shutdown(state)
        logger.info("Bye.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

# src/daily_todo/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing is read at import time; get_settings() builds the object on first use.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "DAILY_TODO"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path
    log_dir: Path

    # ---- Behaviour ----
    seed_defaults: bool
    directional_marks: bool
    tick_ms: int
    ascii_boxes: bool

    @staticmethod
    def from_env() -> Settings:
        app_name = _env(_k("APP_NAME"), "daily-todo").strip() or "daily-todo"
        log_level = _env(_k("LOG_LEVEL"), "INFO").strip().upper() or "INFO"

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/daily_todo"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")
        log_dir = _env_path(_k("LOG_DIR"), data_dir)

        seed_defaults = _env_bool(_k("SEED_DEFAULTS"), True)
        # h/l both toggle by default; directional: l marks done, h marks not done.
        directional_marks = _env_bool(_k("DIRECTIONAL_MARKS"), False)
        tick_ms = max(10, _env_int(_k("TICK_MS"), 250))
        ascii_boxes = _env_bool(_k("ASCII_BOXES"), sys.platform.startswith("win"))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            log_dir=log_dir,
            seed_defaults=seed_defaults,
            directional_marks=directional_marks,
            tick_ms=tick_ms,
            ascii_boxes=ascii_boxes,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        load_dotenv(override=False)
        _SETTINGS = Settings.from_env()
    return _SETTINGS

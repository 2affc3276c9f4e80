# src/pocket_todo/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing is required at import time; every value has a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "PTODO"

STORAGE_BACKENDS = ("json", "sqlite")

load_dotenv(override=False)


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


def _env_choice(name: str, choices: tuple[str, ...], default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    return value if value in choices else default


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

    # ---- Storage ----
    data_dir: Path
    storage_backend: str
    storage_key: str
    db_path: Path

    # ---- Import / export ----
    export_path: Path

    # ---- Console defaults ----
    sort_incomplete_first: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "pocket-todo").strip() or "pocket-todo"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/pocket_todo"))
        storage_backend = _env_choice(_k("STORAGE_BACKEND"), STORAGE_BACKENDS, "json")
        # Versioned key: bump the suffix whenever the record layout changes.
        storage_key = _env(_k("STORAGE_KEY"), "pocket_todo_tasks_v1").strip() or "pocket_todo_tasks_v1"
        db_path = _env_path(_k("DB_PATH"), data_dir / "tasks.sqlite3")

        export_path = _env_path(_k("EXPORT_PATH"), Path("tasks-export.json"))

        sort_incomplete_first = _env_bool(_k("SORT_INCOMPLETE_FIRST"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            storage_backend=storage_backend,
            storage_key=storage_key,
            db_path=db_path,
            export_path=export_path,
            sort_incomplete_first=sort_incomplete_first,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS

# src/pocket_todo/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- picks the persistence backend and wires the TaskStore into AppState,
- hydrates the store from disk.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import Persistence
from ..core.state import AppState, ViewQuery
from ..storage.json_file import JsonFilePersistence
from ..storage.sqlite_kv import SqliteKVPersistence
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def create_persistence(settings) -> Persistence:
    backend = str(getattr(settings, "storage_backend", "json")).lower()
    if backend == "sqlite":
        return SqliteKVPersistence(settings.db_path)
    if backend != "json":
        logger.warning("Unknown storage backend %r, falling back to json.", backend)
    return JsonFilePersistence(settings.data_dir)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = TaskStore(create_persistence(settings), key=settings.storage_key)
    store.load()

    return AppState(
        settings=settings,
        task_store=store,
        query=ViewQuery(sort_incomplete_first=bool(getattr(settings, "sort_incomplete_first", True))),
    )

# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from pocket_todo.core.state import AppState, ViewQuery
from pocket_todo.tasks.task_store import TaskStore

from .fakes import FakeClock, FakePersistence, SequentialIds


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and .env files.
    """
    return SimpleNamespace(
        app_name="pocket-todo-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        storage_backend="json",
        storage_key="pocket_todo_tasks_test",
        db_path=tmp_path / "data" / "tasks.sqlite3",
        export_path=tmp_path / "tasks-export.json",
        sort_incomplete_first=True,
    )


@pytest.fixture()
def persistence() -> FakePersistence:
    return FakePersistence()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(persistence: FakePersistence, clock: FakeClock) -> TaskStore:
    """TaskStore over in-memory persistence, with a fixed clock and t1, t2, ... ids."""
    s = TaskStore(persistence, key="tasks_test", clock=clock, id_factory=SequentialIds())
    s.load()
    return s


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore) -> AppState:
    return AppState(settings=settings, task_store=store, query=ViewQuery())

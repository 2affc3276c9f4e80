# src/pocket_todo/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The task store depends on a Protocol instead of a concrete backend.
This keeps storage swappable (JSON file, SQLite) and makes testing easier.
"""

from typing import Any, Protocol

TaskRecord = dict[str, Any]
# Wire form of a task: {"id", "text", "done", "priority", "due", "createdAt"}.


class Persistence(Protocol):
    """
    Durable key-value storage holding full snapshots.

    - load() returns the decoded value, or None when nothing was stored yet.
      Raises PersistenceReadError when the stored value cannot be decoded.
    - save() replaces the value atomically.
      Raises PersistenceWriteError when the write fails.
    """

    def load(self, key: str) -> Any | None: ...

    def save(self, key: str, snapshot: list[TaskRecord]) -> None: ...

# src/pocket_todo/core/errors.py

from __future__ import annotations


class PocketTodoError(Exception):
    """Base class for all pocket_todo errors."""


class PersistenceError(PocketTodoError):
    """Durable storage failed. The store recovers from these locally."""


class PersistenceReadError(PersistenceError):
    """Stored snapshot is corrupt or unreadable."""


class PersistenceWriteError(PersistenceError):
    """Snapshot could not be written (disk full, permissions, locked db, ...)."""


class FormatError(PocketTodoError, ValueError):
    """Import payload is not a JSON array of task records."""

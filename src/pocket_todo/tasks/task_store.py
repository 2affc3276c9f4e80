# src/pocket_todo/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace

from ..core.errors import PersistenceReadError, PersistenceWriteError
from ..core.ports import Persistence
from .task_models import Priority, Task, clean_text, new_task_id, now_ms
from .task_transfer import sanitize_records

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "pocket_todo_tasks_v1"


class TaskStore:
    """
    Owns the task collection and its durability.

    The collection is newest-first: add() prepends.
    Every mutation ends with a full-snapshot save. Save failures are logged
    and ignored; the in-memory list stays the source of truth for the session.

    Mutations are total: an unknown id or empty text is a no-op, not an error.
    """

    def __init__(
        self,
        persistence: Persistence,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        clock: Callable[[], int] = now_ms,
        id_factory: Callable[[], str] = new_task_id,
    ) -> None:
        self._persistence = persistence
        self._key = key
        self.clock = clock
        self.id_factory = id_factory
        self._tasks: list[Task] = []
        self._last_created_at = 0

    # ---- low-level helpers ----

    def _save(self) -> None:
        snapshot = [t.to_record() for t in self._tasks]
        try:
            self._persistence.save(self._key, snapshot)
        except PersistenceWriteError:
            logger.warning(
                "Saving %d tasks failed (key=%s); keeping in-memory state.",
                len(snapshot),
                self._key,
                exc_info=True,
            )
            return
        logger.debug("Saved %d tasks key=%s", len(snapshot), self._key)

    def _next_created_at(self) -> int:
        # Strictly increasing within a session, even when the clock stalls.
        ts = max(int(self.clock()), self._last_created_at + 1)
        self._last_created_at = ts
        return ts

    def _index_of(self, task_id: str) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    # ---- read API ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    def count_tasks(self) -> int:
        return len(self._tasks)

    def get_task(self, task_id: str) -> Task | None:
        idx = self._index_of(task_id)
        return self._tasks[idx] if idx is not None else None

    def find_by_prefix(self, prefix: str) -> Task | None:
        """Unique task whose id starts with `prefix` (None if zero or several match)."""
        prefix = prefix.strip()
        if not prefix:
            return None
        matches = [t for t in self._tasks if t.id.startswith(prefix)]
        return matches[0] if len(matches) == 1 else None

    # ---- lifecycle ----

    def load(self) -> None:
        """Hydrate from persistence. Unreadable or missing data means an empty list."""
        try:
            data = self._persistence.load(self._key)
        except PersistenceReadError:
            logger.warning("Stored tasks unreadable (key=%s); starting empty.", self._key, exc_info=True)
            data = None

        if data is None:
            self._tasks = []
        elif not isinstance(data, list):
            logger.warning("Stored tasks are not a list (key=%s); starting empty.", self._key)
            self._tasks = []
        else:
            self._tasks = sanitize_records(
                data, now_ms_value=int(self.clock()), id_factory=self.id_factory
            )
        logger.info("TaskStore loaded key=%s total=%d", self._key, len(self._tasks))

    # ---- mutations ----

    def add(
        self,
        text: str,
        priority: Priority | str = Priority.MEDIUM,
        due: str | None = None,
    ) -> Task | None:
        clean = clean_text(text or "")
        if not clean:
            return None

        task = Task(
            id=self.id_factory(),
            text=clean,
            done=False,
            priority=Priority.from_raw(priority),
            due=(due or "").strip() or None,
            created_at=self._next_created_at(),
        )
        self._tasks.insert(0, task)
        logger.debug("Task added id=%s priority=%s due=%s", task.id, task.priority.value, task.due)
        self._save()
        return task

    def toggle(self, task_id: str) -> Task | None:
        idx = self._index_of(task_id)
        updated: Task | None = None
        if idx is not None:
            updated = replace(self._tasks[idx], done=not self._tasks[idx].done)
            self._tasks[idx] = updated
        self._save()
        return updated

    def update(self, task_id: str, new_text: str) -> Task | None:
        """Replace task text. Empty text cancels the edit (it never deletes)."""
        clean = clean_text(new_text or "")
        if not clean:
            return None

        idx = self._index_of(task_id)
        updated: Task | None = None
        if idx is not None:
            updated = replace(self._tasks[idx], text=clean)
            self._tasks[idx] = updated
        self._save()
        return updated

    def remove(self, task_id: str) -> bool:
        before = len(self._tasks)
        self._tasks = [t for t in self._tasks if t.id != task_id]
        self._save()
        return len(self._tasks) != before

    def clear_completed(self) -> int:
        before = len(self._tasks)
        self._tasks = [t for t in self._tasks if not t.done]
        self._save()
        return before - len(self._tasks)

    def clear_all(self) -> int:
        """Drop every task. Callers must confirm with the user first."""
        removed = len(self._tasks)
        self._tasks = []
        self._save()
        logger.info("All tasks cleared (%d removed)", removed)
        return removed

    def replace_all(self, tasks: Iterable[Task]) -> None:
        """Swap in an already sanitized collection in one step."""
        self._tasks = list(tasks)
        self._save()

# src/pocket_todo/tasks/task_view.py

"""
Derived view of the task collection.

compute_view() is pure: it reads tasks and query parameters and returns a
new ordered list plus statistics. The source tasks are never modified, so it
can be recomputed on every query change.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum

from .task_models import Task

# fromisoformat() also takes "20260314" and "2026-W11-1"; only the dashed form counts.
_ISO_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


class ViewFilter(StrEnum):
    ALL = "all"
    ACTIVE = "active"
    DONE = "done"

    @classmethod
    def from_raw(cls, raw: str | None) -> ViewFilter:
        if not raw:
            return cls.ALL
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.ALL


@dataclass(frozen=True, slots=True)
class TaskView:
    items: tuple[Task, ...]
    active_count: int
    done_count: int
    completion_percent: int
    overdue_ids: frozenset[str] = field(default_factory=frozenset)

    @property
    def total(self) -> int:
        return self.active_count + self.done_count


def is_overdue(task: Task, today: date | None = None) -> bool:
    """Due date strictly before today, task still open. Bad dates are never overdue."""
    if not task.due or task.done or not _ISO_DATE.fullmatch(task.due):
        return False
    try:
        due = date.fromisoformat(task.due)
    except (TypeError, ValueError):
        return False
    return due < (today or date.today())


def completion_percent(done_count: int, total: int) -> int:
    if total <= 0:
        return 0
    # round half up, in integers
    return (200 * done_count + total) // (2 * total)


def _sort_key(task: Task, sort_incomplete_first: bool) -> tuple:
    return (
        task.done if sort_incomplete_first else False,
        task.due is None,
        task.due or "",
        task.priority.rank,
        -task.created_at,
    )


def compute_view(
    tasks: Iterable[Task],
    *,
    filter: ViewFilter | str = ViewFilter.ALL,
    search_text: str = "",
    sort_incomplete_first: bool = True,
    today: date | None = None,
) -> TaskView:
    all_tasks = list(tasks)

    active_count = sum(1 for t in all_tasks if not t.done)
    done_count = len(all_tasks) - active_count

    mode = ViewFilter.from_raw(filter)
    if mode is ViewFilter.ACTIVE:
        items = [t for t in all_tasks if not t.done]
    elif mode is ViewFilter.DONE:
        items = [t for t in all_tasks if t.done]
    else:
        items = list(all_tasks)

    needle = (search_text or "").strip().casefold()
    if needle:
        items = [t for t in items if needle in t.text.casefold()]

    items.sort(key=lambda t: _sort_key(t, sort_incomplete_first))

    today = today or date.today()
    overdue = frozenset(t.id for t in items if is_overdue(t, today))

    return TaskView(
        items=tuple(items),
        active_count=active_count,
        done_count=done_count,
        completion_percent=completion_percent(done_count, len(all_tasks)),
        overdue_ids=overdue,
    )

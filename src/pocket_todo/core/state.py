# src/pocket_todo/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field

from ..tasks.task_store import TaskStore
from ..tasks.task_view import TaskView, ViewFilter, compute_view


@dataclass
class ViewQuery:
    """Current list selections of the presentation layer (never persisted)."""

    filter: ViewFilter = ViewFilter.ALL
    search_text: str = ""
    sort_incomplete_first: bool = True


@dataclass
class AppState:
    # Settings object kept on the state for easy access in commands.
    settings: object

    task_store: TaskStore
    query: ViewQuery = field(default_factory=ViewQuery)

    # Ids in the order of the last printed listing; row numbers resolve against it.
    last_listing: list[str] = field(default_factory=list)

    def current_view(self) -> TaskView:
        return compute_view(
            self.task_store.tasks,
            filter=self.query.filter,
            search_text=self.query.search_text,
            sort_incomplete_first=self.query.sort_incomplete_first,
        )

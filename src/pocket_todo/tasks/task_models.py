# src/pocket_todo/tasks/task_models.py

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

TEXT_MAX_LEN = 500


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_raw(cls, raw: Any) -> Priority:
        """Coerce external input; anything unknown becomes MEDIUM."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            return cls.MEDIUM
        try:
            return cls(raw)
        except ValueError:
            return cls.MEDIUM

    @property
    def rank(self) -> int:
        # high sorts first
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


def new_task_id() -> str:
    return uuid.uuid4().hex


def now_ms() -> int:
    return int(time.time() * 1000)


def clean_text(raw: str) -> str:
    """Trim and cap task text."""
    # Trim again after the cut: it may land right after a space.
    return raw.strip()[:TEXT_MAX_LEN].rstrip()


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    text: str
    done: bool
    priority: Priority
    due: str | None
    created_at: int

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "done": self.done,
            "priority": self.priority.value,
            "due": self.due,
            "createdAt": self.created_at,
        }

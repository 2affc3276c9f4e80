# src/pocket_todo/tasks/task_transfer.py

"""
Import / export of the task collection.

Export writes every task as a plain record, in collection order.
Import accepts any JSON array and sanitizes each record on its own:
one broken record never rejects its neighbours, but a payload that is not
an array is rejected as a whole and the collection is left untouched.
"""

from __future__ import annotations

import json
import logging
import math
import os
from collections.abc import Callable, Iterable
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..core.errors import FormatError, PersistenceWriteError
from .task_models import Priority, Task, clean_text, new_task_id, now_ms

if TYPE_CHECKING:
    from .task_store import TaskStore

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_NAME = "tasks-export.json"
PLACEHOLDER_TEXT = "Untitled task"


# ---- sanitation ----


def _coerce_id(raw: Any, id_factory: Callable[[], str]) -> str:
    if raw is None or raw is False:
        return id_factory()
    value = str(raw).strip()
    return value or id_factory()


def _coerce_text(raw: Any) -> str:
    if raw is None or raw is False:
        return PLACEHOLDER_TEXT
    return clean_text(str(raw)) or PLACEHOLDER_TEXT


def _coerce_due(raw: Any) -> str | None:
    if raw is None or raw is False:
        return None
    value = str(raw).strip()
    return value or None


def _coerce_created_at(raw: Any, fallback: int) -> int:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(value) or value == 0:
        return fallback
    return int(value)


def sanitize_record(
    raw: Any,
    *,
    now_ms_value: int,
    id_factory: Callable[[], str] = new_task_id,
) -> Task:
    """Turn one untrusted record into a valid Task. Never raises."""
    rec = raw if isinstance(raw, dict) else {}
    return Task(
        id=_coerce_id(rec.get("id"), id_factory),
        text=_coerce_text(rec.get("text")),
        done=bool(rec.get("done")),
        priority=Priority.from_raw(rec.get("priority")),
        due=_coerce_due(rec.get("due")),
        created_at=_coerce_created_at(rec.get("createdAt"), now_ms_value),
    )


def sanitize_records(
    records: Iterable[Any],
    *,
    now_ms_value: int | None = None,
    id_factory: Callable[[], str] = new_task_id,
) -> list[Task]:
    """
    Sanitize a sequence of records.

    A record that repeats an id already seen earlier in the sequence gets a
    fresh id, so the result always satisfies id uniqueness.
    """
    if now_ms_value is None:
        now_ms_value = now_ms()

    out: list[Task] = []
    seen: set[str] = set()
    for raw in records:
        task = sanitize_record(raw, now_ms_value=now_ms_value, id_factory=id_factory)
        while task.id in seen:
            task = replace(task, id=id_factory())
        seen.add(task.id)
        out.append(task)
    return out


# ---- export ----


def export_records(store: TaskStore) -> list[dict[str, Any]]:
    return [t.to_record() for t in store.tasks]


def export_payload(store: TaskStore) -> str:
    """Human-readable JSON array of every task, in collection order."""
    return json.dumps(export_records(store), ensure_ascii=False, indent=2)


def export_to_file(store: TaskStore, path: str | Path = DEFAULT_EXPORT_NAME) -> Path:
    path = Path(path).expanduser()
    payload = export_payload(store)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(payload, "utf-8")
        os.replace(tmp, path)
    except OSError as e:
        raise PersistenceWriteError(f"Cannot write export file {path}: {e}") from e
    logger.info("Exported %d tasks to %s", store.count_tasks(), path)
    return path


# ---- import ----


def import_payload(store: TaskStore, raw: Any) -> int:
    """
    Replace the whole collection with the tasks found in `raw`.

    `raw` is JSON text (str/bytes) or an already decoded value.
    Raises FormatError if it is not a JSON array; the store is not touched then.
    Returns the number of imported tasks.
    """
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            data = json.loads(raw)
        except (ValueError, RecursionError) as e:
            raise FormatError("Import payload is not valid JSON.") from e
    else:
        data = raw

    if not isinstance(data, list):
        raise FormatError("Import payload must be a JSON array of tasks.")

    tasks = sanitize_records(data, now_ms_value=store.clock(), id_factory=store.id_factory)
    store.replace_all(tasks)
    logger.info("Imported %d tasks", len(tasks))
    return len(tasks)


def import_from_file(store: TaskStore, path: str | Path) -> int:
    path = Path(path).expanduser()
    try:
        raw = path.read_text("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FormatError(f"Cannot read import file {path}: {e}") from e
    return import_payload(store, raw)

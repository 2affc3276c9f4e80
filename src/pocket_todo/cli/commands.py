# src/pocket_todo/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from datetime import date
from typing import cast

from ..core.errors import FormatError, PersistenceWriteError
from ..core.state import AppState
from ..tasks.task_models import Priority, Task
from ..tasks.task_transfer import DEFAULT_EXPORT_NAME, export_to_file, import_from_file
from ..tasks.task_view import TaskView, ViewFilter

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

_PRIORITY_TOKENS = {
    "!h": Priority.HIGH,
    "!high": Priority.HIGH,
    "!m": Priority.MEDIUM,
    "!med": Priority.MEDIUM,
    "!medium": Priority.MEDIUM,
    "!l": Priority.LOW,
    "!low": Priority.LOW,
}

_PRIORITY_MARK = {Priority.HIGH: "↑", Priority.MEDIUM: "•", Priority.LOW: "↓"}


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("  Plain text (no slash) adds a task.")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- input parsing / rendering helpers ----


def parse_task_words(words: list[str]) -> tuple[str, Priority, str | None, str | None]:
    """
    Split user words into (text, priority, due, error).

    Recognized tokens anywhere in the line:
      !high / !medium / !low (or !h / !m / !l)
      due:YYYY-MM-DD
    """
    priority = Priority.MEDIUM
    due: str | None = None
    text_words: list[str] = []

    for w in words:
        low = w.lower()
        if low in _PRIORITY_TOKENS:
            priority = _PRIORITY_TOKENS[low]
            continue
        if low.startswith("due:"):
            raw_due = w[4:]
            try:
                due = date.fromisoformat(raw_due).isoformat()
            except ValueError:
                return "", priority, None, f"Invalid due date {raw_due!r}; use YYYY-MM-DD."
            continue
        text_words.append(w)

    return " ".join(text_words), priority, due, None


def format_task_line(row: int, task: Task, *, overdue: bool) -> str:
    box = "[x]" if task.done else "[ ]"
    parts = [f"{row:>3}. {box} {_PRIORITY_MARK[task.priority]} {task.text}"]
    if task.due:
        parts.append(f"(due {task.due}{', overdue' if overdue else ''})")
    parts.append(f"#{task.id[:6]}")
    return " ".join(parts)


def format_summary(view: TaskView) -> str:
    return (
        f"{view.active_count} active • {view.done_count} done • "
        f"{view.total} total • Done {view.completion_percent}%"
    )


def render_view(state: AppState) -> str:
    view = state.current_view()
    state.last_listing = [t.id for t in view.items]

    q = state.query
    header = f"Filter: {q.filter.value}"
    if q.search_text:
        header += f" • Search: {q.search_text!r}"
    header += f" • Incomplete first: {'on' if q.sort_incomplete_first else 'off'}"

    lines = [header]
    if not view.items:
        lines.append("  No matching tasks. Try a different search or add one.")
    for row, task in enumerate(view.items, start=1):
        lines.append(format_task_line(row, task, overdue=task.id in view.overdue_ids))
    lines.append(format_summary(view))
    return "\n".join(lines)


def resolve_task(state: AppState, ref: str) -> Task | None:
    """Resolve a row number from the last listing, or an id prefix (`#` forces a prefix)."""
    ref = ref.strip()
    if ref.startswith("#"):
        return state.task_store.find_by_prefix(ref.lstrip("#"))
    if ref.isdigit():
        idx = int(ref) - 1
        if 0 <= idx < len(state.last_listing):
            return state.task_store.get_task(state.last_listing[idx])
        return None
    return state.task_store.find_by_prefix(ref)


def add_from_words(state: AppState, words: list[str]) -> str:
    text, priority, due, error = parse_task_words(words)
    if error:
        return error
    task = state.task_store.add(text, priority, due)
    if task is None:
        return "Nothing to add (empty text)."
    return f"Added: {task.text} [{task.priority.value}]" + (f" due {task.due}" if task.due else "")


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /add <text> [!high|!medium|!low] [due:YYYY-MM-DD]"
    return add_from_words(state, args)


def cmd_list(state: AppState, args: list[str]) -> str:
    return render_view(state)


def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <row|id>"
    task = resolve_task(state, args[0])
    if task is None:
        return f"No task matches {args[0]!r}."
    updated = state.task_store.toggle(task.id)
    if updated is None:
        return f"No task matches {args[0]!r}."
    return f"{'Done' if updated.done else 'Reopened'}: {updated.text}"


def cmd_edit(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /edit <row|id> <new text>"
    task = resolve_task(state, args[0])
    if task is None:
        return f"No task matches {args[0]!r}."
    updated = state.task_store.update(task.id, " ".join(args[1:]))
    if updated is None:
        return "Edit cancelled (empty text)."
    return f"Updated: {updated.text}"


def cmd_rm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /rm <row|id>"
    task = resolve_task(state, args[0])
    if task is None or not state.task_store.remove(task.id):
        return f"No task matches {args[0]!r}."
    return f"Deleted: {task.text}"


def cmd_filter(state: AppState, args: list[str]) -> str:
    if not args:
        return f"Filter is {state.query.filter.value}. Use /filter all | active | done."
    value = args[0].lower()
    if value not in {f.value for f in ViewFilter}:
        return "Usage: /filter all | active | done"
    state.query.filter = ViewFilter(value)
    return render_view(state)


def cmd_search(state: AppState, args: list[str]) -> str:
    state.query.search_text = " ".join(args).strip()
    return render_view(state)


def cmd_sort(state: AppState, args: list[str]) -> str:
    """
    /sort      -> toggle "incomplete first"
    /sort on   -> incomplete tasks first
    /sort off  -> completed and open tasks interleaved
    """
    if not args:
        state.query.sort_incomplete_first = not state.query.sort_incomplete_first
    else:
        arg = args[0].lower()
        if arg in ("on", "1", "true", "yes"):
            state.query.sort_incomplete_first = True
        elif arg in ("off", "0", "false", "no"):
            state.query.sort_incomplete_first = False
        else:
            return "Usage: /sort [on|off]"
    return render_view(state)


def cmd_stats(state: AppState, args: list[str]) -> str:
    return format_summary(state.current_view())


def cmd_clear_done(state: AppState, args: list[str]) -> str:
    removed = state.task_store.clear_completed()
    if not removed:
        return "No completed tasks to clear."
    return f"Cleared {removed} completed task(s)."


def cmd_clear_all(state: AppState, args: list[str]) -> str:
    total = state.task_store.count_tasks()
    if not total:
        return "Nothing to clear."
    if not args or args[0].lower() != "yes":
        return f"This deletes ALL {total} tasks and cannot be undone. Type /clear-all yes to confirm."
    state.task_store.clear_all()
    state.last_listing = []
    return f"Cleared all {total} task(s)."


def cmd_export(
    state: AppState,
    args: list[str],
    emit: CommandEmitter | None = None,
) -> str:
    if not state.task_store.count_tasks():
        return "Nothing to export."
    target = args[0] if args else getattr(state.settings, "export_path", DEFAULT_EXPORT_NAME)
    try:
        path = export_to_file(state.task_store, target)
    except PersistenceWriteError as e:
        logger.warning("Export failed: %s", e)
        return f"Export failed: {e}"
    return f"Exported {state.task_store.count_tasks()} task(s) to {path}"


def cmd_import(
    state: AppState,
    args: list[str],
    emit: CommandEmitter | None = None,
) -> str:
    if not args:
        return "Usage: /import <path>"
    if emit is not None and state.task_store.count_tasks():
        emit("Import replaces the current list.")
    try:
        count = import_from_file(state.task_store, args[0])
    except FormatError as e:
        logger.info("Import rejected: %s", e)
        return f"Invalid JSON file: {e}"
    state.last_listing = []
    return f"Imported {count} task(s)."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "add", cmd_add, help_text="Add a task: /add <text> [!high|!low] [due:YYYY-MM-DD].", aliases=["a"]
)
registry.register("list", cmd_list, help_text="Show the task list.", aliases=["ls", "l"])
registry.register("done", cmd_done, help_text="Toggle done: /done <row|id>.", aliases=["x", "toggle"])
registry.register("edit", cmd_edit, help_text="Edit text: /edit <row|id> <new text>.", aliases=["e"])
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <row|id>.", aliases=["del", "delete"])
registry.register("filter", cmd_filter, help_text="Filter: /filter all | active | done.", aliases=["f"])
registry.register("search", cmd_search, help_text="Search text (empty clears): /search <text>.", aliases=["s"])
registry.register("sort", cmd_sort, help_text="Incomplete first: /sort [on|off].")
registry.register("stats", cmd_stats, help_text="Show active/done counts and completion.")
registry.register("clear-done", cmd_clear_done, help_text="Remove all completed tasks.")
registry.register("clear-all", cmd_clear_all, help_text="Remove ALL tasks: /clear-all yes.")
registry.register("export", cmd_export, help_text="Export to JSON: /export [path].")
registry.register("import", cmd_import, help_text="Replace list from JSON: /import <path>.")

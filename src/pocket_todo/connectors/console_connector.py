# src/pocket_todo/connectors/console_connector.py

from __future__ import annotations

import logging

from ..cli.commands import add_from_words, render_view
from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def handle_line(state: AppState, line: str) -> str | None:
    """
    One REPL step: slash commands go to the registry, anything else is a new task.
    Returns the text to print (None for nothing).
    """
    line = line.strip()
    if not line:
        return None

    try:
        cmd_response = command_registry.handle(state, line, emit=print)
        if cmd_response is not None:
            return cmd_response
        return add_from_words(state, line.split())
    except Exception:
        logger.exception("Command handler crashed.")
        return "Internal error while handling a command."


def run_console_loop(state: AppState) -> None:
    app_name = str(getattr(getattr(state, "settings", None), "app_name", "pocket-todo"))
    logger.info("Console started (tasks=%d).", state.task_store.count_tasks())

    print(f"{app_name}: type a task to add it. Use /help for commands, /exit to quit.\n")
    print(render_view(state))

    while True:
        try:
            user_input = input("> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if user_input.lower() in ("/exit", "/quit", "/q"):
            logger.info("Console exit command received.")
            break

        reply = handle_line(state, user_input)
        if reply is not None:
            print(reply)

    logger.info("Console finished.")

# src/pocket_todo/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState (store hydrated from disk),
then runs the console REPL in the main thread.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    # choose console log level from settings.log_level; console stays quiet below WARNING
    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=max(level, logging.WARNING))

    logger.info("Starting %s (backend=%s)...", settings.app_name, settings.storage_backend)

    state = create_initial_state(settings=settings)
    try:
        run_console_loop(state)
    finally:
        # Every mutation is already saved; nothing to flush here.
        logger.info("Bye.")


if __name__ == "__main__":
    main()

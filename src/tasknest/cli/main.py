# src/tasknest/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs the console REPL.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.notices import CollectingNotifier
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    # choose console log level from settings.log_level
    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    # Notices are printed by the console after each command.
    state = create_initial_state(settings=settings, notifier=CollectingNotifier())

    try:
        if settings.console_enabled:
            run_console_loop(state)
        else:
            logger.info("Console disabled; state loaded from %s, nothing else to do.", settings.storage_path)
    finally:
        # SqliteSnapshotStorage uses short-lived connections per call; close() is a no-op hook.
        close = getattr(state.storage, "close", None)
        if close is not None:
            close()
        logger.info("Bye.")


if __name__ == "__main__":
    main()

# src/tasknest/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.notices import CollectingNotifier, Notice, Severity
from ..core.state import AppState

logger = logging.getLogger(__name__)

_SEVERITY_MARK = {
    Severity.INFO: "i",
    Severity.SUCCESS: "+",
    Severity.ERROR: "!",
}


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def format_notice(notice: Notice) -> str:
    mark = _SEVERITY_MARK.get(notice.severity, "i")
    if notice.description:
        return f"[{mark}] {notice.title}: {notice.description}"
    return f"[{mark}] {notice.title}"


def run_console_loop(state: AppState) -> None:
    """
    Minimal presentation layer: every line is a slash command dispatched to the
    stores; notices raised while handling it are printed after the reply.
    """
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Type /help for commands. Use /exit to quit.\n")

    notifier = state.notifier if isinstance(state.notifier, CollectingNotifier) else None
    app_name = str(getattr(state.settings, "app_name", "tasknest"))

    while True:
        try:
            line = input(f"{app_name}> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not line:
            continue

        if line.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not line.startswith("/"):
            line = "/" + line

        try:
            reply = command_registry.handle(state, line)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is not None:
            _print_ts(reply)

        if notifier is not None:
            for notice in notifier.drain():
                _print_ts(format_notice(notice))

    logger.info("Console connector finished.")

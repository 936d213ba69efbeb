# src/tasknest/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

_STORAGE_LOGGER = "tasknest.storage.sqlite_storage"


class _ConsoleNoiseFilter(logging.Filter):
    """Only tasknest records reach the REPL; everything else needs ERROR."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not record.name.startswith("tasknest."):
            # Includes captured warnings ("py.warnings").
            return record.levelno >= logging.ERROR
        if record.name == _STORAGE_LOGGER:
            # One line per snapshot write; the file log keeps them.
            return record.levelno >= logging.WARNING
        return True


def setup_logging(
    *,
    log_dir: str | Path = ".local/tasknest",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Route all logging to stderr (filtered, for the REPL) and to
    `<log_dir>/tasknest.log` (everything from `file_level` up).

    Replaces existing root handlers, so it is safe to call again.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(formatter)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    logfile = logging.FileHandler(str(log_dir / "tasknest.log"), encoding="utf-8")
    logfile.setLevel(file_level)
    logfile.setFormatter(formatter)
    root.addHandler(logfile)

    logging.captureWarnings(True)

# src/tasknest/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires storage, notifier and the four stores into AppState.

Store construction order matters: the folder and tag stores cascade into the
task store, so it is built first and handed to them.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.notices import LoggingNotifier
from ..core.ports import Clock, Notifier, SnapshotStorage
from ..core.state import AppState
from ..storage.sqlite_storage import SqliteSnapshotStorage
from ..tasks.folder_store import FolderStore
from ..tasks.tag_store import TagStore
from ..tasks.task_store import TaskStore
from ..tasks.workspace_store import WorkspaceStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.storage_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    storage: SnapshotStorage | None = None,
    notifier: Notifier | None = None,
    clock: Clock | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings/storage injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings(); if storage is None, a SQLite file at
    settings.storage_path is used.
    """
    if settings is None:
        settings = get_settings()

    if storage is None:
        _ensure_local_dirs(settings)
        storage = SqliteSnapshotStorage(settings.storage_path)

    if notifier is None:
        notifier = LoggingNotifier()

    seed = bool(getattr(settings, "seed_on_first_run", True))
    common = {"notifier": notifier, "clock": clock, "seed": seed}

    tasks = TaskStore(storage, **common)
    state = AppState(
        settings=settings,
        storage=storage,
        notifier=notifier,
        workspaces=WorkspaceStore(storage, **common),
        tags=TagStore(storage, tasks, **common),
        folders=FolderStore(storage, tasks, **common),
        tasks=tasks,
    )
    logger.info(
        "State ready: %d workspace(s), %d folder(s), %d tag(s), %d task(s)",
        len(state.workspaces.list_workspaces()),
        len(state.folders.list_folders()),
        len(state.tags.list_tags()),
        state.tasks.count_tasks(),
    )
    return state

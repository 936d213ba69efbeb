# src/tasknest/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.folder_store import FolderStore
from ..tasks.tag_store import TagStore
from ..tasks.task_store import TaskStore
from ..tasks.workspace_store import WorkspaceStore
from .ports import Notifier, SnapshotStorage


@dataclass
class AppState:
    """
    Everything a presentation layer needs, passed around explicitly.

    Built by cli.bootstrap.create_initial_state (the composition root).
    """

    # Settings object (real Settings or a SimpleNamespace in tests).
    settings: Any

    storage: SnapshotStorage
    notifier: Notifier

    workspaces: WorkspaceStore
    tags: TagStore
    folders: FolderStore
    tasks: TaskStore

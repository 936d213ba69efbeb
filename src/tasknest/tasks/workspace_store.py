# src/tasknest/tasks/workspace_store.py

from __future__ import annotations

import logging
from dataclasses import replace

from ..core import notices
from ..core.ports import Clock, Notifier, SnapshotStorage
from .models import (
    ValidationError,
    Workspace,
    WorkspaceDraft,
    WorkspacePatch,
    new_id,
    require_text,
    workspace_from_dict,
    workspace_to_dict,
)
from .persistence import SliceStore
from .seed import default_workspaces

logger = logging.getLogger(__name__)

WORKSPACES_KEY = "workspaces"
CURRENT_WORKSPACE_KEY = "currentWorkspace"


class WorkspaceStore(SliceStore):
    """
    Workspaces plus the single "current" one.

    `current` may be None (e.g. after deleting the last workspace); consumers
    must handle that state.
    """

    def __init__(
        self,
        storage: SnapshotStorage,
        *,
        notifier: Notifier | None = None,
        clock: Clock | None = None,
        seed: bool = True,
    ) -> None:
        super().__init__(storage, notifier=notifier, clock=clock)
        self._workspaces: list[Workspace] = self._load_records(
            WORKSPACES_KEY,
            workspace_from_dict,
            default_workspaces if seed else list,
        )
        self._current: Workspace | None = self._load_current()
        logger.info(
            "WorkspaceStore ready total=%d current=%s",
            len(self._workspaces),
            self._current.id if self._current else None,
        )

    def _load_current(self) -> Workspace | None:
        data = self._load_json(CURRENT_WORKSPACE_KEY)
        if isinstance(data, dict) and data.get("id") is not None:
            try:
                return workspace_from_dict(data)
            except (KeyError, TypeError, ValueError):
                logger.warning("Persisted current workspace is malformed; ignoring it.")
        return self._workspaces[0] if self._workspaces else None

    def _persist(self) -> None:
        self._save_records(WORKSPACES_KEY, self._workspaces, workspace_to_dict, what="workspaces")

    def _persist_current(self) -> None:
        if self._current is None:
            self._delete_key(CURRENT_WORKSPACE_KEY, what="the current workspace")
        else:
            self._save_json(CURRENT_WORKSPACE_KEY, workspace_to_dict(self._current), what="the current workspace")

    def _index(self, workspace_id: str) -> int | None:
        for i, ws in enumerate(self._workspaces):
            if ws.id == workspace_id:
                return i
        return None

    # ---- queries ----

    def list_workspaces(self) -> list[Workspace]:
        return list(self._workspaces)

    def get_workspace(self, workspace_id: str) -> Workspace | None:
        idx = self._index(workspace_id)
        return None if idx is None else self._workspaces[idx]

    @property
    def current(self) -> Workspace | None:
        return self._current

    # ---- commands ----

    def set_current(self, workspace: Workspace | None) -> None:
        """Replace the active workspace. The caller is responsible for passing a live one."""
        self._current = workspace
        self._persist_current()
        if workspace is not None:
            self._notify(notices.info("Workspace changed", f'You are now in "{workspace.name}".'))

    def add_workspace(self, draft: WorkspaceDraft) -> Workspace | None:
        try:
            name = require_text(draft.name, "Workspace name")
        except ValidationError as e:
            self._notify(notices.error("Error", str(e)))
            return None

        ws = Workspace(id=new_id(), name=name, icon=draft.icon, color=draft.color)
        self._workspaces.append(ws)
        self._persist()
        logger.debug("Workspace added id=%s name=%s", ws.id, ws.name)
        self._notify(notices.success("Workspace created", f'"{ws.name}" was added.'))
        return ws

    def update_workspace(self, workspace_id: str, patch: WorkspacePatch) -> Workspace | None:
        idx = self._index(workspace_id)
        if idx is None:
            logger.debug("update_workspace: id=%s not found", workspace_id)
            return None

        changes = patch.changes()
        try:
            if "name" in changes:
                changes["name"] = require_text(changes["name"], "Workspace name")
        except ValidationError as e:
            self._notify(notices.error("Error", str(e)))
            return None

        updated = replace(self._workspaces[idx], **changes)
        self._workspaces[idx] = updated
        self._persist()

        if self._current is not None and self._current.id == workspace_id:
            self._current = updated
            self._persist_current()

        logger.debug("Workspace updated id=%s fields=%s", workspace_id, sorted(changes))
        return updated

    def delete_workspace(self, workspace_id: str) -> bool:
        idx = self._index(workspace_id)
        if idx is None:
            logger.debug("delete_workspace: id=%s not found", workspace_id)
            return False

        removed = self._workspaces.pop(idx)
        self._persist()

        if self._current is not None and self._current.id == workspace_id:
            self._current = self._workspaces[0] if self._workspaces else None
            self._persist_current()
            logger.info(
                "Current workspace deleted; now current=%s",
                self._current.id if self._current else None,
            )

        self._notify(notices.success("Workspace deleted", f'"{removed.name}" was removed.'))
        return True

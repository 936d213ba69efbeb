# src/tasknest/tasks/folder_store.py

from __future__ import annotations

import logging
from dataclasses import replace

from ..core import notices
from ..core.ports import Clock, Notifier, SnapshotStorage
from .models import (
    Folder,
    FolderDraft,
    FolderPatch,
    ValidationError,
    folder_from_dict,
    folder_to_dict,
    new_id,
    require_text,
)
from .persistence import SliceStore
from .seed import default_folders
from .task_store import TaskStore

logger = logging.getLogger(__name__)

FOLDERS_KEY = "folders"


class FolderStore(SliceStore):
    """
    Folders, each scoped to one workspace.

    Deleting a folder never deletes tasks: they are moved to "no folder"
    through the injected TaskStore before the folder disappears.
    """

    def __init__(
        self,
        storage: SnapshotStorage,
        tasks: TaskStore,
        *,
        notifier: Notifier | None = None,
        clock: Clock | None = None,
        seed: bool = True,
    ) -> None:
        super().__init__(storage, notifier=notifier, clock=clock)
        self._tasks = tasks
        self._folders: list[Folder] = self._load_records(
            FOLDERS_KEY,
            folder_from_dict,
            default_folders if seed else list,
        )
        logger.info("FolderStore ready key=%s total=%d", FOLDERS_KEY, len(self._folders))

    def _persist(self) -> None:
        self._save_records(FOLDERS_KEY, self._folders, folder_to_dict, what="folders")

    def _index(self, folder_id: str) -> int | None:
        for i, f in enumerate(self._folders):
            if f.id == folder_id:
                return i
        return None

    # ---- queries ----

    def list_folders(self, workspace_id: str | None = None) -> list[Folder]:
        if workspace_id is None:
            return list(self._folders)
        return [f for f in self._folders if f.workspace_id == workspace_id]

    def get_folder(self, folder_id: str) -> Folder | None:
        idx = self._index(folder_id)
        return None if idx is None else self._folders[idx]

    # ---- commands ----

    def add_folder(self, draft: FolderDraft) -> Folder | None:
        try:
            name = require_text(draft.name, "Folder name")
            workspace_id = require_text(draft.workspace_id, "Workspace")
        except ValidationError as e:
            self._notify(notices.error("Error", str(e)))
            return None

        folder = Folder(
            id=new_id(),
            name=name,
            workspace_id=workspace_id,
            color=draft.color,
            icon=draft.icon,
            logo=draft.logo or None,
            website=draft.website or None,
            instagram=draft.instagram or None,
            google_drive=draft.google_drive or None,
        )
        self._folders.append(folder)
        self._persist()
        logger.debug("Folder added id=%s workspace=%s", folder.id, folder.workspace_id)
        self._notify(notices.success("Folder created", f'"{folder.name}" was added.'))
        return folder

    def update_folder(self, folder_id: str, patch: FolderPatch) -> Folder | None:
        idx = self._index(folder_id)
        if idx is None:
            logger.debug("update_folder: id=%s not found", folder_id)
            return None

        changes = patch.changes()
        try:
            if "name" in changes:
                changes["name"] = require_text(changes["name"], "Folder name")
        except ValidationError as e:
            self._notify(notices.error("Error", str(e)))
            return None

        # Empty metadata strings mean "cleared".
        for key in ("logo", "website", "instagram", "google_drive"):
            if key in changes:
                changes[key] = changes[key] or None

        updated = replace(self._folders[idx], **changes)
        self._folders[idx] = updated
        self._persist()
        self._notify(notices.success("Folder updated", f'"{updated.name}" was saved.'))
        return updated

    def delete_folder(self, folder_id: str) -> bool:
        idx = self._index(folder_id)
        if idx is None:
            logger.debug("delete_folder: id=%s not found", folder_id)
            return False

        # Tasks first, so no task is ever left pointing at a missing folder.
        moved = self._tasks.detach_folder(folder_id)
        removed = self._folders.pop(idx)
        self._persist()
        logger.info("Folder deleted id=%s tasks_moved=%d", folder_id, moved)
        self._notify(notices.success("Folder deleted", f'"{removed.name}" was removed.'))
        return True

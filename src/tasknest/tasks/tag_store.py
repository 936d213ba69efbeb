# src/tasknest/tasks/tag_store.py

from __future__ import annotations

import logging
from dataclasses import replace

from ..core import notices
from ..core.ports import Clock, Notifier, SnapshotStorage
from .models import Tag, TagPatch, ValidationError, new_id, require_text, tag_from_dict, tag_to_dict
from .persistence import SliceStore
from .seed import default_tags
from .task_store import TaskStore

logger = logging.getLogger(__name__)

TAGS_KEY = "tags"


class TagStore(SliceStore):
    """
    Global tag list.

    Tasks keep copies of the tags they were given, so renaming or recolouring
    a tag here does not touch tasks. Deleting a tag does strip it everywhere.
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
        self._tags: list[Tag] = self._load_records(TAGS_KEY, tag_from_dict, default_tags if seed else list)
        logger.info("TagStore ready key=%s total=%d", TAGS_KEY, len(self._tags))

    def _persist(self) -> None:
        self._save_records(TAGS_KEY, self._tags, tag_to_dict, what="tags")

    def _index(self, tag_id: str) -> int | None:
        for i, t in enumerate(self._tags):
            if t.id == tag_id:
                return i
        return None

    def list_tags(self) -> list[Tag]:
        return list(self._tags)

    def get_tag(self, tag_id: str) -> Tag | None:
        idx = self._index(tag_id)
        return None if idx is None else self._tags[idx]

    def find_by_name(self, name: str) -> Tag | None:
        wanted = name.strip().casefold()
        for t in self._tags:
            if t.name.casefold() == wanted:
                return t
        return None

    def add_tag(self, name: str, color: str = "#4c6ef5") -> Tag | None:
        try:
            clean = require_text(name, "Tag name")
        except ValidationError as e:
            self._notify(notices.error("Error", str(e)))
            return None

        tag = Tag(id=new_id(), name=clean, color=color)
        self._tags.append(tag)
        self._persist()
        logger.debug("Tag added id=%s name=%s", tag.id, tag.name)
        self._notify(notices.success("Tag created", f'"{tag.name}" was added.'))
        return tag

    def update_tag(self, tag_id: str, patch: TagPatch) -> Tag | None:
        """Update the global tag only; snapshots already embedded in tasks keep their old values."""
        idx = self._index(tag_id)
        if idx is None:
            logger.debug("update_tag: id=%s not found", tag_id)
            return None

        changes = patch.changes()
        try:
            if "name" in changes:
                changes["name"] = require_text(changes["name"], "Tag name")
        except ValidationError as e:
            self._notify(notices.error("Error", str(e)))
            return None

        updated = replace(self._tags[idx], **changes)
        self._tags[idx] = updated
        self._persist()
        return updated

    def delete_tag(self, tag_id: str) -> bool:
        idx = self._index(tag_id)
        if idx is None:
            logger.debug("delete_tag: id=%s not found", tag_id)
            return False

        stripped = self._tasks.strip_tag(tag_id)
        removed = self._tags.pop(idx)
        self._persist()
        logger.info("Tag deleted id=%s tasks_touched=%d", tag_id, stripped)
        self._notify(notices.success("Tag deleted", f'"{removed.name}" was removed.'))
        return True

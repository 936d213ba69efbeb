# src/tasknest/tasks/task_store.py

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, tzinfo
from typing import Any, TypeVar

from ..core import notices
from ..core.ports import Clock, Notifier, SnapshotStorage
from . import query
from .models import (
    Status,
    SubTask,
    SubtaskPatch,
    Task,
    TaskDraft,
    TaskPatch,
    ValidationError,
    as_aware,
    new_id,
    next_stamp,
    reconcile_completion,
    require_text,
    tags_without,
    task_from_dict,
    task_to_dict,
)
from .persistence import SliceStore
from .seed import default_tasks

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"

_Item = TypeVar("_Item", Task, SubTask)


class TaskStore(SliceStore):
    """
    In-memory task list persisted under the "tasks" key.

    Each Task exclusively owns its subtasks (deleting a task drops them).
    Every write goes through `_apply_changes`, which keeps `completed` and
    `status` in sync and bumps `updated_at`; subtask writes also bump the
    parent's `updated_at`.

    Tags are stored on tasks as value snapshots; folders are referenced by id
    only and never validated here.
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
        self._tasks: list[Task] = self._load_records(
            TASKS_KEY,
            task_from_dict,
            (lambda: default_tasks(self._now())) if seed else list,
        )
        self._selected_id: str | None = None
        logger.info("TaskStore ready key=%s total=%d", TASKS_KEY, len(self._tasks))

    # ---- low-level helpers ----

    def _persist(self) -> bool:
        return self._save_records(TASKS_KEY, self._tasks, task_to_dict, what="tasks")

    def _index(self, task_id: str) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    @staticmethod
    def _sub_index(task: Task, subtask_id: str) -> int | None:
        for i, s in enumerate(task.subtasks):
            if s.id == subtask_id:
                return i
        return None

    def _apply_changes(self, item: _Item, changes: dict[str, Any], now: datetime) -> _Item:
        """Merge validated changes into a task/subtask, reconciling status and stamping it."""
        if "title" in changes:
            changes["title"] = require_text(changes["title"], "Title")
        if "tags" in changes:
            changes["tags"] = tuple(changes["tags"])
        if "due_date" in changes:
            changes["due_date"] = as_aware(changes["due_date"])

        status, completed = reconcile_completion(item.status, item.completed, changes)
        changes["status"] = status
        changes["completed"] = completed
        changes["updated_at"] = next_stamp(now, item.updated_at)
        return replace(item, **changes)

    def _with_subtask(self, task: Task, sub_idx: int, sub: SubTask | None, now: datetime) -> Task:
        """Return `task` with subtask `sub_idx` replaced (or removed when sub is None)."""
        subs = list(task.subtasks)
        if sub is None:
            del subs[sub_idx]
        else:
            subs[sub_idx] = sub
        return replace(task, subtasks=tuple(subs), updated_at=next_stamp(now, task.updated_at))

    def _locate_subtask(self, task_id: str, subtask_id: str) -> tuple[int, int] | None:
        idx = self._index(task_id)
        if idx is None:
            logger.debug("Subtask op: task id=%s not found", task_id)
            return None
        sub_idx = self._sub_index(self._tasks[idx], subtask_id)
        if sub_idx is None:
            logger.debug("Subtask op: subtask id=%s not found in task %s", subtask_id, task_id)
            return None
        return idx, sub_idx

    # ---- queries ----

    def list_tasks(self) -> list[Task]:
        return list(self._tasks)

    def count_tasks(self) -> int:
        return len(self._tasks)

    def get_task(self, task_id: str) -> Task | None:
        idx = self._index(task_id)
        return None if idx is None else self._tasks[idx]

    def get_subtask(self, task_id: str, subtask_id: str) -> SubTask | None:
        task = self.get_task(task_id)
        return None if task is None else task.find_subtask(subtask_id)

    def tasks_by_workspace(self, workspace_id: str) -> list[Task]:
        return query.tasks_by_workspace(self._tasks, workspace_id)

    def tasks_by_folder(self, folder_id: str | None) -> list[Task]:
        return query.tasks_by_folder(self._tasks, folder_id)

    def tasks_by_due_date(self, day: date, tz: tzinfo | None = None) -> list[Task]:
        return query.tasks_by_due_date(self._tasks, day, tz=tz)

    # ---- selection (UI pointer, resolved on read so it is never stale) ----

    @property
    def selected_task(self) -> Task | None:
        if self._selected_id is None:
            return None
        return self.get_task(self._selected_id)

    def select_task(self, task_id: str | None) -> None:
        self._selected_id = task_id

    # ---- task commands ----

    def add_task(self, draft: TaskDraft) -> Task | None:
        try:
            title = require_text(draft.title, "Title")
            workspace_id = require_text(draft.workspace_id, "Workspace")
        except ValidationError as e:
            self._notify(notices.error("Error", str(e)))
            return None

        now = self._now()
        task = Task(
            id=new_id(),
            title=title,
            description=draft.description,
            completed=False,
            status=Status.TODO,
            due_date=as_aware(draft.due_date),
            priority=draft.priority,
            tags=tuple(draft.tags),
            workspace_id=workspace_id,
            folder_id=draft.folder_id,
            created_at=now,
            updated_at=now,
            subtasks=(),
        )
        self._tasks.append(task)
        self._persist()
        logger.debug("Task added id=%s workspace=%s folder=%s", task.id, task.workspace_id, task.folder_id)
        self._notify(notices.success("Task created", f'"{task.title}" was added.'))
        return task

    def update_task(self, task_id: str, patch: TaskPatch) -> Task | None:
        idx = self._index(task_id)
        if idx is None:
            logger.debug("update_task: id=%s not found", task_id)
            return None
        if patch.is_empty():
            return self._tasks[idx]

        try:
            updated = self._apply_changes(self._tasks[idx], patch.changes(), self._now())
        except ValidationError as e:
            self._notify(notices.error("Error", str(e)))
            return None

        self._tasks[idx] = updated
        self._persist()
        logger.debug("Task updated id=%s status=%s", task_id, updated.status)
        self._notify(notices.success("Task updated", f'"{updated.title}" was saved.'))
        return updated

    def delete_task(self, task_id: str) -> bool:
        idx = self._index(task_id)
        if idx is None:
            logger.debug("delete_task: id=%s not found", task_id)
            return False

        removed = self._tasks.pop(idx)
        if self._selected_id == task_id:
            self._selected_id = None
        self._persist()
        logger.debug("Task deleted id=%s subtasks=%d", task_id, len(removed.subtasks))
        self._notify(notices.success("Task deleted", "The task was removed."))
        return True

    def toggle_task_completion(self, task_id: str) -> Task | None:
        """Flip `completed`; un-completing always resets status to todo."""
        task = self.get_task(task_id)
        if task is None:
            logger.debug("toggle_task_completion: id=%s not found", task_id)
            return None
        status = Status.TODO if task.completed else Status.COMPLETED
        return self._set_status(task_id, status)

    def update_task_status(self, task_id: str, status: Status | str) -> Task | None:
        return self._set_status(task_id, status)

    def _set_status(self, task_id: str, status: Status | str) -> Task | None:
        idx = self._index(task_id)
        if idx is None:
            logger.debug("Status change: task id=%s not found", task_id)
            return None
        try:
            updated = self._apply_changes(self._tasks[idx], {"status": status}, self._now())
        except ValidationError as e:
            self._notify(notices.error("Error", str(e)))
            return None
        self._tasks[idx] = updated
        self._persist()
        return updated

    def move_task(self, task_id: str, folder_id: str | None) -> Task | None:
        """Set the task's folder. The destination is not checked (caller's job)."""
        idx = self._index(task_id)
        if idx is None:
            logger.debug("move_task: id=%s not found", task_id)
            return None
        updated = self._apply_changes(self._tasks[idx], {"folder_id": folder_id}, self._now())
        self._tasks[idx] = updated
        self._persist()
        logger.debug("Task moved id=%s folder=%s", task_id, folder_id)
        return updated

    # ---- subtask commands ----

    def add_subtask(self, parent_id: str, draft: TaskDraft) -> SubTask | None:
        idx = self._index(parent_id)
        if idx is None:
            logger.debug("add_subtask: parent id=%s not found", parent_id)
            return None
        parent = self._tasks[idx]

        try:
            title = require_text(draft.title, "Title")
        except ValidationError as e:
            self._notify(notices.error("Error", str(e)))
            return None

        now = self._now()
        sub = SubTask(
            id=new_id(),
            parent_id=parent_id,
            title=title,
            description=draft.description,
            completed=False,
            status=Status.TODO,
            due_date=as_aware(draft.due_date),
            priority=draft.priority,
            tags=tuple(draft.tags),
            workspace_id=draft.workspace_id or parent.workspace_id,
            folder_id=draft.folder_id if draft.folder_id is not None else parent.folder_id,
            created_at=now,
            updated_at=now,
        )
        self._tasks[idx] = replace(
            parent,
            subtasks=(*parent.subtasks, sub),
            updated_at=next_stamp(now, parent.updated_at),
        )
        self._persist()
        logger.debug("Subtask added id=%s parent=%s", sub.id, parent_id)
        self._notify(notices.success("Subtask created", f'"{sub.title}" was added.'))
        return sub

    def update_subtask(self, task_id: str, subtask_id: str, patch: SubtaskPatch) -> SubTask | None:
        return self._change_subtask(task_id, subtask_id, patch.changes(), announce=True)

    def update_subtask_status(self, task_id: str, subtask_id: str, status: Status | str) -> SubTask | None:
        return self._change_subtask(task_id, subtask_id, {"status": status})

    def toggle_subtask_completion(self, task_id: str, subtask_id: str) -> SubTask | None:
        sub = self.get_subtask(task_id, subtask_id)
        if sub is None:
            logger.debug("toggle_subtask_completion: %s/%s not found", task_id, subtask_id)
            return None
        status = Status.TODO if sub.completed else Status.COMPLETED
        return self._change_subtask(task_id, subtask_id, {"status": status})

    def _change_subtask(
        self,
        task_id: str,
        subtask_id: str,
        changes: dict[str, Any],
        *,
        announce: bool = False,
    ) -> SubTask | None:
        loc = self._locate_subtask(task_id, subtask_id)
        if loc is None:
            return None
        idx, sub_idx = loc
        task = self._tasks[idx]
        now = self._now()

        try:
            sub = self._apply_changes(task.subtasks[sub_idx], changes, now)
        except ValidationError as e:
            self._notify(notices.error("Error", str(e)))
            return None

        self._tasks[idx] = self._with_subtask(task, sub_idx, sub, now)
        self._persist()
        if announce:
            self._notify(notices.success("Subtask updated", f'"{sub.title}" was saved.'))
        return sub

    def delete_subtask(self, task_id: str, subtask_id: str) -> bool:
        loc = self._locate_subtask(task_id, subtask_id)
        if loc is None:
            return False
        idx, sub_idx = loc
        self._tasks[idx] = self._with_subtask(self._tasks[idx], sub_idx, None, self._now())
        self._persist()
        logger.debug("Subtask deleted id=%s parent=%s", subtask_id, task_id)
        self._notify(notices.success("Subtask deleted", "The subtask was removed."))
        return True

    # ---- cascades (called by the folder and tag stores) ----

    def detach_folder(self, folder_id: str) -> int:
        """
        Point every task (and subtask) in `folder_id` at "no folder".
        Returns the number of top-level tasks that changed.
        """
        now = self._now()
        changed = 0
        for i, task in enumerate(self._tasks):
            subs = tuple(
                replace(s, folder_id=None, updated_at=next_stamp(now, s.updated_at)) if s.folder_id == folder_id else s
                for s in task.subtasks
            )
            touched_subs = any(a is not b for a, b in zip(subs, task.subtasks))
            if task.folder_id != folder_id and not touched_subs:
                continue
            self._tasks[i] = replace(
                task,
                folder_id=None if task.folder_id == folder_id else task.folder_id,
                subtasks=subs,
                updated_at=next_stamp(now, task.updated_at),
            )
            changed += 1

        if changed:
            self._persist()
        logger.debug("Folder %s detached from %d task(s)", folder_id, changed)
        return changed

    def strip_tag(self, tag_id: str) -> int:
        """
        Remove tag `tag_id` from every task's and subtask's tag list.
        Returns the number of top-level tasks that changed.
        """
        now = self._now()
        changed = 0
        for i, task in enumerate(self._tasks):
            subs = tuple(
                replace(s, tags=tags_without(s.tags, tag_id), updated_at=next_stamp(now, s.updated_at))
                if any(t.id == tag_id for t in s.tags)
                else s
                for s in task.subtasks
            )
            touched_subs = any(a is not b for a, b in zip(subs, task.subtasks))
            has_tag = any(t.id == tag_id for t in task.tags)
            if not has_tag and not touched_subs:
                continue
            self._tasks[i] = replace(
                task,
                tags=tags_without(task.tags, tag_id),
                subtasks=subs,
                updated_at=next_stamp(now, task.updated_at),
            )
            changed += 1

        if changed:
            self._persist()
        logger.debug("Tag %s stripped from %d task(s)", tag_id, changed)
        return changed

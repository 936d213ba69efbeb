# src/tasknest/tasks/models.py

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, fields
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


# Marker for "field not part of this patch" (None is a real value).
UNSET: Any = object()


class Priority(StrEnum):
    """Task priority. Member order is the display order."""

    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def from_raw(cls, raw: str | None) -> Priority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls(raw)
        except ValueError:
            return cls.MEDIUM


class Status(StrEnum):
    """
    Task lifecycle status.

    Transitions are free (any status -> any status); the `completed` flag
    is kept in sync by `reconcile_completion`.
    """

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"

    @classmethod
    def from_raw(cls, raw: str | None, *, completed: bool = False) -> Status:
        if raw:
            try:
                return cls(raw)
            except ValueError:
                pass
        return cls.COMPLETED if completed else cls.TODO


class ValidationError(ValueError):
    """Rejected input; raised before any state change."""


def new_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(UTC)


def next_stamp(now: datetime, previous: datetime | None) -> datetime:
    """Return `now`, nudged forward so it is strictly after `previous`."""
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def as_aware(dt: datetime | None) -> datetime | None:
    """Naive datetimes are taken as UTC, matching what a reload produces."""
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def parse_status(raw: Status | str) -> Status:
    try:
        return Status(raw)
    except ValueError:
        raise ValidationError(f"Unknown status: {raw!r}") from None


def require_text(value: str | None, what: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{what} is required")
    return text


# ---- entities ----


@dataclass(frozen=True, slots=True)
class Workspace:
    id: str
    name: str
    icon: str = "folder"
    color: str = "#4c6ef5"


@dataclass(frozen=True, slots=True)
class Tag:
    id: str
    name: str
    color: str = "#4c6ef5"


@dataclass(frozen=True, slots=True)
class Folder:
    id: str
    name: str
    workspace_id: str
    color: str = "#808080"
    icon: str = "folder"

    # Optional "client folder" metadata.
    logo: str | None = None
    website: str | None = None
    instagram: str | None = None
    google_drive: str | None = None


@dataclass(frozen=True, slots=True)
class SubTask:
    id: str
    parent_id: str
    title: str
    created_at: datetime
    updated_at: datetime
    workspace_id: str
    description: str = ""
    completed: bool = False
    status: Status = Status.TODO
    due_date: datetime | None = None
    priority: Priority = Priority.MEDIUM
    tags: tuple[Tag, ...] = ()
    folder_id: str | None = None


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    title: str
    created_at: datetime
    updated_at: datetime
    workspace_id: str
    description: str = ""
    completed: bool = False
    status: Status = Status.TODO
    due_date: datetime | None = None
    priority: Priority = Priority.MEDIUM
    tags: tuple[Tag, ...] = ()
    folder_id: str | None = None
    subtasks: tuple[SubTask, ...] = ()

    def find_subtask(self, subtask_id: str) -> SubTask | None:
        for sub in self.subtasks:
            if sub.id == subtask_id:
                return sub
        return None


# ---- drafts & patches ----


class _Patch:
    """Base for typed partial updates: only fields that were set are applied."""

    __slots__ = ()

    def changes(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if value is not UNSET:
                out[f.name] = value
        return out

    def is_empty(self) -> bool:
        return not self.changes()


@dataclass(frozen=True, slots=True)
class WorkspaceDraft:
    name: str
    icon: str = "folder"
    color: str = "#4c6ef5"


@dataclass(frozen=True, slots=True)
class WorkspacePatch(_Patch):
    name: str | Any = UNSET
    icon: str | Any = UNSET
    color: str | Any = UNSET


@dataclass(frozen=True, slots=True)
class TagPatch(_Patch):
    name: str | Any = UNSET
    color: str | Any = UNSET


@dataclass(frozen=True, slots=True)
class FolderDraft:
    name: str
    workspace_id: str
    color: str = "#808080"
    icon: str = "folder"
    logo: str | None = None
    website: str | None = None
    instagram: str | None = None
    google_drive: str | None = None


@dataclass(frozen=True, slots=True)
class FolderPatch(_Patch):
    name: str | Any = UNSET
    color: str | Any = UNSET
    icon: str | Any = UNSET
    logo: str | None | Any = UNSET
    website: str | None | Any = UNSET
    instagram: str | None | Any = UNSET
    google_drive: str | None | Any = UNSET


@dataclass(frozen=True, slots=True)
class TaskDraft:
    """
    New task (or subtask) fields.

    For subtasks `workspace_id` / `folder_id` may be left empty and are then
    inherited from the parent task.
    """

    title: str
    workspace_id: str | None = None
    description: str = ""
    priority: Priority = Priority.MEDIUM
    due_date: datetime | None = None
    tags: tuple[Tag, ...] = ()
    folder_id: str | None = None


@dataclass(frozen=True, slots=True)
class TaskPatch(_Patch):
    title: str | Any = UNSET
    description: str | Any = UNSET
    completed: bool | Any = UNSET
    status: Status | Any = UNSET
    due_date: datetime | None | Any = UNSET
    priority: Priority | Any = UNSET
    tags: tuple[Tag, ...] | Any = UNSET
    folder_id: str | None | Any = UNSET


# Subtasks accept exactly the same updatable fields.
SubtaskPatch = TaskPatch


def reconcile_completion(
    status: Status,
    completed: bool,
    changes: Mapping[str, Any],
) -> tuple[Status, bool]:
    """
    Apply the completed/status coupling to a set of incoming changes.

    - status given: completed follows it (status wins if both are given)
    - completed=True: status becomes completed
    - completed=False: status falls back to todo only when it was completed
    """
    if "status" in changes:
        new_status = parse_status(changes["status"])
        return new_status, new_status is Status.COMPLETED

    if "completed" in changes:
        if changes["completed"]:
            return Status.COMPLETED, True
        if status is Status.COMPLETED:
            return Status.TODO, False
        return status, False

    return status, completed


# ---- JSON wire form ----


def _iso(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def parse_datetime(raw: Any) -> datetime | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        dt = raw
    else:
        try:
            dt = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Unparseable timestamp %r; treating as empty.", raw)
            return None
    return as_aware(dt)


def workspace_to_dict(ws: Workspace) -> dict[str, Any]:
    return {"id": ws.id, "name": ws.name, "icon": ws.icon, "color": ws.color}


def workspace_from_dict(d: Mapping[str, Any]) -> Workspace:
    return Workspace(
        id=str(d["id"]),
        name=str(d.get("name") or ""),
        icon=str(d.get("icon") or "folder"),
        color=str(d.get("color") or "#4c6ef5"),
    )


def tag_to_dict(tag: Tag) -> dict[str, Any]:
    return {"id": tag.id, "name": tag.name, "color": tag.color}


def tag_from_dict(d: Mapping[str, Any]) -> Tag:
    return Tag(id=str(d["id"]), name=str(d.get("name") or ""), color=str(d.get("color") or "#4c6ef5"))


def folder_to_dict(folder: Folder) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": folder.id,
        "name": folder.name,
        "workspaceId": folder.workspace_id,
        "color": folder.color,
        "icon": folder.icon,
    }
    for key, value in (
        ("logo", folder.logo),
        ("website", folder.website),
        ("instagram", folder.instagram),
        ("googleDrive", folder.google_drive),
    ):
        if value:
            out[key] = value
    return out


def folder_from_dict(d: Mapping[str, Any]) -> Folder:
    return Folder(
        id=str(d["id"]),
        name=str(d.get("name") or ""),
        workspace_id=str(d.get("workspaceId") or ""),
        color=str(d.get("color") or "#808080"),
        icon=str(d.get("icon") or "folder"),
        logo=d.get("logo") or None,
        website=d.get("website") or None,
        instagram=d.get("instagram") or None,
        google_drive=d.get("googleDrive") or None,
    )


def _tags_from_list(raw: Any) -> tuple[Tag, ...]:
    if not isinstance(raw, list):
        return ()
    return tuple(tag_from_dict(t) for t in raw if isinstance(t, dict) and t.get("id") is not None)


def _base_to_dict(item: Task | SubTask) -> dict[str, Any]:
    return {
        "id": item.id,
        "title": item.title,
        "description": item.description,
        "completed": item.completed,
        "status": item.status.value,
        "dueDate": _iso(item.due_date),
        "priority": item.priority.value,
        "tags": [tag_to_dict(t) for t in item.tags],
        "workspaceId": item.workspace_id,
        "folderId": item.folder_id,
        "createdAt": _iso(item.created_at),
        "updatedAt": _iso(item.updated_at),
    }


def _base_from_dict(d: Mapping[str, Any]) -> dict[str, Any]:
    completed = bool(d.get("completed", False))
    status = Status.from_raw(d.get("status"), completed=completed)
    # Records written before `status` existed (or hand-edited) may disagree.
    completed = status is Status.COMPLETED
    created_at = parse_datetime(d.get("createdAt")) or utc_now()
    return {
        "id": str(d["id"]),
        "title": str(d.get("title") or ""),
        "description": str(d.get("description") or ""),
        "completed": completed,
        "status": status,
        "due_date": parse_datetime(d.get("dueDate")),
        "priority": Priority.from_raw(d.get("priority")),
        "tags": _tags_from_list(d.get("tags")),
        "workspace_id": str(d.get("workspaceId") or ""),
        "folder_id": d.get("folderId") or None,
        "created_at": created_at,
        "updated_at": parse_datetime(d.get("updatedAt")) or created_at,
    }


def subtask_to_dict(sub: SubTask) -> dict[str, Any]:
    out = _base_to_dict(sub)
    out["parentId"] = sub.parent_id
    return out


def subtask_from_dict(d: Mapping[str, Any], *, parent_id: str) -> SubTask:
    return SubTask(parent_id=str(d.get("parentId") or parent_id), **_base_from_dict(d))


def task_to_dict(task: Task) -> dict[str, Any]:
    out = _base_to_dict(task)
    out["subtasks"] = [subtask_to_dict(s) for s in task.subtasks]
    return out


def task_from_dict(d: Mapping[str, Any]) -> Task:
    base = _base_from_dict(d)
    raw_subs = d.get("subtasks")
    subs: list[SubTask] = []
    if isinstance(raw_subs, list):
        for s in raw_subs:
            if isinstance(s, dict) and s.get("id") is not None:
                subs.append(subtask_from_dict(s, parent_id=base["id"]))
    return Task(subtasks=tuple(subs), **base)


def records_from_json(data: Any, parse: Callable[[Mapping[str, Any]], Any]) -> list[Any]:
    """Parse a JSON array of records, skipping entries that cannot be read."""
    if not isinstance(data, list):
        raise ValueError("expected a JSON array")
    out: list[Any] = []
    for raw in data:
        if not isinstance(raw, dict) or raw.get("id") is None:
            logger.warning("Skipping malformed record: %r", raw)
            continue
        out.append(parse(raw))
    return out


def tags_without(tags: Iterable[Tag], tag_id: str) -> tuple[Tag, ...]:
    return tuple(t for t in tags if t.id != tag_id)

# src/tasknest/tasks/query.py

"""
Read-side helpers over task sequences.

Everything here is pure: inputs are never mutated and every call returns a
fresh list/dict, so functions can be composed and called in any order, e.g.

    tasks_due_within(tasks_by_workspace(store.list_tasks(), ws_id), 3)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta, tzinfo

from .models import Priority, Status, Task, utc_now

_EPOCH = datetime.min.replace(tzinfo=UTC)


def _local_day(dt: datetime, tz: tzinfo | None) -> date:
    # astimezone(None) converts to the system's local zone.
    return dt.astimezone(tz).date()


def tasks_by_workspace(tasks: Iterable[Task], workspace_id: str) -> list[Task]:
    return [t for t in tasks if t.workspace_id == workspace_id]


def tasks_by_folder(tasks: Iterable[Task], folder_id: str | None) -> list[Task]:
    """Tasks in exactly this folder; "no folder" tasks never match."""
    if folder_id is None:
        return []
    return [t for t in tasks if t.folder_id == folder_id]


def tasks_by_due_date(tasks: Iterable[Task], day: date, *, tz: tzinfo | None = None) -> list[Task]:
    """Top-level tasks due on calendar `day` (evaluated in `tz`, local time by default)."""
    if isinstance(day, datetime):
        day = _local_day(day, tz)
    return [t for t in tasks if t.due_date is not None and _local_day(t.due_date, tz) == day]


def tasks_due_within(tasks: Iterable[Task], days: int, *, now: datetime | None = None) -> list[Task]:
    """Pending tasks with a due date in [now, now + days], bounds included."""
    now = now or utc_now()
    end = now + timedelta(days=days)
    return [t for t in tasks if not t.completed and t.due_date is not None and now <= t.due_date <= end]


def search_tasks(tasks: Iterable[Task], text: str) -> list[Task]:
    """Case-insensitive substring match on title or description."""
    needle = (text or "").casefold()
    if not needle:
        return list(tasks)
    return [t for t in tasks if needle in t.title.casefold() or needle in t.description.casefold()]


def pending_tasks(tasks: Iterable[Task]) -> list[Task]:
    return [t for t in tasks if not t.completed]


def completed_tasks(tasks: Iterable[Task]) -> list[Task]:
    return [t for t in tasks if t.completed]


def completed_on(tasks: Iterable[Task], day: date, *, tz: tzinfo | None = None) -> list[Task]:
    """Completed tasks whose last change happened on `day`."""
    return [t for t in tasks if t.completed and _local_day(t.updated_at, tz) == day]


def tasks_by_priority(tasks: Iterable[Task]) -> dict[Priority, list[Task]]:
    """Group by priority; keys follow the display order urgent, high, medium, low."""
    out: dict[Priority, list[Task]] = {p: [] for p in Priority}
    for t in tasks:
        out[t.priority].append(t)
    return out


def tasks_by_status(tasks: Iterable[Task]) -> dict[Status, list[Task]]:
    out: dict[Status, list[Task]] = {s: [] for s in Status}
    for t in tasks:
        out[t.status].append(t)
    return out


def sort_by_due_date(tasks: Iterable[Task]) -> list[Task]:
    """Earliest due first; tasks without a due date go last (stable otherwise)."""
    return sorted(tasks, key=lambda t: (t.due_date is None, t.due_date or _EPOCH))


@dataclass(frozen=True, slots=True)
class TaskSummary:
    total: int
    pending: int
    completed: int
    completed_today: int
    upcoming: int


def summarize(
    tasks: Iterable[Task],
    *,
    now: datetime | None = None,
    upcoming_days: int = 3,
    tz: tzinfo | None = None,
) -> TaskSummary:
    """Dashboard counters for a task list (usually one workspace's tasks)."""
    items = list(tasks)
    now = now or utc_now()
    return TaskSummary(
        total=len(items),
        pending=len(pending_tasks(items)),
        completed=len(completed_tasks(items)),
        completed_today=len(completed_on(items, _local_day(now, tz), tz=tz)),
        upcoming=len(tasks_due_within(items, upcoming_days, now=now)),
    )

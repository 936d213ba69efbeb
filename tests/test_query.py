# tests/test_query.py

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone

from tasknest.tasks import query
from tasknest.tasks.models import FolderDraft, Priority, Status, SubTask, Task

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


def _task(tid: str, **fields) -> Task:
    fields.setdefault("title", tid)
    fields.setdefault("workspace_id", "w1")
    fields.setdefault("updated_at", NOW)
    fields["completed"] = fields.get("status") is Status.COMPLETED
    return Task(id=tid, created_at=NOW, **fields)


def test_workspace_and_folder_filters() -> None:
    tasks = [
        _task("a", folder_id="f1"),
        _task("b", workspace_id="w2", folder_id="f2"),
        _task("c"),
    ]
    assert [t.id for t in query.tasks_by_workspace(tasks, "w1")] == ["a", "c"]
    assert query.tasks_by_workspace(tasks, "missing") == []
    assert [t.id for t in query.tasks_by_folder(tasks, "f2")] == ["b"]
    assert query.tasks_by_folder(tasks, None) == []


def test_queries_do_not_mutate_input() -> None:
    tasks = [_task("a"), _task("b", status=Status.COMPLETED)]
    before = list(tasks)
    query.pending_tasks(tasks)
    query.sort_by_due_date(tasks)
    query.tasks_by_status(tasks)
    assert tasks == before
    assert query.search_tasks(tasks, "") is not tasks


def test_tasks_by_due_date_uses_calendar_day_in_zone() -> None:
    brt = timezone(timedelta(hours=-3))
    late = _task("late", due_date=datetime(2026, 3, 11, 1, 0, tzinfo=UTC))  # 22:00 on the 10th in UTC-3
    noon = _task("noon", due_date=datetime(2026, 3, 11, 12, 0, tzinfo=UTC))
    none = _task("none")
    tasks = [late, noon, none]

    assert [t.id for t in query.tasks_by_due_date(tasks, date(2026, 3, 11), tz=UTC)] == ["late", "noon"]
    assert [t.id for t in query.tasks_by_due_date(tasks, date(2026, 3, 10), tz=brt)] == ["late"]
    assert query.tasks_by_due_date(tasks, date(2026, 1, 1), tz=UTC) == []


def test_tasks_by_due_date_ignores_subtask_due_dates() -> None:
    child = SubTask(
        id="s1",
        parent_id="parent",
        title="child",
        created_at=NOW,
        updated_at=NOW,
        workspace_id="w1",
        due_date=datetime(2026, 3, 12, 9, 0, tzinfo=UTC),
    )
    undated = _task("parent", subtasks=(child,))
    other_day = _task("other", due_date=datetime(2026, 3, 14, 9, 0, tzinfo=UTC), subtasks=(child,))

    assert query.tasks_by_due_date([undated, other_day], date(2026, 3, 12), tz=UTC) == []


def test_tasks_due_within_window() -> None:
    tasks = [
        _task("past", due_date=NOW - timedelta(hours=1)),
        _task("edge-start", due_date=NOW),
        _task("soon", due_date=NOW + timedelta(days=1)),
        _task("edge-end", due_date=NOW + timedelta(days=3)),
        _task("later", due_date=NOW + timedelta(days=3, seconds=1)),
        _task("done", due_date=NOW + timedelta(days=1), status=Status.COMPLETED),
        _task("undated"),
    ]
    ids = [t.id for t in query.tasks_due_within(tasks, 3, now=NOW)]
    assert ids == ["edge-start", "soon", "edge-end"]
    assert query.tasks_due_within(tasks, 0, now=NOW)[0].id == "edge-start"


def test_search_is_case_insensitive_on_title_and_description() -> None:
    tasks = [
        _task("a", title="Comprar LEITE"),
        _task("b", title="Report", description="Enviar relatório de leite"),
        _task("c", title="Other"),
    ]
    assert [t.id for t in query.search_tasks(tasks, "leite")] == ["a", "b"]
    assert len(query.search_tasks(tasks, "")) == 3


def test_grouping_follows_enum_order() -> None:
    tasks = [
        _task("a", priority=Priority.LOW),
        _task("b", priority=Priority.URGENT),
        _task("c", priority=Priority.LOW, status=Status.IN_PROGRESS),
    ]
    by_priority = query.tasks_by_priority(tasks)
    assert list(by_priority) == [Priority.URGENT, Priority.HIGH, Priority.MEDIUM, Priority.LOW]
    assert [t.id for t in by_priority[Priority.LOW]] == ["a", "c"]
    assert by_priority[Priority.HIGH] == []

    by_status = query.tasks_by_status(tasks)
    assert [t.id for t in by_status[Status.IN_PROGRESS]] == ["c"]
    assert by_status[Status.COMPLETED] == []


def test_sort_by_due_date_puts_undated_last() -> None:
    tasks = [
        _task("undated"),
        _task("late", due_date=NOW + timedelta(days=2)),
        _task("early", due_date=NOW + timedelta(days=1)),
    ]
    assert [t.id for t in query.sort_by_due_date(tasks)] == ["early", "late", "undated"]


def test_summarize_counts() -> None:
    tasks = [
        _task("done-today", status=Status.COMPLETED),
        _task("done-before", status=Status.COMPLETED, updated_at=NOW - timedelta(days=2)),
        _task("soon", due_date=NOW + timedelta(days=1)),
        _task("far", due_date=NOW + timedelta(days=10)),
    ]
    summary = query.summarize(tasks, now=NOW, tz=UTC)
    assert summary == query.TaskSummary(total=4, pending=2, completed=2, completed_today=1, upcoming=1)


def test_example_scenario(state, workspace, make_task, clock) -> None:
    folder = state.folders.add_folder(FolderDraft(name="F1", workspace_id=workspace.id))
    task = make_task("T1", folder_id=folder.id, due_date=clock.now + timedelta(days=1))

    mine = state.tasks.tasks_by_workspace(workspace.id)
    assert [t.id for t in query.tasks_due_within(mine, 3, now=clock.now)] == [task.id]
    assert [t.id for t in state.tasks.tasks_by_folder(folder.id)] == [task.id]

    state.folders.delete_folder(folder.id)

    t1 = state.tasks.get_task(task.id)
    assert t1.folder_id is None
    assert [t.id for t in query.tasks_due_within(state.tasks.list_tasks(), 3, now=clock.now)] == [task.id]

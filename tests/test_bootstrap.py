# tests/test_bootstrap.py

from __future__ import annotations

from tasknest.cli.bootstrap import create_initial_state
from tasknest.core.notices import CollectingNotifier

from .fakes import InMemoryStorage


def _seeded(settings, storage, clock):
    settings.seed_on_first_run = True
    return create_initial_state(settings=settings, storage=storage, notifier=CollectingNotifier(), clock=clock)


def test_first_run_uses_seed_data(settings, storage, clock) -> None:
    state = _seeded(settings, storage, clock)

    names = [w.name for w in state.workspaces.list_workspaces()]
    assert names == ["Pessoal", "Trabalho"]
    assert state.workspaces.current.name == "Pessoal"
    assert len(state.tags.list_tags()) == 5
    assert len(state.folders.list_folders()) == 3
    assert state.tasks.count_tasks() == 3
    assert [s.id for s in state.tasks.get_task("1").subtasks] == ["1-1"]
    # Seeding does not write anything until something changes.
    assert storage.writes == []


def test_seed_tasks_reference_seed_entities(settings, storage, clock) -> None:
    state = _seeded(settings, storage, clock)
    ws_ids = {w.id for w in state.workspaces.list_workspaces()}
    folder_ids = {f.id for f in state.folders.list_folders()}
    for task in state.tasks.list_tasks():
        assert task.workspace_id in ws_ids
        assert task.folder_id is None or task.folder_id in folder_ids
        assert all(s.parent_id == task.id for s in task.subtasks)


def test_corrupt_snapshot_falls_back_to_seed(settings, clock) -> None:
    storage = InMemoryStorage(data={"tasks": "{not json", "tags": '{"a": 1}', "workspaces": ""})
    state = _seeded(settings, storage, clock)
    assert state.tasks.count_tasks() == 3
    assert len(state.tags.list_tags()) == 5
    assert len(state.workspaces.list_workspaces()) == 2


def test_persisted_empty_list_stays_empty(settings, clock) -> None:
    storage = InMemoryStorage(data={"tasks": "[]", "folders": "[]"})
    state = _seeded(settings, storage, clock)
    assert state.tasks.count_tasks() == 0
    assert state.folders.list_folders() == []
    assert len(state.workspaces.list_workspaces()) == 2


def test_malformed_records_are_skipped(settings, clock) -> None:
    storage = InMemoryStorage(data={"tags": '[{"id": "1", "name": "Ok"}, {"name": "no id"}, 7]'})
    state = _seeded(settings, storage, clock)
    assert [t.name for t in state.tags.list_tags()] == ["Ok"]

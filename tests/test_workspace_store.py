# tests/test_workspace_store.py

from __future__ import annotations

import json

from tasknest.core.notices import Severity
from tasknest.tasks.models import Workspace, WorkspaceDraft, WorkspacePatch
from tasknest.tasks.workspace_store import CURRENT_WORKSPACE_KEY, WorkspaceStore


def _store(storage, notifier) -> WorkspaceStore:
    return WorkspaceStore(storage, notifier=notifier, seed=False)


def test_add_and_list_in_insertion_order(storage, notifier) -> None:
    store = _store(storage, notifier)
    a = store.add_workspace(WorkspaceDraft(name="Pessoal", icon="home"))
    b = store.add_workspace(WorkspaceDraft(name="Trabalho", icon="briefcase"))
    assert store.list_workspaces() == [a, b]
    assert a.id != b.id
    assert store.current is None


def test_add_workspace_requires_name(storage, notifier) -> None:
    store = _store(storage, notifier)
    assert store.add_workspace(WorkspaceDraft(name="")) is None
    assert store.list_workspaces() == []
    assert notifier.last.severity is Severity.ERROR


def test_update_current_workspace_refreshes_current(storage, notifier) -> None:
    store = _store(storage, notifier)
    ws = store.add_workspace(WorkspaceDraft(name="Old"))
    store.set_current(ws)

    store.update_workspace(ws.id, WorkspacePatch(name="New", color="#111111"))

    assert store.current == Workspace(id=ws.id, name="New", icon=ws.icon, color="#111111")
    assert json.loads(storage.data[CURRENT_WORKSPACE_KEY])["name"] == "New"


def test_update_other_workspace_leaves_current(storage, notifier) -> None:
    store = _store(storage, notifier)
    a = store.add_workspace(WorkspaceDraft(name="A"))
    b = store.add_workspace(WorkspaceDraft(name="B"))
    store.set_current(a)
    store.update_workspace(b.id, WorkspacePatch(name="B2"))
    assert store.current == a


def test_delete_current_selects_first_remaining(storage, notifier) -> None:
    store = _store(storage, notifier)
    a = store.add_workspace(WorkspaceDraft(name="A"))
    b = store.add_workspace(WorkspaceDraft(name="B"))
    c = store.add_workspace(WorkspaceDraft(name="C"))
    store.set_current(b)

    assert store.delete_workspace(b.id) is True

    assert store.list_workspaces() == [a, c]
    assert store.current == a


def test_delete_non_current_keeps_current(storage, notifier) -> None:
    store = _store(storage, notifier)
    a = store.add_workspace(WorkspaceDraft(name="A"))
    b = store.add_workspace(WorkspaceDraft(name="B"))
    store.set_current(a)
    store.delete_workspace(b.id)
    assert store.current == a


def test_delete_last_workspace_leaves_no_current(storage, notifier) -> None:
    store = _store(storage, notifier)
    only = store.add_workspace(WorkspaceDraft(name="Only"))
    store.set_current(only)

    store.delete_workspace(only.id)

    assert store.list_workspaces() == []
    assert store.current is None
    assert CURRENT_WORKSPACE_KEY not in storage.data
    # The empty state survives a restart instead of falling back to seed data.
    reloaded = WorkspaceStore(storage, notifier=notifier, seed=True)
    assert reloaded.list_workspaces() == []
    assert reloaded.current is None


def test_current_is_restored_from_storage(storage, notifier) -> None:
    store = _store(storage, notifier)
    store.add_workspace(WorkspaceDraft(name="A"))
    b = store.add_workspace(WorkspaceDraft(name="B"))
    store.set_current(b)

    assert _store(storage, notifier).current == b


def test_set_current_does_not_validate(storage, notifier) -> None:
    store = _store(storage, notifier)
    ghost = Workspace(id="ghost", name="Ghost")
    store.set_current(ghost)
    assert store.current == ghost
    assert store.list_workspaces() == []


def test_unknown_ids_are_noops(storage, notifier) -> None:
    store = _store(storage, notifier)
    store.add_workspace(WorkspaceDraft(name="A"))
    assert store.update_workspace("missing", WorkspacePatch(name="x")) is None
    assert store.delete_workspace("missing") is False
    assert len(store.list_workspaces()) == 1

# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from tasknest.cli.bootstrap import create_initial_state
from tasknest.core.notices import CollectingNotifier
from tasknest.core.state import AppState
from tasknest.tasks.models import TaskDraft, Workspace, WorkspaceDraft

from .fakes import FakeClock, InMemoryStorage


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="tasknest-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        storage_path=tmp_path / "tasknest.sqlite3",
        seed_on_first_run=False,
        upcoming_days=3,
        console_enabled=False,
    )


@pytest.fixture()
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture()
def notifier() -> CollectingNotifier:
    return CollectingNotifier()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def state(settings, storage, notifier, clock) -> AppState:
    """
    AppState wired with in-memory storage, a collecting notifier and a fake clock.
    Starts empty (no seed data).
    """
    return create_initial_state(settings=settings, storage=storage, notifier=notifier, clock=clock)


@pytest.fixture()
def workspace(state: AppState) -> Workspace:
    ws = state.workspaces.add_workspace(WorkspaceDraft(name="Trabalho", icon="briefcase"))
    assert ws is not None
    state.workspaces.set_current(ws)
    return ws


@pytest.fixture()
def make_task(state: AppState, workspace: Workspace):
    """Factory: add a task to the fixture workspace and return it."""

    def _make(title: str = "Task", **fields):
        fields.setdefault("workspace_id", workspace.id)
        task = state.tasks.add_task(TaskDraft(title=title, **fields))
        assert task is not None
        return task

    return _make

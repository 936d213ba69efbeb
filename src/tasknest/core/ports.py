# src/tasknest/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the stores.

The stores depend on Protocols instead of concrete implementations.
This keeps storage/notification backends swappable and makes testing easier.
"""

from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .notices import Notice

Clock = Callable[[], datetime]
# Returns a timezone-aware "now"; injected so tests can control time.


class SnapshotStorage(Protocol):
    """
    Durable key/value storage for serialized state slices.

    Each slice (tasks, folders, tags, workspaces, currentWorkspace) lives under
    its own key and is read/written independently as JSON text.
    """

    def load(self, key: str) -> str | None: ...
    def save(self, key: str, value: str) -> None: ...
    def delete(self, key: str) -> None: ...


class Notifier(Protocol):
    """One-shot user-facing notification channel (title + description + severity)."""

    def notify(self, notice: Notice) -> None: ...

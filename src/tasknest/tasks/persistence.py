# src/tasknest/tasks/persistence.py

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import Any, TypeVar

from ..core import notices
from ..core.notices import LoggingNotifier, Notice
from ..core.ports import Clock, Notifier, SnapshotStorage
from .models import records_from_json, utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SliceStore:
    """
    Shared plumbing for the stores: one persisted slice, a notifier, a clock.

    Subclasses own their in-memory state; this base only loads/saves JSON
    snapshots and reports outcomes.
    """

    def __init__(
        self,
        storage: SnapshotStorage,
        *,
        notifier: Notifier | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._storage = storage
        self._notifier: Notifier = notifier or LoggingNotifier()
        self._clock: Clock = clock or utc_now

    # ---- helpers ----

    def _now(self) -> datetime:
        return self._clock()

    def _notify(self, notice: Notice) -> None:
        try:
            self._notifier.notify(notice)
        except Exception:
            logger.exception("Notifier failed for notice %r", notice.title)

    def _load_json(self, key: str) -> Any | None:
        """Read and parse one key; None when absent, empty or unparseable."""
        try:
            raw = self._storage.load(key)
        except Exception:
            logger.exception("Failed to read snapshot key=%s", key)
            return None
        if raw is None or not raw.strip():
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Snapshot key=%s is not valid JSON; ignoring it.", key)
            return None

    def _load_records(
        self,
        key: str,
        parse: Callable[[Mapping[str, Any]], T],
        seed: Callable[[], list[T]],
    ) -> list[T]:
        data = self._load_json(key)
        if data is not None:
            try:
                return records_from_json(data, parse)
            except (ValueError, KeyError, TypeError):
                logger.warning("Snapshot key=%s has an unexpected shape; using seed data.", key)
        return seed()

    def _save_json(self, key: str, payload: Any, *, what: str) -> bool:
        """
        Persist one slice. Failures are logged and reported as a notice;
        in-memory state stays authoritative either way.
        """
        try:
            self._storage.save(key, json.dumps(payload, ensure_ascii=False))
            return True
        except Exception:
            logger.exception("Failed to persist key=%s", key)
            self._notify(notices.error("Could not save", f"Changes to {what} are kept in memory only."))
            return False

    def _save_records(self, key: str, items: Iterable[T], to_dict: Callable[[T], dict[str, Any]], *, what: str) -> bool:
        return self._save_json(key, [to_dict(i) for i in items], what=what)

    def _delete_key(self, key: str, *, what: str) -> bool:
        try:
            self._storage.delete(key)
            return True
        except Exception:
            logger.exception("Failed to delete key=%s", key)
            self._notify(notices.error("Could not save", f"Changes to {what} are kept in memory only."))
            return False

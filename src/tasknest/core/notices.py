# src/tasknest/core/notices.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum

logger = logging.getLogger(__name__)


class Severity(StrEnum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Notice:
    title: str
    description: str = ""
    severity: Severity = Severity.INFO


def success(title: str, description: str = "") -> Notice:
    return Notice(title=title, description=description, severity=Severity.SUCCESS)


def info(title: str, description: str = "") -> Notice:
    return Notice(title=title, description=description, severity=Severity.INFO)


def error(title: str, description: str = "") -> Notice:
    return Notice(title=title, description=description, severity=Severity.ERROR)


class LoggingNotifier:
    """Default notifier: routes notices into the log (errors at WARNING)."""

    def notify(self, notice: Notice) -> None:
        level = logging.WARNING if notice.severity is Severity.ERROR else logging.INFO
        logger.log(level, "[%s] %s: %s", notice.severity.value, notice.title, notice.description)


@dataclass(slots=True)
class CollectingNotifier:
    """
    Keeps notices in memory until drained.

    The console connector drains it after each command; tests inspect it.
    """

    notices: list[Notice] = field(default_factory=list)

    def notify(self, notice: Notice) -> None:
        logger.debug("Notice collected: %s", notice)
        self.notices.append(notice)

    def drain(self) -> list[Notice]:
        out = list(self.notices)
        self.notices.clear()
        return out

    @property
    def last(self) -> Notice | None:
        return self.notices[-1] if self.notices else None

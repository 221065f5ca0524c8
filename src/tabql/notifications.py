"""Notification sinks for query outcomes.

A sink receives one notification per terminal outcome, success or
failure. Sinks only observe; they never change how a query runs.
"""

from __future__ import annotations

import enum
import logging
import sys
from dataclasses import dataclass
from typing import Protocol, TextIO

logger = logging.getLogger(__name__)


class Severity(enum.Enum):
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    severity: Severity = Severity.INFO


class NotificationSink(Protocol):
    def notify(self, notification: Notification) -> None: ...


class LoggingNotifier:
    """Writes notifications to the ``tabql.notifications`` logger."""

    def notify(self, notification: Notification) -> None:
        level = logging.WARNING if notification.severity is Severity.ERROR else logging.INFO
        logger.log(level, "%s: %s", notification.title, notification.description)


class CollectingNotifier:
    """Keeps every notification in memory."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def last(self) -> Notification | None:
        return self.notifications[-1] if self.notifications else None


class PrintingNotifier:
    """Prints notifications; errors go to stderr."""

    def __init__(self, out: TextIO | None = None, err: TextIO | None = None) -> None:
        self.out = out
        self.err = err

    def notify(self, notification: Notification) -> None:
        if notification.severity is Severity.ERROR:
            print(f"{notification.title}: {notification.description}", file=self.err or sys.stderr)
        else:
            print(notification.description, file=self.out or sys.stdout)

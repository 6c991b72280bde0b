"""Notifier adapter that buffers toasts for one editor session."""

import logging

from app.application.interfaces import Notifier
from app.domain.entities import Notification, Severity

logger = logging.getLogger(__name__)


class SessionNotifier(Notifier):
    """Logs every notification and keeps it until the next response drains it."""

    def __init__(self, session_label: str = ""):
        self._label = session_label
        self._pending: list[Notification] = []

    def notify(self, severity: Severity, title: str, detail: str = "") -> None:
        level = logging.WARNING if severity == Severity.ERROR else logging.INFO
        logger.log(level, "[%s] %s: %s", self._label or "editor", title, detail)
        self._pending.append(Notification(severity=severity, title=title, detail=detail))

    def drain(self) -> list[Notification]:
        """Return and forget the buffered notifications, oldest first."""
        pending, self._pending = self._pending, []
        return pending

    @property
    def pending(self) -> list[Notification]:
        return list(self._pending)

"""Notification channel port: toast-style feedback for the editor user."""

from abc import ABC, abstractmethod

from app.domain.entities import Severity


class Notifier(ABC):
    """Fire-and-forget user notifications."""

    @abstractmethod
    def notify(self, severity: Severity, title: str, detail: str = "") -> None:
        ...

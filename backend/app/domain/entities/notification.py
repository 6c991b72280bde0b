"""Domain entity for user-facing notifications (toasts)."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class Severity(str, Enum):
    """How a notification should be rendered."""

    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


@dataclass
class Notification:
    """A fire-and-forget message for the person using the editor."""

    severity: Severity
    title: str
    detail: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

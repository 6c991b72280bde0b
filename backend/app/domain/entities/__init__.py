from .client import (
    Client,
    ClientDetail,
    ClientDocument,
    ClientSummary,
    ClientType,
    Contact,
    Member,
    PendingFile,
)
from .notification import Notification, Severity

__all__ = [
    "Client",
    "ClientDetail",
    "ClientDocument",
    "ClientSummary",
    "ClientType",
    "Contact",
    "Member",
    "PendingFile",
    "Notification",
    "Severity",
]

"""Domain entities for clients and their owned sub-entities."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

_UNSAFE_EXTENSION = re.compile(r"[^\w\-]")


class ClientType(str, Enum):
    """Kind of customer a client record describes."""

    ORGANIZATION = "organization"
    INDIVIDUAL = "individual"


@dataclass
class ClientDocument:
    """A finalized upload embedded in the client's document collection."""

    name: str
    url: str
    id: str = field(default_factory=lambda: str(uuid4()))
    uploaded_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def to_json(self) -> dict[str, str]:
        """Serialise for the ``documents`` JSON column (camelCase timestamp key)."""
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "uploadedAt": self.uploaded_at,
        }

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "ClientDocument":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            url=data.get("url", ""),
            uploaded_at=data.get("uploadedAt") or data.get("uploaded_at") or "",
        )


@dataclass
class PendingFile:
    """A file selected in an editor session but not yet uploaded."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def extension(self) -> str:
        """Storage-safe extension after the last dot; ``bin`` when there is none."""
        if "." not in self.filename:
            return "bin"
        return _UNSAFE_EXTENSION.sub("", self.filename.rsplit(".", 1)[-1])[:16] or "bin"

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class Contact:
    """A person associated with an organization-type client."""

    name: str = ""
    position: str = ""
    email: str = ""
    phone: str = ""
    is_primary: bool = False
    id: str | None = None


@dataclass
class Member:
    """A person belonging to an organization-type client.

    ``upload_key`` and ``pending_file`` exist only for the editor session that
    holds the member; they are never persisted.
    """

    name: str = ""
    role: str = ""
    email: str = ""
    phone: str = ""
    notes: str = ""
    document_url: str = ""
    document_name: str = ""
    id: str = field(default_factory=lambda: str(uuid4()))
    upload_key: str | None = None
    pending_file: PendingFile | None = None


@dataclass
class Client:
    """Root entity: an organization or individual customer record."""

    name: str
    type: ClientType = ClientType.ORGANIZATION
    description: str | None = None
    website: str | None = None
    address: str | None = None
    contact: str | None = None
    email: str | None = None
    phone: str | None = None
    profile_image_url: str | None = None
    is_archived: bool = False
    documents: list[ClientDocument] = field(default_factory=list)
    id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_organization(self) -> bool:
        return self.type == ClientType.ORGANIZATION

    def touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)


@dataclass
class ClientSummary:
    """A client as shown in list views, with the counters the list renders."""

    client: Client
    has_active_contract: bool = False
    contact_count: int = 0
    member_count: int = 0


@dataclass
class ClientDetail:
    """A client together with its persisted contacts and members."""

    client: Client
    contacts: list[Contact] = field(default_factory=list)
    members: list[Member] = field(default_factory=list)

"""Shared in-memory fakes of the application ports."""

from dataclasses import replace
from uuid import uuid4

import pytest

from app.application.interfaces import BlobStorage, CacheInvalidator, ClientRepository, Notifier
from app.application.services import ClientUploadService, PreviewRegistry
from app.domain.entities import Client, ClientDocument, Contact, Member, Notification, Severity
from app.domain.exceptions import EntityNotFoundError, PersistenceError, StorageError


def _copy_client(client: Client) -> Client:
    return replace(client, documents=[replace(d) for d in client.documents])


class FakeClientRepository(ClientRepository):
    """In-memory fake repository that records every write it receives.

    Add an operation name to ``fail_on`` to make that write raise
    PersistenceError.
    """

    def __init__(self):
        self.clients: dict[str, Client] = {}
        self.contacts: dict[str, list[Contact]] = {}
        self.members: dict[str, list[Member]] = {}
        self.active_trip_clients: set[str] = set()
        self.purged: list[str] = []
        self.calls: list[str] = []
        self.fail_on: set[str] = set()

    def _record(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.fail_on:
            raise PersistenceError(operation, f"{operation} rejected by the store")

    def add(self, client: Client, contacts=None, members=None) -> Client:
        """Seed a persisted client directly (no call recorded)."""
        client = replace(client, id=client.id or str(uuid4()))
        self.clients[client.id] = client
        self.contacts[client.id] = list(contacts or [])
        self.members[client.id] = list(members or [])
        return _copy_client(client)

    async def get_by_id(self, client_id: str) -> Client | None:
        client = self.clients.get(client_id)
        return _copy_client(client) if client else None

    async def get_all(self, *, archived: bool | None = None) -> list[Client]:
        clients = sorted(self.clients.values(), key=lambda c: c.name)
        if archived is not None:
            clients = [c for c in clients if c.is_archived == archived]
        return [_copy_client(c) for c in clients]

    async def create(self, client: Client) -> Client:
        self._record("create")
        stored = replace(client, id=str(uuid4()))
        self.clients[stored.id] = stored
        self.contacts.setdefault(stored.id, [])
        self.members.setdefault(stored.id, [])
        return _copy_client(stored)

    async def update(self, client: Client) -> Client:
        self._record("update")
        if client.id not in self.clients:
            raise EntityNotFoundError("Client", client.id)
        self.clients[client.id] = _copy_client(client)
        return _copy_client(client)

    async def set_profile_image(self, client_id: str, url: str | None) -> None:
        self._record("set_profile_image")
        self.clients[client_id].profile_image_url = url

    async def set_documents(self, client_id: str, documents: list[ClientDocument]) -> None:
        self._record("set_documents")
        self.clients[client_id].documents = [replace(d) for d in documents]

    async def set_archived(self, client_id: str, archived: bool) -> bool:
        self._record("set_archived")
        if client_id not in self.clients:
            return False
        self.clients[client_id].is_archived = archived
        return True

    async def purge(self, client_id: str) -> bool:
        self._record("purge")
        if client_id not in self.clients:
            return False
        del self.clients[client_id]
        self.contacts.pop(client_id, None)
        self.members.pop(client_id, None)
        self.purged.append(client_id)
        return True

    async def list_contacts(self, client_id: str) -> list[Contact]:
        return [replace(c) for c in self.contacts.get(client_id, [])]

    async def insert_contacts(self, client_id: str, contacts: list[Contact]) -> list[Contact]:
        self._record("insert_contacts")
        stored = [replace(c, id=c.id or str(uuid4())) for c in contacts]
        self.contacts.setdefault(client_id, []).extend(stored)
        return [replace(c) for c in stored]

    async def delete_contacts(self, client_id: str) -> None:
        self._record("delete_contacts")
        self.contacts[client_id] = []

    async def list_members(self, client_id: str) -> list[Member]:
        return [replace(m) for m in self.members.get(client_id, [])]

    async def insert_members(self, client_id: str, members: list[Member]) -> list[Member]:
        self._record("insert_members")
        stored = [replace(m, upload_key=None, pending_file=None) for m in members]
        self.members.setdefault(client_id, []).extend(stored)
        return [replace(m) for m in stored]

    async def update_member(self, client_id: str, member: Member) -> Member:
        self._record("update_member")
        rows = self.members.get(client_id, [])
        for i, row in enumerate(rows):
            if row.id == member.id:
                rows[i] = replace(member, upload_key=None, pending_file=None)
                return replace(rows[i])
        raise EntityNotFoundError("Member", member.id)

    async def delete_members(self, client_id: str, member_ids: list[str]) -> None:
        self._record("delete_members")
        self.members[client_id] = [
            m for m in self.members.get(client_id, []) if m.id not in member_ids
        ]

    async def count_contacts(self) -> dict[str, int]:
        return {cid: len(rows) for cid, rows in self.contacts.items() if rows}

    async def count_members(self) -> dict[str, int]:
        return {cid: len(rows) for cid, rows in self.members.items() if rows}

    async def client_ids_with_active_trips(self) -> set[str]:
        return set(self.active_trip_clients)


class FakeBlobStorage(BlobStorage):
    """Dict-backed blob store. Uploads whose content is in ``fail_contents`` are rejected."""

    def __init__(self):
        self.objects: dict[tuple[str, str], bytes] = {}
        self.fail_contents: set[bytes] = set()
        self.uploads: list[tuple[str, str]] = []

    async def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        *,
        content_type: str = "application/octet-stream",
        overwrite: bool = False,
    ) -> None:
        if content in self.fail_contents:
            raise StorageError(bucket, path, "simulated outage")
        if (bucket, path) in self.objects and not overwrite:
            raise StorageError(bucket, path, "The resource already exists")
        self.objects[(bucket, path)] = content
        self.uploads.append((bucket, path))

    async def remove(self, bucket: str, paths: list[str]) -> int:
        removed = 0
        for path in paths:
            if self.objects.pop((bucket, path), None) is not None:
                removed += 1
        return removed

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"https://files.test/{bucket}/{path}"


class RecordingNotifier(Notifier):
    def __init__(self):
        self.notifications: list[Notification] = []

    def notify(self, severity: Severity, title: str, detail: str = "") -> None:
        self.notifications.append(Notification(severity=severity, title=title, detail=detail))

    @property
    def titles(self) -> list[str]:
        return [n.title for n in self.notifications]

    @property
    def errors(self) -> list[Notification]:
        return [n for n in self.notifications if n.severity == Severity.ERROR]


class RecordingInvalidator(CacheInvalidator):
    def __init__(self):
        self.keys: list[str] = []

    async def invalidate(self, resource_key: str) -> None:
        self.keys.append(resource_key)


@pytest.fixture
def repository() -> FakeClientRepository:
    return FakeClientRepository()


@pytest.fixture
def storage() -> FakeBlobStorage:
    return FakeBlobStorage()


@pytest.fixture
def uploads(storage: FakeBlobStorage) -> ClientUploadService:
    return ClientUploadService(storage)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def invalidator() -> RecordingInvalidator:
    return RecordingInvalidator()


@pytest.fixture
def previews() -> PreviewRegistry:
    return PreviewRegistry()

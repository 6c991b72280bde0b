"""Abstract repository interface (port) for client persistence."""

from abc import ABC, abstractmethod

from app.domain.entities import Client, ClientDocument, Contact, Member


class ClientRepository(ABC):
    """Port for the relational store behind clients and their sub-entities.

    Every write is one independent call against the store; callers that chain
    several writes get no atomicity across them.
    """

    # ── Clients ──────────────────────────────────────────────────────

    @abstractmethod
    async def get_by_id(self, client_id: str) -> Client | None:
        """Retrieve a single client by its id."""
        ...

    @abstractmethod
    async def get_all(self, *, archived: bool | None = None) -> list[Client]:
        """Retrieve clients ordered by name, optionally filtered on the archive flag."""
        ...

    @abstractmethod
    async def create(self, client: Client) -> Client:
        """Insert a new client and return it with its generated id."""
        ...

    @abstractmethod
    async def update(self, client: Client) -> Client:
        """Write every base field of an existing client in a single call."""
        ...

    @abstractmethod
    async def set_profile_image(self, client_id: str, url: str | None) -> None:
        """Update only the profile image reference."""
        ...

    @abstractmethod
    async def set_documents(self, client_id: str, documents: list[ClientDocument]) -> None:
        """Replace the embedded document collection."""
        ...

    @abstractmethod
    async def set_archived(self, client_id: str, archived: bool) -> bool:
        """Flip the archive flag. Returns False if the client does not exist."""
        ...

    @abstractmethod
    async def purge(self, client_id: str) -> bool:
        """Null trip/invoice references, then delete the client and its rows.

        Returns False if the client does not exist.
        """
        ...

    # ── Contacts ─────────────────────────────────────────────────────

    @abstractmethod
    async def list_contacts(self, client_id: str) -> list[Contact]:
        ...

    @abstractmethod
    async def insert_contacts(self, client_id: str, contacts: list[Contact]) -> list[Contact]:
        ...

    @abstractmethod
    async def delete_contacts(self, client_id: str) -> None:
        ...

    # ── Members ──────────────────────────────────────────────────────

    @abstractmethod
    async def list_members(self, client_id: str) -> list[Member]:
        ...

    @abstractmethod
    async def insert_members(self, client_id: str, members: list[Member]) -> list[Member]:
        ...

    @abstractmethod
    async def update_member(self, client_id: str, member: Member) -> Member:
        ...

    @abstractmethod
    async def delete_members(self, client_id: str, member_ids: list[str]) -> None:
        ...

    # ── List-view aggregates ─────────────────────────────────────────

    @abstractmethod
    async def count_contacts(self) -> dict[str, int]:
        """Number of contacts per client id (clients without contacts are omitted)."""
        ...

    @abstractmethod
    async def count_members(self) -> dict[str, int]:
        """Number of members per client id (clients without members are omitted)."""
        ...

    @abstractmethod
    async def client_ids_with_active_trips(self) -> set[str]:
        """Ids of clients with an in-progress trip that has not been invoiced yet."""
        ...

"""Application service (use case) for reading clients."""

from enum import Enum

from app.application.interfaces import ClientRepository
from app.domain.entities import Client, ClientDetail, ClientSummary, ClientType
from app.domain.exceptions import EntityNotFoundError


class ClientStatusFilter(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    ALL = "all"


_ARCHIVED_FLAG = {
    ClientStatusFilter.ACTIVE: False,
    ClientStatusFilter.ARCHIVED: True,
    ClientStatusFilter.ALL: None,
}


class ClientService:
    """Read side of the client module. Depends on the repository port (DI)."""

    def __init__(self, repository: ClientRepository):
        self._repository = repository

    async def get_client(self, client_id: str) -> Client:
        client = await self._repository.get_by_id(client_id)
        if client is None:
            raise EntityNotFoundError("Client", client_id)
        return client

    async def get_client_detail(self, client_id: str) -> ClientDetail:
        """Client plus its persisted contacts and members, as the editor loads it.

        Rows are loaded whatever the stored type, so switching an individual
        back to an organization in the editor keeps them.
        """
        client = await self.get_client(client_id)
        contacts = await self._repository.list_contacts(client_id)
        members = await self._repository.list_members(client_id)
        return ClientDetail(client=client, contacts=contacts, members=members)

    async def list_clients(
        self,
        *,
        search: str | None = None,
        type_filter: ClientType | None = None,
        status: ClientStatusFilter = ClientStatusFilter.ACTIVE,
    ) -> list[ClientSummary]:
        """List clients for the overview with contract flag and sub-entity counts.

        ``search`` matches name, contact or email case-insensitively.
        """
        clients = await self._repository.get_all(archived=_ARCHIVED_FLAG[status])
        if type_filter is not None:
            clients = [c for c in clients if c.type == type_filter]
        if search and search.strip():
            needle = search.strip().lower()
            clients = [c for c in clients if _matches(c, needle)]

        active = await self._repository.client_ids_with_active_trips()
        contact_counts = await self._repository.count_contacts()
        member_counts = await self._repository.count_members()
        return [
            ClientSummary(
                client=c,
                has_active_contract=c.id in active,
                contact_count=contact_counts.get(c.id, 0),
                member_count=member_counts.get(c.id, 0),
            )
            for c in clients
        ]


def _matches(client: Client, needle: str) -> bool:
    haystack = (client.name, client.contact, client.email)
    return any(needle in value.lower() for value in haystack if value)

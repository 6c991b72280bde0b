"""Unit tests for the client read service."""

import pytest

from app.application.services import ClientService, ClientStatusFilter
from app.domain.entities import Client, ClientType, Contact, Member
from app.domain.exceptions import EntityNotFoundError


@pytest.fixture
def service(repository) -> ClientService:
    repository.add(
        Client(id="c-1", name="Acme Logistics", contact="Jane Doe", email="office@acme.io"),
        contacts=[Contact(name="Jane Doe"), Contact(name="John Roe")],
        members=[Member(name="Alice Martin")],
    )
    repository.add(Client(id="c-2", name="Jo Bloggs", type=ClientType.INDIVIDUAL))
    repository.add(Client(id="c-3", name="Old Haulage", is_archived=True))
    repository.active_trip_clients.add("c-1")
    return ClientService(repository)


@pytest.mark.asyncio
async def test_active_clients_are_listed_by_default(service):
    summaries = await service.list_clients()
    assert [s.client.id for s in summaries] == ["c-1", "c-2"]


@pytest.mark.asyncio
async def test_summary_counters(service):
    summaries = {s.client.id: s for s in await service.list_clients()}
    assert summaries["c-1"].has_active_contract is True
    assert summaries["c-1"].contact_count == 2
    assert summaries["c-1"].member_count == 1
    assert summaries["c-2"].has_active_contract is False
    assert summaries["c-2"].contact_count == 0


@pytest.mark.asyncio
async def test_status_filter(service):
    archived = await service.list_clients(status=ClientStatusFilter.ARCHIVED)
    everything = await service.list_clients(status=ClientStatusFilter.ALL)
    assert [s.client.id for s in archived] == ["c-3"]
    assert len(everything) == 3


@pytest.mark.asyncio
async def test_type_filter(service):
    individuals = await service.list_clients(type_filter=ClientType.INDIVIDUAL)
    assert [s.client.name for s in individuals] == ["Jo Bloggs"]


@pytest.mark.asyncio
@pytest.mark.parametrize("search", ["acme", "JANE", "office@"])
async def test_search_matches_name_contact_and_email(service, search):
    summaries = await service.list_clients(search=search)
    assert [s.client.id for s in summaries] == ["c-1"]


@pytest.mark.asyncio
async def test_blank_search_is_ignored(service):
    assert len(await service.list_clients(search="   ")) == 2


@pytest.mark.asyncio
async def test_detail_loads_children_for_organizations(service):
    detail = await service.get_client_detail("c-1")
    assert len(detail.contacts) == 2
    assert len(detail.members) == 1


@pytest.mark.asyncio
async def test_detail_loads_children_stored_on_individuals(service, repository):
    repository.add(
        Client(id="c-4", name="Former Org", type=ClientType.INDIVIDUAL),
        contacts=[Contact(name="Jane Doe")],
        members=[Member(name="Alice Martin")],
    )

    detail = await service.get_client_detail("c-4")

    assert [c.name for c in detail.contacts] == ["Jane Doe"]
    assert [m.name for m in detail.members] == ["Alice Martin"]


@pytest.mark.asyncio
async def test_unknown_client_raises(service):
    with pytest.raises(EntityNotFoundError):
        await service.get_client("nope")

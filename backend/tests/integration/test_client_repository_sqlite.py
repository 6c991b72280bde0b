"""SQLAlchemyClientRepository against a real (SQLite) database."""

import pytest
from sqlalchemy import select

from app.domain.entities import Client, ClientDocument, ClientType, Contact, Member
from app.domain.exceptions import EntityNotFoundError
from app.infrastructure.database.models import InvoiceModel, TripModel
from app.infrastructure.database.repositories import SQLAlchemyClientRepository


@pytest.mark.asyncio
async def test_client_round_trip(session_factory):
    async with session_factory() as session:
        repo = SQLAlchemyClientRepository(session)
        created = await repo.create(Client(name="Acme Logistics", email="office@acme.io"))
        await repo.set_documents(
            created.id, [ClientDocument(id="d-1", name="a.pdf", url="http://files.test/a.pdf")]
        )
        await repo.set_profile_image(created.id, "http://files.test/p.png")

    async with session_factory() as session:
        loaded = await SQLAlchemyClientRepository(session).get_by_id(created.id)

    assert loaded.name == "Acme Logistics"
    assert loaded.type == ClientType.ORGANIZATION
    assert loaded.profile_image_url == "http://files.test/p.png"
    assert [d.id for d in loaded.documents] == ["d-1"]
    assert loaded.documents[0].to_json()["uploadedAt"]


@pytest.mark.asyncio
async def test_contacts_keep_their_order(session_factory):
    async with session_factory() as session:
        repo = SQLAlchemyClientRepository(session)
        client = await repo.create(Client(name="Acme Logistics"))
        await repo.insert_contacts(
            client.id, [Contact(name="Zoe Adams", is_primary=True), Contact(name="Adam Zeller")]
        )
        contacts = await repo.list_contacts(client.id)
        await repo.delete_contacts(client.id)
        after_delete = await repo.list_contacts(client.id)

    assert [c.name for c in contacts] == ["Zoe Adams", "Adam Zeller"]
    assert contacts[0].is_primary is True
    assert after_delete == []


@pytest.mark.asyncio
async def test_member_update_insert_delete(session_factory):
    async with session_factory() as session:
        repo = SQLAlchemyClientRepository(session)
        client = await repo.create(Client(name="Acme Logistics"))
        await repo.insert_members(client.id, [Member(id="m-1", name="Alice"), Member(id="m-2", name="Bob")])
        await repo.update_member(client.id, Member(id="m-1", name="Alice Dubois", role="Driver"))
        await repo.insert_members(client.id, [Member(id="m-3", name="Chris")])
        await repo.delete_members(client.id, ["m-2"])
        members = await repo.list_members(client.id)

        with pytest.raises(EntityNotFoundError):
            await repo.update_member(client.id, Member(id="missing", name="Nobody"))

    assert [(m.id, m.name) for m in members] == [("m-1", "Alice Dubois"), ("m-3", "Chris")]
    assert members[0].role == "Driver"
    assert members[1].document_url == ""


@pytest.mark.asyncio
async def test_list_aggregates(session_factory):
    async with session_factory() as session:
        repo = SQLAlchemyClientRepository(session)
        busy = await repo.create(Client(name="Busy Haulage"))
        idle = await repo.create(Client(name="Idle Transport", type=ClientType.INDIVIDUAL))
        await repo.insert_contacts(busy.id, [Contact(name="Jane Doe")])
        await repo.insert_members(busy.id, [Member(name="Al"), Member(name="Bo")])
        session.add_all([
            InvoiceModel(id="inv-1", client_id=busy.id),
            TripModel(id="t-1", client_id=busy.id, status="in_progress"),
            TripModel(id="t-2", client_id=idle.id, status="in_progress", invoice_id="inv-1"),
            TripModel(id="t-3", client_id=idle.id, status="completed"),
        ])
        await session.commit()

        assert await repo.client_ids_with_active_trips() == {busy.id}
        assert await repo.count_contacts() == {busy.id: 1}
        assert await repo.count_members() == {busy.id: 2}


@pytest.mark.asyncio
async def test_archive_filter(session_factory):
    async with session_factory() as session:
        repo = SQLAlchemyClientRepository(session)
        kept = await repo.create(Client(name="Acme Logistics"))
        gone = await repo.create(Client(name="Beta Transport"))
        assert await repo.set_archived(gone.id, True) is True
        assert await repo.set_archived("missing", True) is False

        active = await repo.get_all(archived=False)
        archived = await repo.get_all(archived=True)

    assert [c.id for c in active] == [kept.id]
    assert [c.id for c in archived] == [gone.id]


@pytest.mark.asyncio
async def test_purge_detaches_trips_and_invoices(session_factory):
    async with session_factory() as session:
        repo = SQLAlchemyClientRepository(session)
        client = await repo.create(Client(name="Acme Logistics", is_archived=True))
        await repo.insert_contacts(client.id, [Contact(name="Jane Doe")])
        await repo.insert_members(client.id, [Member(name="Alice")])
        session.add_all([
            InvoiceModel(id="inv-1", client_id=client.id),
            TripModel(id="t-1", client_id=client.id, invoice_id="inv-1", status="completed"),
        ])
        await session.commit()

        assert await repo.purge(client.id) is True
        assert await repo.purge(client.id) is False

    async with session_factory() as session:
        trip = await session.scalar(select(TripModel).where(TripModel.id == "t-1"))
        invoice = await session.scalar(select(InvoiceModel).where(InvoiceModel.id == "inv-1"))
        repo = SQLAlchemyClientRepository(session)

        assert trip.client_id is None
        assert trip.invoice_id == "inv-1"
        assert invoice.client_id is None
        assert await repo.get_by_id(client.id) is None
        assert await repo.list_contacts(client.id) == []
        assert await repo.list_members(client.id) == []

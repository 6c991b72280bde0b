"""Concrete repository implementation for clients backed by SQLAlchemy.

Every write method commits on its own, so a caller chaining several writes
sees each one persisted independently (no surrounding transaction).
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces import ClientRepository
from app.domain.entities import Client, ClientDocument, ClientType, Contact, Member
from app.domain.exceptions import EntityNotFoundError, PersistenceError
from app.infrastructure.database.models import (
    ClientContactModel,
    ClientMemberModel,
    ClientModel,
    InvoiceModel,
    TripModel,
)

logger = logging.getLogger(__name__)

ACTIVE_TRIP_STATUS = "in_progress"


class SQLAlchemyClientRepository(ClientRepository):
    """Implements the ClientRepository port using SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    # ── Mapping ──────────────────────────────────────────────────────

    def _to_entity(self, model: ClientModel) -> Client:
        """Map ORM model → domain entity."""
        return Client(
            id=model.id,
            name=model.name,
            type=ClientType(model.type),
            description=model.description,
            website=model.website,
            address=model.address,
            contact=model.contact,
            email=model.email,
            phone=model.phone,
            profile_image_url=model.profile_image_url,
            is_archived=model.is_archived,
            documents=[ClientDocument.from_json(d) for d in model.documents or []],
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Client) -> ClientModel:
        """Map domain entity → ORM model (for creation)."""
        return ClientModel(
            id=entity.id or str(uuid4()),
            name=entity.name,
            type=entity.type.value,
            description=entity.description,
            website=entity.website,
            address=entity.address,
            contact=entity.contact,
            email=entity.email,
            phone=entity.phone,
            profile_image_url=entity.profile_image_url,
            is_archived=entity.is_archived,
            documents=[d.to_json() for d in entity.documents],
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    @staticmethod
    def _contact_to_entity(model: ClientContactModel) -> Contact:
        return Contact(
            id=model.id,
            name=model.name,
            position=model.position or "",
            email=model.email or "",
            phone=model.phone or "",
            is_primary=model.is_primary,
        )

    @staticmethod
    def _member_to_entity(model: ClientMemberModel) -> Member:
        return Member(
            id=model.id,
            name=model.name,
            role=model.role or "",
            email=model.email or "",
            phone=model.phone or "",
            notes=model.notes or "",
            document_url=model.document_url or "",
            document_name=model.document_name or "",
        )

    @asynccontextmanager
    async def _write(self, operation: str) -> AsyncIterator[None]:
        """Run one write as its own committed unit."""
        try:
            yield
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            message = str(getattr(exc, "orig", None) or exc)
            logger.error("Store write '%s' failed: %s", operation, message)
            raise PersistenceError(operation, message) from exc

    async def _require(self, client_id: str) -> ClientModel:
        model = await self._session.get(ClientModel, client_id)
        if model is None:
            raise EntityNotFoundError("Client", client_id)
        return model

    # ── Clients ──────────────────────────────────────────────────────

    async def get_by_id(self, client_id: str) -> Client | None:
        result = await self._session.get(ClientModel, client_id)
        return self._to_entity(result) if result else None

    async def get_all(self, *, archived: bool | None = None) -> list[Client]:
        stmt = select(ClientModel)
        if archived is not None:
            stmt = stmt.where(ClientModel.is_archived == archived)
        stmt = stmt.order_by(ClientModel.name)
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    async def create(self, client: Client) -> Client:
        model = self._to_model(client)
        async with self._write("insert client"):
            self._session.add(model)
            await self._session.flush()
        logger.info("Created client %s (%s)", model.id, model.name)
        return self._to_entity(model)

    async def update(self, client: Client) -> Client:
        model = await self._require(client.id)
        async with self._write("update client"):
            model.name = client.name
            model.type = client.type.value
            model.description = client.description
            model.website = client.website
            model.address = client.address
            model.contact = client.contact
            model.email = client.email
            model.phone = client.phone
            model.profile_image_url = client.profile_image_url
            model.documents = [d.to_json() for d in client.documents]
            model.updated_at = datetime.now(timezone.utc)
            await self._session.flush()
        return self._to_entity(model)

    async def set_profile_image(self, client_id: str, url: str | None) -> None:
        model = await self._require(client_id)
        async with self._write("update profile image"):
            model.profile_image_url = url

    async def set_documents(self, client_id: str, documents: list[ClientDocument]) -> None:
        model = await self._require(client_id)
        async with self._write("update documents"):
            model.documents = [d.to_json() for d in documents]

    async def set_archived(self, client_id: str, archived: bool) -> bool:
        model = await self._session.get(ClientModel, client_id)
        if model is None:
            return False
        async with self._write("archive client" if archived else "restore client"):
            model.is_archived = archived
        return True

    async def purge(self, client_id: str) -> bool:
        model = await self._session.get(ClientModel, client_id)
        if model is None:
            return False
        async with self._write("purge client"):
            await self._session.execute(
                update(TripModel).where(TripModel.client_id == client_id).values(client_id=None)
            )
            await self._session.execute(
                update(InvoiceModel)
                .where(InvoiceModel.client_id == client_id)
                .values(client_id=None)
            )
            await self._session.execute(
                delete(ClientContactModel).where(ClientContactModel.client_id == client_id)
            )
            await self._session.execute(
                delete(ClientMemberModel).where(ClientMemberModel.client_id == client_id)
            )
            await self._session.delete(model)
        return True

    # ── Contacts ─────────────────────────────────────────────────────

    async def list_contacts(self, client_id: str) -> list[Contact]:
        stmt = (
            select(ClientContactModel)
            .where(ClientContactModel.client_id == client_id)
            .order_by(ClientContactModel.sort_order)
        )
        result = await self._session.execute(stmt)
        return [self._contact_to_entity(row) for row in result.scalars().all()]

    async def insert_contacts(self, client_id: str, contacts: list[Contact]) -> list[Contact]:
        models = [
            ClientContactModel(
                id=contact.id or str(uuid4()),
                client_id=client_id,
                name=contact.name,
                position=contact.position or None,
                email=contact.email or None,
                phone=contact.phone or None,
                is_primary=contact.is_primary,
                sort_order=i,
            )
            for i, contact in enumerate(contacts)
        ]
        async with self._write("insert contacts"):
            self._session.add_all(models)
            await self._session.flush()
        return [self._contact_to_entity(m) for m in models]

    async def delete_contacts(self, client_id: str) -> None:
        async with self._write("delete contacts"):
            await self._session.execute(
                delete(ClientContactModel).where(ClientContactModel.client_id == client_id)
            )

    # ── Members ──────────────────────────────────────────────────────

    async def list_members(self, client_id: str) -> list[Member]:
        stmt = (
            select(ClientMemberModel)
            .where(ClientMemberModel.client_id == client_id)
            .order_by(ClientMemberModel.sort_order, ClientMemberModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._member_to_entity(row) for row in result.scalars().all()]

    async def insert_members(self, client_id: str, members: list[Member]) -> list[Member]:
        current_max = await self._session.scalar(
            select(func.max(ClientMemberModel.sort_order)).where(
                ClientMemberModel.client_id == client_id
            )
        )
        start = -1 if current_max is None else current_max
        models = [
            ClientMemberModel(
                id=member.id,
                client_id=client_id,
                name=member.name,
                role=member.role or None,
                email=member.email or None,
                phone=member.phone or None,
                notes=member.notes or None,
                document_url=member.document_url or None,
                document_name=member.document_name or None,
                sort_order=start + 1 + i,
            )
            for i, member in enumerate(members)
        ]
        async with self._write("insert members"):
            self._session.add_all(models)
            await self._session.flush()
        return [self._member_to_entity(m) for m in models]

    async def update_member(self, client_id: str, member: Member) -> Member:
        model = await self._session.get(ClientMemberModel, member.id)
        if model is None or model.client_id != client_id:
            raise EntityNotFoundError("Member", member.id)
        async with self._write("update member"):
            model.name = member.name
            model.role = member.role or None
            model.email = member.email or None
            model.phone = member.phone or None
            model.notes = member.notes or None
            model.document_url = member.document_url or None
            model.document_name = member.document_name or None
        return self._member_to_entity(model)

    async def delete_members(self, client_id: str, member_ids: list[str]) -> None:
        if not member_ids:
            return
        async with self._write("delete members"):
            await self._session.execute(
                delete(ClientMemberModel).where(
                    ClientMemberModel.client_id == client_id,
                    ClientMemberModel.id.in_(member_ids),
                )
            )

    # ── List-view aggregates ─────────────────────────────────────────

    async def count_contacts(self) -> dict[str, int]:
        stmt = select(ClientContactModel.client_id, func.count(ClientContactModel.id)).group_by(
            ClientContactModel.client_id
        )
        result = await self._session.execute(stmt)
        return {client_id: count for client_id, count in result.all()}

    async def count_members(self) -> dict[str, int]:
        stmt = select(ClientMemberModel.client_id, func.count(ClientMemberModel.id)).group_by(
            ClientMemberModel.client_id
        )
        result = await self._session.execute(stmt)
        return {client_id: count for client_id, count in result.all()}

    async def client_ids_with_active_trips(self) -> set[str]:
        stmt = (
            select(TripModel.client_id)
            .where(
                TripModel.status == ACTIVE_TRIP_STATUS,
                TripModel.invoice_id.is_(None),
                TripModel.client_id.is_not(None),
            )
            .distinct()
        )
        result = await self._session.execute(stmt)
        return set(result.scalars().all())

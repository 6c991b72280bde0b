"""Save coordinator: sequences uploads and store writes for one client submit.

Create: insert client → profile image → pending documents → contacts → members
Update: profile image → update client → replace contacts → reconcile members

Steps run strictly in order and are not compensated: when step N fails,
steps before it stay applied and steps after it are never attempted.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum

from app.application.interfaces import CacheInvalidator, ClientRepository, Notifier
from app.application.schemas.client import IndividualClientValues, OrganizationClientValues
from app.application.services.client_upload_service import ClientUploadService
from app.application.services.document_collection import DocumentCollection
from app.application.services.profile_image_editor import ProfileImageEditor
from app.domain.entities import Client, ClientType, Contact, Member, Severity
from app.domain.exceptions import (
    EditorStateError,
    PersistenceError,
    StorageError,
)
from app.infrastructure.logging.colored_logger import SaveStage, SaveStepLogger

logger = logging.getLogger(__name__)
slog = SaveStepLogger("ClientSaveCoordinator")

INVALIDATED_KEYS = ("clients", "client_contacts_count", "client_members_count")

ClientValues = OrganizationClientValues | IndividualClientValues


class SaveState(str, Enum):
    """Lifecycle of a single submit."""

    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class SaveResult:
    succeeded: bool
    client: Client | None = None
    error: str | None = None


def _none_if_blank(value: str) -> str | None:
    return value or None


def apply_values(client: Client, values: ClientValues) -> Client:
    """Copy validated form values onto a client; blank optionals become None."""
    return replace(
        client,
        name=values.name,
        type=ClientType(values.type),
        description=_none_if_blank(values.description),
        website=_none_if_blank(values.website),
        address=_none_if_blank(values.address),
        contact=_none_if_blank(values.contact),
        email=_none_if_blank(values.email),
        phone=_none_if_blank(values.phone),
    )


class ClientSaveCoordinator:
    """Runs the multi-step persistence sequence behind the editor's submit."""

    def __init__(
        self,
        repository: ClientRepository,
        uploads: ClientUploadService,
        notifier: Notifier,
        cache_invalidator: CacheInvalidator,
    ):
        self._repository = repository
        self._uploads = uploads
        self._notifier = notifier
        self._cache = cache_invalidator
        self.state = SaveState.IDLE
        self.is_submitting = False
        self.last_error: str | None = None
        self._inserted: Client | None = None

    async def save(
        self,
        existing: Client | None,
        values: ClientValues,
        *,
        profile: ProfileImageEditor,
        documents: DocumentCollection,
        contacts: list[Contact],
        members: list[Member],
    ) -> SaveResult:
        """Create ``values`` as a new client, or update ``existing`` with them."""
        if self.is_submitting:
            raise EditorStateError("A save is already in progress")

        self.is_submitting = True
        self.state = SaveState.SUBMITTING
        self.last_error = None
        self._inserted = None
        slog.separator(f"Saving client: {values.name}")
        try:
            if existing is None:
                client = await self._create(values, profile, documents, contacts, members)
            else:
                client = await self._update(existing, values, profile, documents, contacts, members)
        except Exception as exc:
            message = _describe(exc)
            logger.exception("Saving client '%s' failed", values.name)
            self.state = SaveState.FAILED
            self.last_error = message
            self._notifier.notify(Severity.ERROR, "Error", message)
            # A create that failed after the insert still leaves a persisted client.
            return SaveResult(succeeded=False, client=self._inserted, error=message)
        finally:
            self.is_submitting = False

        self.state = SaveState.SUCCEEDED
        slog.step_complete(SaveStage.COMPLETE, f"Client '{client.name}' saved", id=client.id)
        if existing is None:
            self._notifier.notify(
                Severity.SUCCESS, "Client created", "A new client has been created successfully."
            )
        else:
            self._notifier.notify(
                Severity.SUCCESS, "Client updated", "The client has been updated successfully."
            )
        for key in INVALIDATED_KEYS:
            await self._cache.invalidate(key)
        return SaveResult(succeeded=True, client=client)

    # ── Paths ────────────────────────────────────────────────────────

    async def _create(
        self,
        values: ClientValues,
        profile: ProfileImageEditor,
        documents: DocumentCollection,
        contacts: list[Contact],
        members: list[Member],
    ) -> Client:
        with slog.timed_step(SaveStage.CLIENT, "Inserting client", name=values.name):
            client = await self._repository.create(apply_values(Client(name=values.name), values))
        self._inserted = client
        client_id = client.id

        if profile.file is not None:
            with slog.timed_step(SaveStage.PROFILE, "Uploading profile image", client_id=client_id):
                url = await profile.upload(client_id)
                await self._repository.set_profile_image(client_id, url)
            client.profile_image_url = url

        if documents.pending_files:
            with slog.timed_step(
                SaveStage.DOCUMENTS, "Uploading pending documents", count=len(documents.pending_files)
            ):
                await documents.upload_pending(client_id)
                await self._repository.set_documents(client_id, documents.documents)
            client.documents = documents.documents

        if isinstance(values, OrganizationClientValues):
            if contacts:
                with slog.timed_step(SaveStage.CONTACTS, "Inserting contacts", count=len(contacts)):
                    await self._repository.insert_contacts(client_id, contacts)
            if members:
                resolved = await self._resolve_member_documents(client_id, members)
                with slog.timed_step(SaveStage.MEMBERS, "Inserting members", count=len(resolved)):
                    await self._repository.insert_members(client_id, resolved)

        return client

    async def _update(
        self,
        existing: Client,
        values: ClientValues,
        profile: ProfileImageEditor,
        documents: DocumentCollection,
        contacts: list[Contact],
        members: list[Member],
    ) -> Client:
        client_id = existing.id

        if profile.file is not None:
            with slog.timed_step(SaveStage.PROFILE, "Uploading profile image", client_id=client_id):
                profile_url = await profile.upload(client_id)
        else:
            profile_url = existing.profile_image_url

        if documents.pending_files:
            with slog.timed_step(
                SaveStage.DOCUMENTS, "Uploading pending documents", count=len(documents.pending_files)
            ):
                await documents.upload_pending(client_id)

        client = apply_values(existing, values)
        client.profile_image_url = profile_url
        client.documents = documents.documents
        with slog.timed_step(SaveStage.CLIENT, "Updating client", client_id=client_id):
            client = await self._repository.update(client)
        await self._remove_dropped_documents(existing, client)

        if isinstance(values, OrganizationClientValues):
            with slog.timed_step(SaveStage.CONTACTS, "Replacing contacts", count=len(contacts)):
                await self._repository.delete_contacts(client_id)
                if contacts:
                    await self._repository.insert_contacts(client_id, contacts)
            previous = await self._repository.list_members(client_id)
            resolved = await self._resolve_member_documents(client_id, members)
            with slog.timed_step(SaveStage.MEMBERS, "Reconciling members", count=len(resolved)):
                await self._reconcile_members(client_id, previous, resolved)
            await self._remove_dropped_member_documents(client_id, previous, resolved)

        return client

    async def _remove_dropped_documents(self, before: Client, after: Client) -> None:
        """Delete stored objects of documents removed in this session.

        Runs only once the client row no longer references them; a failed
        removal leaves an orphaned object and does not fail the save.
        """
        kept = {d.id for d in after.documents}
        for document in before.documents:
            if document.id in kept:
                continue
            try:
                await self._uploads.remove_client_document(before.id, document)
            except StorageError as exc:
                logger.warning("Could not remove document %s: %s", document.name, exc.message)
            else:
                slog.detail("Removed document", name=document.name)

    # ── Members ──────────────────────────────────────────────────────

    async def _resolve_member_documents(self, client_id: str, members: list[Member]) -> list[Member]:
        """Upload documents attached during the session and swap in their URLs."""
        resolved: list[Member] = []
        for member in members:
            if member.pending_file is not None:
                url, name = await self._uploads.upload_member_document(
                    member.pending_file, client_id, member.id
                )
                slog.detail("Uploaded member document", member_id=member.id, name=name)
                member = replace(member, document_url=url, document_name=name, pending_file=None)
            resolved.append(member)
        return resolved

    async def _reconcile_members(
        self, client_id: str, previous: list[Member], members: list[Member]
    ) -> None:
        """Update members that already exist, insert new ones, drop removed ones."""
        existing_ids = {m.id for m in previous}
        kept_ids = {m.id for m in members}

        stale = sorted(existing_ids - kept_ids)
        if stale:
            await self._repository.delete_members(client_id, stale)

        for member in members:
            if member.id in existing_ids:
                await self._repository.update_member(client_id, member)

        new_members = [m for m in members if m.id not in existing_ids]
        if new_members:
            await self._repository.insert_members(client_id, new_members)
        slog.detail(
            "Members reconciled",
            updated=len(members) - len(new_members),
            inserted=len(new_members),
            deleted=len(stale),
        )

    async def _remove_dropped_member_documents(
        self, client_id: str, previous: list[Member], members: list[Member]
    ) -> None:
        """Delete stored member documents no longer referenced by any member."""
        kept = {m.document_url for m in members if m.document_url}
        for member in previous:
            if not member.document_url or member.document_url in kept:
                continue
            try:
                await self._uploads.remove_member_document(client_id, member.document_url)
            except StorageError as exc:
                logger.warning("Could not remove document of member %s: %s", member.id, exc.message)
            else:
                slog.detail("Removed member document", member_id=member.id)


def _describe(exc: Exception) -> str:
    if isinstance(exc, (PersistenceError, StorageError)):
        return exc.message
    return str(exc) or "Failed to save client"

"""Client editor dialog: tab/footer shell around the form and sub-entity editors.

One dialog instance is one editing session: draft contacts, members,
documents and the profile image live here until submit commits them or
close discards them.
"""

import logging
from dataclasses import asdict, dataclass
from enum import Enum

from app.application.interfaces import Notifier
from app.application.schemas.client import parse_contact_values
from app.application.services.client_form_state import ClientFormState, values_from_client
from app.application.services.client_lifecycle_service import (
    ARCHIVE,
    PURGE,
    ClientLifecycleService,
)
from app.application.services.client_save_coordinator import ClientSaveCoordinator, SaveResult
from app.application.services.client_service import ClientService
from app.application.services.client_upload_service import ClientUploadService
from app.application.services.contact_list_editor import ContactListEditor
from app.application.services.document_collection import DocumentCollection
from app.application.services.member_editor import MemberEditor
from app.application.services.preview_registry import PreviewRegistry
from app.application.services.profile_image_editor import ProfileImageEditor
from app.domain.entities import Client, ClientDetail, Contact, PendingFile
from app.domain.exceptions import ClientTransitionError, EditorStateError, ValidationFailedError

logger = logging.getLogger(__name__)


class DialogMode(str, Enum):
    NEW = "new"
    ACTIVE = "active"
    ARCHIVED = "archived"


class DialogTab(str, Enum):
    DETAILS = "details"
    CONTACTS = "contacts"
    MEMBERS = "members"


class DialogAction(str, Enum):
    CANCEL = "cancel"
    ARCHIVE = "archive"
    RESTORE = "restore"
    PERMANENTLY_DELETE = "permanently_delete"
    SUBMIT = "submit"


_FOOTER_ACTIONS = {
    DialogMode.NEW: (DialogAction.CANCEL, DialogAction.SUBMIT),
    DialogMode.ACTIVE: (DialogAction.CANCEL, DialogAction.ARCHIVE, DialogAction.SUBMIT),
    DialogMode.ARCHIVED: (
        DialogAction.CANCEL,
        DialogAction.RESTORE,
        DialogAction.PERMANENTLY_DELETE,
    ),
}


@dataclass
class Confirmation:
    """An open archive/purge confirmation and the inline error it shows."""

    kind: str
    error: str | None = None

    @property
    def title(self) -> str:
        if self.kind == PURGE:
            return "Permanently delete this client?"
        return "Are you sure you want to archive this client?"

    def describe(self, client_name: str) -> str:
        if self.kind == PURGE:
            return (
                f"This will permanently delete {client_name} and all associated data. "
                "This action CANNOT be undone."
            )
        return f"This will move {client_name} to the archive. You can restore it later if needed."


class ClientDialog:
    """Composes form state, sub-entity editors and the lifecycle confirmations.

    Store-bound collaborators (save coordinator, lifecycle, read service) are
    passed into the operations that need them; the dialog itself only holds
    session state.
    """

    def __init__(
        self,
        uploads: ClientUploadService,
        notifier: Notifier,
        previews: PreviewRegistry | None = None,
    ):
        self.notifier = notifier
        self.previews = previews or PreviewRegistry()
        self.form = ClientFormState()
        self.contacts = ContactListEditor()
        self.members = MemberEditor(notifier, self.previews)
        self.documents = DocumentCollection(uploads, notifier)
        self.profile = ProfileImageEditor(uploads, self.previews)

        self._client: Client | None = None
        self._selected_tab = DialogTab.DETAILS
        self.confirmation: Confirmation | None = None
        self.restore_error: str | None = None
        self.last_save: SaveResult | None = None
        self.is_open = True
        self.is_submitting = False

    # ── Loading ──────────────────────────────────────────────────────

    async def load(self, client_service: ClientService, client_id: str) -> None:
        """Fetch a persisted client with its contacts and members into the editors."""
        self.load_detail(await client_service.get_client_detail(client_id))

    def load_detail(self, detail: ClientDetail | None) -> None:
        """Populate every editor from ``detail``, or clear them for a new client."""
        self._require_open()
        client = detail.client if detail else None
        self._client = client
        self.form.reset(values_from_client(client) if client else None)
        self.contacts.reset(detail.contacts if detail else [])
        self.members.reset(detail.members if detail else [])
        self.documents.reset_documents(client.documents if client else [])
        self.profile.reset(client.profile_image_url if client else None)
        self._selected_tab = DialogTab.DETAILS
        self.confirmation = None
        self.restore_error = None
        self.last_save = None

    # ── Derived view state ───────────────────────────────────────────

    @property
    def client(self) -> Client | None:
        return self._client

    @property
    def client_id(self) -> str | None:
        return self._client.id if self._client else None

    @property
    def mode(self) -> DialogMode:
        if self._client is None:
            return DialogMode.NEW
        if self._client.is_archived:
            return DialogMode.ARCHIVED
        return DialogMode.ACTIVE

    @property
    def client_type(self) -> str:
        return self.form.watch("type")

    @property
    def title(self) -> str:
        if self.mode == DialogMode.NEW:
            return "Add New Client"
        if self.mode == DialogMode.ARCHIVED:
            return f"Archived Client: {self._client.name}"
        return f"Edit Client: {self._client.name}"

    @property
    def description(self) -> str:
        if self.mode == DialogMode.NEW:
            return "Fill in the details to add a new client."
        if self.mode == DialogMode.ARCHIVED:
            return "This client is archived. Restore it to make changes."
        return "Update the client's details, contacts and members."

    @property
    def visible_tabs(self) -> list[DialogTab]:
        if self.client_type == "organization":
            return [DialogTab.DETAILS, DialogTab.CONTACTS, DialogTab.MEMBERS]
        return [DialogTab.DETAILS]

    @property
    def active_tab(self) -> DialogTab:
        # Switching to an individual hides the organization tabs.
        if self._selected_tab in self.visible_tabs:
            return self._selected_tab
        return DialogTab.DETAILS

    @property
    def footer_actions(self) -> tuple[DialogAction, ...]:
        return _FOOTER_ACTIONS[self.mode]

    def set_active_tab(self, tab: DialogTab | str) -> DialogTab:
        self._selected_tab = DialogTab(tab)
        return self.active_tab

    # ── Sub-entity shortcuts that need the client id ─────────────────

    async def upload_documents(self, files: list[PendingFile]) -> None:
        self._require_open()
        await self.documents.handle_document_upload(files, self.client_id)

    def change_profile_image(self, file: PendingFile) -> str:
        self._require_open()
        return self.profile.change(file)

    # ── Submit ───────────────────────────────────────────────────────

    async def submit(self, coordinator: ClientSaveCoordinator) -> SaveResult:
        """Validate everything, then hand the drafts to the save coordinator.

        Raises ValidationFailedError before anything is written when a field
        is invalid. On success the dialog closes.
        """
        self._require_open()
        if self.is_submitting:
            raise EditorStateError("A save is already in progress")
        if self.mode == DialogMode.ARCHIVED:
            raise EditorStateError("Archived clients must be restored before they can be edited")

        values = self.form.validate()
        errors = dict(self.form.errors)
        contacts: list[Contact] = []
        if self.client_type == "organization":
            contacts, contact_errors = _validated_contacts(self.contacts.contacts)
            errors.update(contact_errors)
        if values is None or errors:
            raise ValidationFailedError(errors)

        self.is_submitting = True
        try:
            result = await coordinator.save(
                self._client,
                values,
                profile=self.profile,
                documents=self.documents,
                contacts=contacts,
                members=self.members.members,
            )
        finally:
            self.is_submitting = False
        self.last_save = result
        if result.client is not None:
            # After a partial create, a retry updates the inserted record.
            self._client = result.client
        if result.succeeded:
            self.profile.mark_uploaded(result.client.profile_image_url)
            self.close()
        return result

    # ── Archive / restore / purge ────────────────────────────────────

    def request_archive(self) -> Confirmation:
        self._require_mode(DialogMode.ACTIVE, "archive")
        self.confirmation = Confirmation(ARCHIVE)
        return self.confirmation

    def request_purge(self) -> Confirmation:
        self._require_mode(DialogMode.ARCHIVED, "permanently delete")
        self.confirmation = Confirmation(PURGE)
        return self.confirmation

    def cancel_confirmation(self) -> None:
        self.confirmation = None

    async def confirm(self, lifecycle: ClientLifecycleService) -> bool:
        """Run the pending transition. A failure stays visible in the confirmation."""
        self._require_open()
        if self.confirmation is None:
            raise EditorStateError("No confirmation is open")

        confirmation = self.confirmation
        confirmation.error = None
        try:
            if confirmation.kind == PURGE:
                await lifecycle.purge(self.client_id)
            else:
                await lifecycle.archive(self.client_id)
        except ClientTransitionError as exc:
            confirmation.error = exc.message
            return False

        self.confirmation = None
        self.close()
        return True

    async def restore(self, lifecycle: ClientLifecycleService) -> bool:
        self._require_mode(DialogMode.ARCHIVED, "restore")
        self.restore_error = None
        try:
            await lifecycle.restore(self.client_id)
        except ClientTransitionError as exc:
            self.restore_error = exc.message
            return False
        self.close()
        return True

    # ── Closing ──────────────────────────────────────────────────────

    def request_close(self) -> bool:
        """Close unless a confirmation or a save is still open; returns whether it closed."""
        if self.is_submitting:
            logger.debug("Close ignored while a save is in progress")
            return False
        if self.confirmation is not None:
            logger.debug("Close ignored while a %s confirmation is open", self.confirmation.kind)
            return False
        self.close()
        return True

    def close(self) -> None:
        if not self.is_open:
            return
        self.previews.revoke_all()
        self.is_open = False

    # ── Guards ───────────────────────────────────────────────────────

    def _require_open(self) -> None:
        if not self.is_open:
            raise EditorStateError("The editor has been closed")

    def _require_mode(self, mode: DialogMode, action: str) -> None:
        self._require_open()
        if self.mode != mode:
            raise EditorStateError(f"Cannot {action} a client in '{self.mode.value}' mode")


def _validated_contacts(contacts: list[Contact]) -> tuple[list[Contact], dict[str, str]]:
    validated: list[Contact] = []
    errors: dict[str, str] = {}
    for i, contact in enumerate(contacts):
        try:
            values = parse_contact_values(asdict(contact), i)
        except ValidationFailedError as exc:
            errors.update(exc.errors)
            continue
        validated.append(Contact(**values.model_dump()))
    return validated, errors

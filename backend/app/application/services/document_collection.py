"""Client document collection: finalized uploads plus files awaiting a client id."""

import logging
from dataclasses import replace

from app.application.interfaces import Notifier
from app.application.services.client_upload_service import ClientUploadService
from app.domain.entities import ClientDocument, PendingFile, Severity
from app.domain.exceptions import EntityNotFoundError, StorageError

logger = logging.getLogger(__name__)


class DocumentCollection:
    """Holds the client's documents for one editor session.

    Files selected before the client exists wait in ``pending_files`` and are
    uploaded by the save coordinator once an id has been generated.
    """

    def __init__(
        self,
        uploads: ClientUploadService,
        notifier: Notifier,
        documents: list[ClientDocument] | None = None,
    ):
        self._uploads = uploads
        self._notifier = notifier
        self._documents: list[ClientDocument] = []
        self._pending: list[PendingFile] = []
        self.reset_documents(documents or [])

    @property
    def documents(self) -> list[ClientDocument]:
        return list(self._documents)

    @property
    def pending_files(self) -> list[PendingFile]:
        return list(self._pending)

    async def handle_document_upload(
        self, files: list[PendingFile], client_id: str | None = None
    ) -> list[ClientDocument]:
        """Queue files for later (no client id yet) or upload them right away.

        Upload failures are reported per file; the files that did upload are
        kept. Returns the documents added by this call.
        """
        if not client_id:
            self._pending.extend(files)
            logger.debug("Queued %d document(s) until the client is created", len(files))
            return []

        uploaded: list[ClientDocument] = []
        for file in files:
            try:
                uploaded.append(await self._uploads.upload_client_document(file, client_id))
            except StorageError as exc:
                logger.warning("Document upload failed for %s: %s", file.filename, exc)
                self._notifier.notify(
                    Severity.ERROR, "Upload failed", f"Failed to upload {file.filename}: {exc.message}"
                )

        self._documents.extend(uploaded)
        if uploaded:
            self._notifier.notify(
                Severity.SUCCESS,
                "Documents uploaded",
                f"Successfully uploaded {len(uploaded)} document(s)",
            )
        return uploaded

    async def upload_pending(self, client_id: str) -> list[ClientDocument]:
        """Upload every queued file for a freshly created client.

        Unlike interactive uploads, a failure here propagates so the save
        that triggered it fails; files already uploaded stay in the collection.
        """
        uploaded: list[ClientDocument] = []
        while self._pending:
            document = await self._uploads.upload_client_document(self._pending[0], client_id)
            self._pending.pop(0)
            self._documents.append(document)
            uploaded.append(document)
        return uploaded

    def remove_document(self, document_id: str) -> ClientDocument:
        for i, document in enumerate(self._documents):
            if document.id == document_id:
                return self._documents.pop(i)
        raise EntityNotFoundError("ClientDocument", document_id)

    def remove_pending(self, index: int) -> PendingFile:
        if not 0 <= index < len(self._pending):
            raise EntityNotFoundError("PendingFile", index)
        return self._pending.pop(index)

    def reset_documents(self, documents: list[ClientDocument] | None = None) -> None:
        """Replace both lists; used when the session switches to another client."""
        self._documents = [replace(d) for d in documents or []]
        self._pending = []

"""Upload adapter: turns selected files into stable public URLs.

Bucket layout:
    client-profiles/<client_id>-profile.<ext>          — one image per client, overwritten
    client-documents/<client_id>/<uuid>.<ext>          — append-only client documents
    client-member-documents/<client_id>/<member_id>.<ext> — one document per member, overwritten
"""

import logging
from uuid import uuid4

from app.application.interfaces import BlobStorage
from app.domain.entities import ClientDocument, PendingFile

logger = logging.getLogger(__name__)

PROFILE_BUCKET = "client-profiles"
DOCUMENT_BUCKET = "client-documents"
MEMBER_DOCUMENT_BUCKET = "client-member-documents"
IMAGE_BUCKET = "images"

BUCKETS = (PROFILE_BUCKET, DOCUMENT_BUCKET, MEMBER_DOCUMENT_BUCKET, IMAGE_BUCKET)


class ClientUploadService:
    """Uploads profile images and documents keyed by client and member ids."""

    def __init__(self, storage: BlobStorage):
        self._storage = storage

    async def upload_profile_image(self, file: PendingFile, client_id: str) -> str:
        """Store the client's profile image, replacing any previous one."""
        path = f"{client_id}-profile.{file.extension}"
        # Same derived path for every upload; clear any stale object first.
        await self._storage.remove(PROFILE_BUCKET, [path])
        await self._storage.upload(
            PROFILE_BUCKET, path, file.content,
            content_type=file.content_type, overwrite=True,
        )
        logger.info("Uploaded profile image for client %s (%d bytes)", client_id, file.size)
        return self._storage.get_public_url(PROFILE_BUCKET, path)

    async def upload_client_document(self, file: PendingFile, client_id: str) -> ClientDocument:
        document_id = str(uuid4())
        path = f"{client_id}/{document_id}.{file.extension}"
        await self._storage.upload(
            DOCUMENT_BUCKET, path, file.content,
            content_type=file.content_type, overwrite=False,
        )
        logger.info("Uploaded document %s for client %s", file.filename, client_id)
        return ClientDocument(
            id=document_id,
            name=file.filename,
            url=self._storage.get_public_url(DOCUMENT_BUCKET, path),
        )

    async def upload_member_document(
        self, file: PendingFile, client_id: str, member_id: str
    ) -> tuple[str, str]:
        """Store a member's document. Returns ``(url, original filename)``."""
        path = f"{client_id}/{member_id}.{file.extension}"
        await self._storage.remove(MEMBER_DOCUMENT_BUCKET, [path])
        await self._storage.upload(
            MEMBER_DOCUMENT_BUCKET, path, file.content,
            content_type=file.content_type, overwrite=True,
        )
        logger.info("Uploaded document for member %s of client %s", member_id, client_id)
        return self._storage.get_public_url(MEMBER_DOCUMENT_BUCKET, path), file.filename

    async def remove_client_document(self, client_id: str, document: ClientDocument) -> bool:
        """Delete a client document's stored object. Returns False if it was already gone."""
        return await self._remove_owned(DOCUMENT_BUCKET, client_id, document.url)

    async def remove_member_document(self, client_id: str, url: str) -> bool:
        """Delete a member document's stored object. Returns False if it was already gone."""
        return await self._remove_owned(MEMBER_DOCUMENT_BUCKET, client_id, url)

    async def _remove_owned(self, bucket: str, client_id: str, url: str) -> bool:
        # Only objects below <bucket>/<client_id>/ belong to this client.
        marker = f"/{bucket}/"
        if marker not in url:
            return False
        path = url.split(marker, 1)[1]
        if not path.startswith(f"{client_id}/"):
            return False
        removed = await self._storage.remove(bucket, [path])
        return removed > 0

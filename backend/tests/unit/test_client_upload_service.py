"""Unit tests for the upload adapter's bucket layout."""

import pytest

from app.application.services import ClientUploadService
from app.application.services.client_upload_service import DOCUMENT_BUCKET, PROFILE_BUCKET
from app.domain.entities import ClientDocument, PendingFile


@pytest.mark.asyncio
async def test_profile_image_overwrites_previous(uploads: ClientUploadService, storage):
    await uploads.upload_profile_image(PendingFile("a.png", b"first"), "c-1")
    url = await uploads.upload_profile_image(PendingFile("b.png", b"second"), "c-1")

    assert url == "https://files.test/client-profiles/c-1-profile.png"
    assert storage.objects[(PROFILE_BUCKET, "c-1-profile.png")] == b"second"


@pytest.mark.asyncio
async def test_documents_never_collide(uploads: ClientUploadService):
    first = await uploads.upload_client_document(PendingFile("same.pdf", b"1"), "c-1")
    second = await uploads.upload_client_document(PendingFile("same.pdf", b"2"), "c-1")

    assert first.id != second.id
    assert first.url != second.url
    assert first.name == second.name == "same.pdf"


@pytest.mark.asyncio
async def test_member_document_returns_url_and_name(uploads: ClientUploadService):
    url, name = await uploads.upload_member_document(PendingFile("licence.pdf", b"l"), "c-1", "m-1")
    assert url == "https://files.test/client-member-documents/c-1/m-1.pdf"
    assert name == "licence.pdf"


@pytest.mark.asyncio
async def test_remove_client_document(uploads: ClientUploadService, storage):
    document = await uploads.upload_client_document(PendingFile("a.pdf", b"a"), "c-1")

    assert await uploads.remove_client_document("c-1", document) is True
    assert not any(bucket == DOCUMENT_BUCKET for bucket, _ in storage.objects)
    assert await uploads.remove_client_document("c-1", document) is False


@pytest.mark.asyncio
async def test_remove_ignores_documents_of_other_clients(uploads: ClientUploadService):
    document = ClientDocument(name="a.pdf", url="https://files.test/client-documents/c-2/x.pdf")
    assert await uploads.remove_client_document("c-1", document) is False


@pytest.mark.asyncio
async def test_remove_member_document(uploads: ClientUploadService, storage):
    url, _ = await uploads.upload_member_document(PendingFile("licence.pdf", b"l"), "c-1", "m-1")

    assert await uploads.remove_member_document("c-1", url) is True
    assert storage.objects == {}
    assert await uploads.remove_member_document("c-1", url) is False
    assert await uploads.remove_member_document("c-2", url) is False

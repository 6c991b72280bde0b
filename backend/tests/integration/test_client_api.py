"""End-to-end tests for the client list and client editor endpoints."""

import asyncio

import pytest

from app.config import Settings
from app.presentation.api.v1.endpoints import client_editor

EDITOR = "/api/v1/client-editor/sessions"


async def _open(api, client_id: str | None = None) -> dict:
    response = await api.post(EDITOR, json={"client_id": client_id})
    assert response.status_code == 201
    return response.json()


async def _create_client(api, name: str = "Acme Logistics") -> str:
    sid = (await _open(api))["session_id"]
    await api.patch(f"{EDITOR}/{sid}/form", json={"values": {"name": name}})
    response = await api.post(f"{EDITOR}/{sid}/submit")
    assert response.status_code == 200
    assert response.json()["last_save"]["succeeded"] is True
    clients = (await api.get("/api/v1/clients", params={"search": name})).json()
    return clients[0]["id"]


@pytest.mark.asyncio
async def test_create_organization_through_the_editor(api, blob_storage):
    state = await _open(api)
    sid = state["session_id"]
    assert state["mode"] == "new"
    assert state["footer_actions"] == ["cancel", "submit"]

    await api.patch(
        f"{EDITOR}/{sid}/form",
        json={"values": {"name": "Acme Logistics", "email": "office@acme.io"}},
    )
    await api.post(f"{EDITOR}/{sid}/contacts")
    state = (await api.patch(f"{EDITOR}/{sid}/contacts/0", json={"name": "Jane Doe"})).json()
    assert state["contacts"][0]["is_primary"] is True

    await api.post(f"{EDITOR}/{sid}/members")
    await api.patch(f"{EDITOR}/{sid}/members/form", json={"name": "Alice Martin"})
    state = (
        await api.put(
            f"{EDITOR}/{sid}/members/form/document",
            files={"file": ("licence.pdf", b"%PDF-1.4", "application/pdf")},
        )
    ).json()
    assert state["members"]["mode"] == "editing"
    assert state["members"]["form"]["has_pending_document"] is True
    state = (await api.post(f"{EDITOR}/{sid}/members/form/save")).json()
    assert [n["title"] for n in state["notifications"]] == ["Member Added"]

    state = (
        await api.post(
            f"{EDITOR}/{sid}/documents",
            files=[("files", ("contract.pdf", b"contract", "application/pdf"))],
        )
    ).json()
    assert [f["filename"] for f in state["pending_files"]] == ["contract.pdf"]

    state = (
        await api.put(
            f"{EDITOR}/{sid}/profile-image",
            files={"file": ("logo.png", b"\x89PNG", "image/png")},
        )
    ).json()
    preview = await api.get(state["profile_image"]["preview_url"])
    assert preview.status_code == 200
    assert preview.content == b"\x89PNG"

    state = (await api.post(f"{EDITOR}/{sid}/submit")).json()
    assert state["is_open"] is False
    assert state["last_save"] == {"succeeded": True, "error": None}
    assert "Client created" in [n["title"] for n in state["notifications"]]
    assert (await api.get(f"{EDITOR}/{sid}")).status_code == 404

    clients = (await api.get("/api/v1/clients")).json()
    assert len(clients) == 1
    summary = clients[0]
    assert summary["contact_count"] == 1
    assert summary["member_count"] == 1
    assert summary["has_active_contract"] is False
    assert summary["profile_image_url"] == (
        f"http://files.test/files/client-profiles/{summary['id']}-profile.png"
    )
    assert [d["name"] for d in summary["documents"]] == ["contract.pdf"]

    detail = (await api.get(f"/api/v1/clients/{summary['id']}")).json()
    member = detail["members"][0]
    assert member["document_name"] == "licence.pdf"
    assert member["document_url"].startswith("http://files.test/files/client-member-documents/")
    assert blob_storage.exists("client-profiles", f"{summary['id']}-profile.png")


@pytest.mark.asyncio
async def test_invalid_submit_returns_field_errors(api):
    sid = (await _open(api))["session_id"]
    await api.patch(f"{EDITOR}/{sid}/form", json={"values": {"name": "A", "email": "nope"}})

    response = await api.post(f"{EDITOR}/{sid}/submit")

    assert response.status_code == 422
    errors = response.json()["detail"]["errors"]
    assert errors == {
        "name": "Name must be at least 2 characters",
        "email": "Invalid email address",
    }
    assert (await api.get("/api/v1/clients")).json() == []


@pytest.mark.asyncio
async def test_individual_hides_organization_tabs(api):
    sid = (await _open(api))["session_id"]
    await api.put(f"{EDITOR}/{sid}/tab", json={"tab": "members"})

    state = (
        await api.patch(f"{EDITOR}/{sid}/form", json={"values": {"type": "individual"}})
    ).json()

    assert state["visible_tabs"] == ["details"]
    assert state["active_tab"] == "details"


@pytest.mark.asyncio
async def test_second_member_edit_is_a_conflict(api):
    sid = (await _open(api))["session_id"]
    await api.post(f"{EDITOR}/{sid}/members")

    response = await api.post(f"{EDITOR}/{sid}/members")

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_archive_restore_and_purge(api):
    client_id = await _create_client(api)

    state = await _open(api, client_id)
    sid = state["session_id"]
    assert state["title"] == "Edit Client: Acme Logistics"
    assert state["footer_actions"] == ["cancel", "archive", "submit"]

    state = (await api.post(f"{EDITOR}/{sid}/archive")).json()
    assert state["confirmation"]["kind"] == "archive"
    assert (await api.delete(f"{EDITOR}/{sid}")).status_code == 409

    state = (await api.post(f"{EDITOR}/{sid}/confirmation/confirm")).json()
    assert state["is_open"] is False
    archived = (await api.get("/api/v1/clients", params={"status": "archived"})).json()
    assert [c["id"] for c in archived] == [client_id]
    assert (await api.get("/api/v1/clients")).json() == []

    sid = (await _open(api, client_id))["session_id"]
    state = (await api.post(f"{EDITOR}/{sid}/restore")).json()
    assert state["is_open"] is False
    assert "Client restored" in [n["title"] for n in state["notifications"]]

    sid = (await _open(api, client_id))["session_id"]
    assert (await api.post(f"{EDITOR}/{sid}/purge")).status_code == 409
    await api.post(f"{EDITOR}/{sid}/archive")
    await api.post(f"{EDITOR}/{sid}/confirmation/confirm")

    sid = (await _open(api, client_id))["session_id"]
    state = (await api.post(f"{EDITOR}/{sid}/purge")).json()
    assert state["confirmation"]["title"] == "Permanently delete this client?"
    state = (await api.post(f"{EDITOR}/{sid}/confirmation/confirm")).json()
    assert state["is_open"] is False
    assert (await api.get(f"/api/v1/clients/{client_id}")).status_code == 404


@pytest.mark.asyncio
async def test_unknown_session_and_client(api):
    assert (await api.get(f"{EDITOR}/does-not-exist")).status_code == 404
    response = await api.post(EDITOR, json={"client_id": "does-not-exist"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_oversized_upload_is_rejected(api, monkeypatch):
    monkeypatch.setattr(
        client_editor, "get_settings", lambda: Settings(_env_file=None, max_upload_size_mb=0)
    )
    sid = (await _open(api))["session_id"]

    response = await api.put(
        f"{EDITOR}/{sid}/profile-image",
        files={"file": ("huge.png", b"x", "image/png")},
    )

    assert response.status_code == 413


@pytest.mark.asyncio
async def test_cancel_closes_session(api):
    sid = (await _open(api))["session_id"]
    assert (await api.delete(f"{EDITOR}/{sid}")).status_code == 204
    assert (await api.get(f"{EDITOR}/{sid}")).status_code == 404


@pytest.mark.asyncio
async def test_double_submit_creates_one_client(api):
    sid = (await _open(api))["session_id"]
    await api.patch(f"{EDITOR}/{sid}/form", json={"values": {"name": "Acme Logistics"}})

    first, second = await asyncio.gather(
        api.post(f"{EDITOR}/{sid}/submit"),
        api.post(f"{EDITOR}/{sid}/submit"),
    )

    codes = sorted([first.status_code, second.status_code])
    assert codes[0] == 200
    assert codes[1] in (404, 409)
    clients = (await api.get("/api/v1/clients", params={"search": "Acme"})).json()
    assert [c["name"] for c in clients] == ["Acme Logistics"]
    assert (await api.get(f"{EDITOR}/{sid}")).status_code == 404


@pytest.mark.asyncio
async def test_type_round_trip_keeps_contacts_and_members(api):
    sid = (await _open(api))["session_id"]
    await api.patch(f"{EDITOR}/{sid}/form", json={"values": {"name": "Acme Logistics"}})
    await api.post(f"{EDITOR}/{sid}/contacts")
    await api.patch(f"{EDITOR}/{sid}/contacts/0", json={"name": "Jane Doe"})
    await api.post(f"{EDITOR}/{sid}/members")
    await api.patch(f"{EDITOR}/{sid}/members/form", json={"name": "Alice Martin"})
    await api.post(f"{EDITOR}/{sid}/members/form/save")
    assert (await api.post(f"{EDITOR}/{sid}/submit")).json()["last_save"]["succeeded"] is True
    client_id = (await api.get("/api/v1/clients", params={"search": "Acme"})).json()[0]["id"]

    for client_type in ("individual", "organization"):
        sid = (await _open(api, client_id))["session_id"]
        await api.patch(f"{EDITOR}/{sid}/form", json={"values": {"type": client_type}})
        state = (await api.post(f"{EDITOR}/{sid}/submit")).json()
        assert state["last_save"]["succeeded"] is True

    state = await _open(api, client_id)
    assert state["client_type"] == "organization"
    assert [c["name"] for c in state["contacts"]] == ["Jane Doe"]
    assert [m["name"] for m in state["members"]["items"]] == ["Alice Martin"]

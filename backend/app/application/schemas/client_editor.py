"""Request and response DTOs for client editor sessions."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from app.application.schemas.client import (
    ClientDocumentResponse,
    ContactResponse,
    MemberResponse,
)


# ── Requests ─────────────────────────────────────────────────────────

class OpenEditorRequest(BaseModel):
    """Open an editor for an existing client, or for a new one when ``client_id`` is absent."""

    client_id: str | None = None


class FormValuesRequest(BaseModel):
    values: dict[str, Any] = Field(..., examples=[{"name": "Acme Ltd", "type": "organization"}])


class ActiveTabRequest(BaseModel):
    tab: Literal["details", "contacts", "members"]


class ContactChangesRequest(BaseModel):
    """Shallow merge into one contact row; only the fields sent are changed."""

    name: str | None = None
    position: str | None = None
    email: str | None = None
    phone: str | None = None
    is_primary: bool | None = None


class MemberFormChangesRequest(BaseModel):
    name: str | None = None
    role: str | None = None
    email: str | None = None
    phone: str | None = None
    notes: str | None = None


# ── Responses ────────────────────────────────────────────────────────

class NotificationResponse(BaseModel):
    severity: Literal["success", "info", "error"]
    title: str
    detail: str
    created_at: datetime


class FormStateResponse(BaseModel):
    values: dict[str, Any]
    errors: dict[str, str]


class MemberEditorStateResponse(BaseModel):
    mode: Literal["browsing", "editing", "viewing"]
    index: int | None = None
    form: MemberResponse | None = None
    items: list[MemberResponse]


class PendingFileResponse(BaseModel):
    filename: str
    content_type: str
    size: int


class ProfileImageStateResponse(BaseModel):
    preview_url: str | None
    has_new_file: bool


class ConfirmationResponse(BaseModel):
    kind: Literal["archive", "purge"]
    title: str
    description: str
    error: str | None


class SaveStateResponse(BaseModel):
    succeeded: bool
    error: str | None


class EditorStateResponse(BaseModel):
    """Everything needed to render the editor after an operation."""

    session_id: str
    is_open: bool
    mode: Literal["new", "active", "archived"]
    client_id: str | None
    client_type: str
    title: str
    description: str
    visible_tabs: list[str]
    active_tab: str
    footer_actions: list[str]
    form: FormStateResponse
    contacts: list[ContactResponse]
    members: MemberEditorStateResponse
    documents: list[ClientDocumentResponse]
    pending_files: list[PendingFileResponse]
    profile_image: ProfileImageStateResponse
    confirmation: ConfirmationResponse | None
    restore_error: str | None
    last_save: SaveStateResponse | None
    notifications: list[NotificationResponse]

"""Client editor session endpoints.

A session holds the editor dialog for one client between open and
submit/close. Every mutating call returns the full editor state plus the
notifications raised since the previous call.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status

from app.application.schemas.client import (
    ClientDocumentResponse,
    ContactResponse,
    MemberResponse,
)
from app.application.schemas.client_editor import (
    ActiveTabRequest,
    ConfirmationResponse,
    ContactChangesRequest,
    EditorStateResponse,
    FormStateResponse,
    FormValuesRequest,
    MemberEditorStateResponse,
    MemberFormChangesRequest,
    NotificationResponse,
    OpenEditorRequest,
    PendingFileResponse,
    ProfileImageStateResponse,
    SaveStateResponse,
)
from app.application.services import (
    ClientLifecycleService,
    ClientSaveCoordinator,
    ClientService,
    EditorSession,
    EditorSessionRegistry,
)
from app.application.services.member_editor import Browsing, Editing
from app.config import get_settings
from app.domain.entities import PendingFile
from app.domain.exceptions import (
    ClientTransitionError,
    EditorStateError,
    EntityNotFoundError,
    PersistenceError,
    StorageError,
    ValidationFailedError,
)
from app.infrastructure.dependencies import (
    get_client_service,
    get_editor_session,
    get_editor_sessions,
    get_lifecycle_service,
    get_save_coordinator,
)
from app.infrastructure.notifications import SessionNotifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/client-editor", tags=["Client Editor"])


# ── Helpers ──────────────────────────────────────────────────────────

@contextmanager
def _domain_errors() -> Iterator[None]:
    """Map domain exceptions raised by editor operations to HTTP errors."""
    try:
        yield
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValidationFailedError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "Validation failed", "errors": e.errors},
        )
    except (EditorStateError, ClientTransitionError) as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except (StorageError, PersistenceError) as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
    except (KeyError, ValueError) as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


async def _read_upload(file: UploadFile) -> PendingFile:
    content = await file.read()
    limit = get_settings().max_upload_size_bytes
    if len(content) > limit:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"{file.filename} exceeds the {limit // (1024 * 1024)} MB upload limit",
        )
    return PendingFile(
        filename=file.filename or "untitled",
        content=content,
        content_type=file.content_type or "application/octet-stream",
    )


def _member_state(editor: EditorSession) -> MemberEditorStateResponse:
    members = editor.dialog.members
    mode = members.mode
    items = [MemberResponse.from_member(m) for m in members.members]
    if isinstance(mode, Browsing):
        return MemberEditorStateResponse(mode="browsing", items=items)
    if isinstance(mode, Editing):
        return MemberEditorStateResponse(
            mode="editing",
            index=mode.index,
            form=MemberResponse.from_member(members.form),
            items=items,
        )
    return MemberEditorStateResponse(mode="viewing", index=mode.index, items=items)


def _to_state(editor: EditorSession) -> EditorStateResponse:
    dialog = editor.dialog
    notifier = dialog.notifier
    notifications = notifier.drain() if isinstance(notifier, SessionNotifier) else []

    confirmation = None
    if dialog.confirmation is not None:
        client_name = dialog.client.name if dialog.client else ""
        confirmation = ConfirmationResponse(
            kind=dialog.confirmation.kind,
            title=dialog.confirmation.title,
            description=dialog.confirmation.describe(client_name),
            error=dialog.confirmation.error,
        )

    last_save = None
    if dialog.last_save is not None:
        last_save = SaveStateResponse(
            succeeded=dialog.last_save.succeeded, error=dialog.last_save.error
        )

    form = dialog.form
    return EditorStateResponse(
        session_id=editor.id,
        is_open=dialog.is_open,
        mode=dialog.mode.value,
        client_id=dialog.client_id,
        client_type=dialog.client_type,
        title=dialog.title,
        description=dialog.description,
        visible_tabs=[t.value for t in dialog.visible_tabs],
        active_tab=dialog.active_tab.value,
        footer_actions=[a.value for a in dialog.footer_actions],
        form=FormStateResponse(values=form.values, errors=form.errors),
        contacts=[ContactResponse.model_validate(c) for c in dialog.contacts.contacts],
        members=_member_state(editor),
        documents=[ClientDocumentResponse.model_validate(d) for d in dialog.documents.documents],
        pending_files=[
            PendingFileResponse(filename=f.filename, content_type=f.content_type, size=f.size)
            for f in dialog.documents.pending_files
        ],
        profile_image=ProfileImageStateResponse(
            preview_url=dialog.profile.preview_url,
            has_new_file=dialog.profile.file is not None,
        ),
        confirmation=confirmation,
        restore_error=dialog.restore_error,
        last_save=last_save,
        notifications=[
            NotificationResponse(
                severity=n.severity.value,
                title=n.title,
                detail=n.detail,
                created_at=n.created_at,
            )
            for n in notifications
        ],
    )


def _respond(editor: EditorSession, registry: EditorSessionRegistry) -> EditorStateResponse:
    """Build the state and forget the session once its dialog has closed."""
    state = _to_state(editor)
    if not editor.dialog.is_open:
        registry.discard(editor.id)
    return state


# ── Session lifecycle ────────────────────────────────────────────────

@router.post("/sessions", response_model=EditorStateResponse, status_code=status.HTTP_201_CREATED)
async def open_session(
    data: OpenEditorRequest,
    registry: EditorSessionRegistry = Depends(get_editor_sessions),
    client_service: ClientService = Depends(get_client_service),
) -> EditorStateResponse:
    """Open an editor for a new client, or load an existing one into it."""
    editor = registry.open()
    if data.client_id:
        try:
            await editor.dialog.load(client_service, data.client_id)
        except EntityNotFoundError as e:
            registry.close(editor.id)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return _to_state(editor)


@router.get("/sessions/{session_id}", response_model=EditorStateResponse)
async def get_session(editor: EditorSession = Depends(get_editor_session)) -> EditorStateResponse:
    return _to_state(editor)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(
    editor: EditorSession = Depends(get_editor_session),
    registry: EditorSessionRegistry = Depends(get_editor_sessions),
) -> None:
    """Cancel the editor. Refused while a confirmation or a save is in progress."""
    if not editor.dialog.request_close():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Resolve the open confirmation or wait for the save before closing the editor",
        )
    registry.discard(editor.id)


@router.get("/sessions/{session_id}/previews/{token}")
async def get_preview(token: str, editor: EditorSession = Depends(get_editor_session)) -> Response:
    """Serve a file that was selected in this session but not uploaded yet."""
    file = editor.dialog.previews.get(token)
    if file is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preview not found")
    return Response(content=file.content, media_type=file.content_type)


# ── Details form & tabs ──────────────────────────────────────────────

@router.patch("/sessions/{session_id}/form", response_model=EditorStateResponse)
async def set_form_values(
    data: FormValuesRequest,
    editor: EditorSession = Depends(get_editor_session),
) -> EditorStateResponse:
    with _domain_errors():
        editor.dialog.form.set_values(**data.values)
    return _to_state(editor)


@router.post("/sessions/{session_id}/form/validate", response_model=EditorStateResponse)
async def validate_form(editor: EditorSession = Depends(get_editor_session)) -> EditorStateResponse:
    """Run field validation without submitting; errors land in ``form.errors``."""
    editor.dialog.form.validate()
    return _to_state(editor)


@router.put("/sessions/{session_id}/tab", response_model=EditorStateResponse)
async def set_active_tab(
    data: ActiveTabRequest,
    editor: EditorSession = Depends(get_editor_session),
) -> EditorStateResponse:
    editor.dialog.set_active_tab(data.tab)
    return _to_state(editor)


# ── Contacts ─────────────────────────────────────────────────────────

@router.post("/sessions/{session_id}/contacts", response_model=EditorStateResponse)
async def add_contact(editor: EditorSession = Depends(get_editor_session)) -> EditorStateResponse:
    editor.dialog.contacts.add()
    return _to_state(editor)


@router.patch("/sessions/{session_id}/contacts/{index}", response_model=EditorStateResponse)
async def update_contact(
    index: int,
    data: ContactChangesRequest,
    editor: EditorSession = Depends(get_editor_session),
) -> EditorStateResponse:
    with _domain_errors():
        editor.dialog.contacts.update(index, **data.model_dump(exclude_unset=True))
    return _to_state(editor)


@router.post("/sessions/{session_id}/contacts/{index}/primary", response_model=EditorStateResponse)
async def set_primary_contact(
    index: int,
    editor: EditorSession = Depends(get_editor_session),
) -> EditorStateResponse:
    with _domain_errors():
        editor.dialog.contacts.set_primary(index)
    return _to_state(editor)


@router.delete("/sessions/{session_id}/contacts/{index}", response_model=EditorStateResponse)
async def remove_contact(
    index: int,
    editor: EditorSession = Depends(get_editor_session),
) -> EditorStateResponse:
    with _domain_errors():
        editor.dialog.contacts.remove(index)
    return _to_state(editor)


# ── Members ──────────────────────────────────────────────────────────

@router.post("/sessions/{session_id}/members", response_model=EditorStateResponse)
async def add_member(editor: EditorSession = Depends(get_editor_session)) -> EditorStateResponse:
    with _domain_errors():
        editor.dialog.members.add_member()
    return _to_state(editor)


@router.post("/sessions/{session_id}/members/{index}/edit", response_model=EditorStateResponse)
async def edit_member(
    index: int,
    editor: EditorSession = Depends(get_editor_session),
) -> EditorStateResponse:
    with _domain_errors():
        editor.dialog.members.edit_member(index)
    return _to_state(editor)


@router.post("/sessions/{session_id}/members/{index}/view", response_model=EditorStateResponse)
async def view_member(
    index: int,
    editor: EditorSession = Depends(get_editor_session),
) -> EditorStateResponse:
    with _domain_errors():
        editor.dialog.members.view_member(index)
    return _to_state(editor)


@router.post("/sessions/{session_id}/members/view/close", response_model=EditorStateResponse)
async def close_member_view(editor: EditorSession = Depends(get_editor_session)) -> EditorStateResponse:
    editor.dialog.members.close_view()
    return _to_state(editor)


@router.patch("/sessions/{session_id}/members/form", response_model=EditorStateResponse)
async def update_member_form(
    data: MemberFormChangesRequest,
    editor: EditorSession = Depends(get_editor_session),
) -> EditorStateResponse:
    with _domain_errors():
        editor.dialog.members.update_form(**data.model_dump(exclude_unset=True))
    return _to_state(editor)


@router.post("/sessions/{session_id}/members/form/save", response_model=EditorStateResponse)
async def save_member(editor: EditorSession = Depends(get_editor_session)) -> EditorStateResponse:
    """Commit the member form to the draft list; invalid input is reported as a notification."""
    with _domain_errors():
        editor.dialog.members.save_member()
    return _to_state(editor)


@router.post("/sessions/{session_id}/members/form/cancel", response_model=EditorStateResponse)
async def cancel_member_edit(editor: EditorSession = Depends(get_editor_session)) -> EditorStateResponse:
    with _domain_errors():
        editor.dialog.members.cancel_member_edit()
    return _to_state(editor)


@router.put("/sessions/{session_id}/members/form/document", response_model=EditorStateResponse)
async def attach_member_document(
    file: UploadFile = File(...),
    editor: EditorSession = Depends(get_editor_session),
) -> EditorStateResponse:
    """Attach a document to the member form; it is uploaded when the client is saved."""
    pending = await _read_upload(file)
    with _domain_errors():
        editor.dialog.members.handle_member_document_upload(pending)
    return _to_state(editor)


@router.delete("/sessions/{session_id}/members/form/document", response_model=EditorStateResponse)
async def clear_member_document(editor: EditorSession = Depends(get_editor_session)) -> EditorStateResponse:
    with _domain_errors():
        editor.dialog.members.clear_member_document()
    return _to_state(editor)


@router.delete("/sessions/{session_id}/members/{index}", response_model=EditorStateResponse)
async def delete_member(
    index: int,
    editor: EditorSession = Depends(get_editor_session),
) -> EditorStateResponse:
    with _domain_errors():
        editor.dialog.members.delete_member(index)
    return _to_state(editor)


# ── Documents & profile image ────────────────────────────────────────

@router.post("/sessions/{session_id}/documents", response_model=EditorStateResponse)
async def upload_documents(
    files: list[UploadFile] = File(...),
    editor: EditorSession = Depends(get_editor_session),
) -> EditorStateResponse:
    """Upload documents now, or queue them until the new client has been saved."""
    if not files:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No files provided")
    pending = [await _read_upload(f) for f in files]
    with _domain_errors():
        await editor.dialog.upload_documents(pending)
    return _to_state(editor)


@router.delete("/sessions/{session_id}/documents/{document_id}", response_model=EditorStateResponse)
async def remove_document(
    document_id: str,
    editor: EditorSession = Depends(get_editor_session),
) -> EditorStateResponse:
    with _domain_errors():
        editor.dialog.documents.remove_document(document_id)
    return _to_state(editor)


@router.delete("/sessions/{session_id}/pending-documents/{index}", response_model=EditorStateResponse)
async def remove_pending_document(
    index: int,
    editor: EditorSession = Depends(get_editor_session),
) -> EditorStateResponse:
    with _domain_errors():
        editor.dialog.documents.remove_pending(index)
    return _to_state(editor)


@router.put("/sessions/{session_id}/profile-image", response_model=EditorStateResponse)
async def change_profile_image(
    file: UploadFile = File(...),
    editor: EditorSession = Depends(get_editor_session),
) -> EditorStateResponse:
    """Select a new profile image; it is uploaded when the client is saved."""
    pending = await _read_upload(file)
    with _domain_errors():
        editor.dialog.change_profile_image(pending)
    return _to_state(editor)


# ── Submit & lifecycle ───────────────────────────────────────────────

@router.post("/sessions/{session_id}/submit", response_model=EditorStateResponse)
async def submit(
    editor: EditorSession = Depends(get_editor_session),
    registry: EditorSessionRegistry = Depends(get_editor_sessions),
    coordinator: ClientSaveCoordinator = Depends(get_save_coordinator),
) -> EditorStateResponse:
    """Validate and save the client. A failed save keeps the session open."""
    with _domain_errors():
        await editor.dialog.submit(coordinator)
    return _respond(editor, registry)


@router.post("/sessions/{session_id}/archive", response_model=EditorStateResponse)
async def request_archive(editor: EditorSession = Depends(get_editor_session)) -> EditorStateResponse:
    with _domain_errors():
        editor.dialog.request_archive()
    return _to_state(editor)


@router.post("/sessions/{session_id}/purge", response_model=EditorStateResponse)
async def request_purge(editor: EditorSession = Depends(get_editor_session)) -> EditorStateResponse:
    with _domain_errors():
        editor.dialog.request_purge()
    return _to_state(editor)


@router.post("/sessions/{session_id}/confirmation/cancel", response_model=EditorStateResponse)
async def cancel_confirmation(editor: EditorSession = Depends(get_editor_session)) -> EditorStateResponse:
    editor.dialog.cancel_confirmation()
    return _to_state(editor)


@router.post("/sessions/{session_id}/confirmation/confirm", response_model=EditorStateResponse)
async def confirm(
    editor: EditorSession = Depends(get_editor_session),
    registry: EditorSessionRegistry = Depends(get_editor_sessions),
    lifecycle: ClientLifecycleService = Depends(get_lifecycle_service),
) -> EditorStateResponse:
    """Run the confirmed archive/purge. A failure is returned in ``confirmation.error``."""
    with _domain_errors():
        await editor.dialog.confirm(lifecycle)
    return _respond(editor, registry)


@router.post("/sessions/{session_id}/restore", response_model=EditorStateResponse)
async def restore(
    editor: EditorSession = Depends(get_editor_session),
    registry: EditorSessionRegistry = Depends(get_editor_sessions),
    lifecycle: ClientLifecycleService = Depends(get_lifecycle_service),
) -> EditorStateResponse:
    with _domain_errors():
        await editor.dialog.restore(lifecycle)
    return _respond(editor, registry)

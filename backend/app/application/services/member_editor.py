"""Single-slot member editor for an organization's member list.

The editor is always in exactly one mode:

    Browsing            — list shown, nothing open
    Editing(index)      — the form slot holds a draft; index is None for a new member
    Viewing(index)      — read-only detail of one member

Add/edit/view may only start from Browsing, so two concurrent edits cannot
exist.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any
from uuid import uuid4

from app.application.interfaces import Notifier
from app.application.schemas.client import parse_member_values
from app.application.services.preview_registry import PreviewRegistry
from app.domain.entities import Member, PendingFile, Severity
from app.domain.exceptions import EditorStateError, EntityNotFoundError, ValidationFailedError

logger = logging.getLogger(__name__)

_FORM_FIELDS = frozenset({"name", "role", "email", "phone", "notes"})


@dataclass(frozen=True)
class Browsing:
    pass


@dataclass(frozen=True)
class Editing:
    index: int | None = None

    @property
    def is_new(self) -> bool:
        return self.index is None


@dataclass(frozen=True)
class Viewing:
    index: int


MemberEditorMode = Browsing | Editing | Viewing


class MemberEditor:
    """Draft member list plus the one form slot used to add or edit a member."""

    def __init__(
        self,
        notifier: Notifier,
        previews: PreviewRegistry,
        members: list[Member] | None = None,
    ):
        self._notifier = notifier
        self._previews = previews
        self._members: list[Member] = []
        self._mode: MemberEditorMode = Browsing()
        self._form = Member()
        self.reset(members or [])

    # ── State ────────────────────────────────────────────────────────

    @property
    def members(self) -> list[Member]:
        return list(self._members)

    @property
    def mode(self) -> MemberEditorMode:
        return self._mode

    @property
    def form(self) -> Member:
        return self._form

    @property
    def viewed_member(self) -> Member | None:
        if isinstance(self._mode, Viewing):
            return self._members[self._mode.index]
        return None

    @property
    def pending_uploads(self) -> list[Member]:
        return [m for m in self._members if m.pending_file is not None]

    # ── Transitions ──────────────────────────────────────────────────

    def add_member(self) -> Member:
        self._require_browsing("add a member")
        self._form = Member(id=str(uuid4()), upload_key=str(uuid4()))
        self._mode = Editing()
        return self._form

    def edit_member(self, index: int) -> Member:
        self._require_browsing("edit a member")
        self._check_index(index)
        self._form = replace(self._members[index], upload_key=str(uuid4()))
        self._mode = Editing(index)
        return self._form

    def view_member(self, index: int) -> Member:
        self._require_browsing("view a member")
        self._check_index(index)
        self._mode = Viewing(index)
        return self._members[index]

    def close_view(self) -> None:
        if isinstance(self._mode, Viewing):
            self._mode = Browsing()

    def update_form(self, **changes: Any) -> Member:
        self._require_editing()
        unknown = set(changes) - _FORM_FIELDS
        if unknown:
            raise ValueError(f"Unknown member field(s): {', '.join(sorted(unknown))}")
        self._form = replace(self._form, **changes)
        return self._form

    def save_member(self) -> bool:
        """Validate the form slot and commit it to the list.

        Returns False (list unchanged, error notified) when the form is invalid.
        """
        editing = self._require_editing()
        try:
            values = parse_member_values({
                "name": self._form.name,
                "role": self._form.role,
                "email": self._form.email,
                "phone": self._form.phone,
                "notes": self._form.notes,
            })
        except ValidationFailedError as exc:
            message = next(iter(exc.errors.values()))
            self._notifier.notify(Severity.ERROR, "Validation Error", message)
            return False

        saved = replace(
            self._form,
            name=values.name,
            role=values.role,
            email=values.email,
            phone=values.phone,
            notes=values.notes,
        )
        if editing.is_new:
            self._members.append(saved)
            self._notifier.notify(
                Severity.SUCCESS, "Member Added", "A new member has been added successfully."
            )
        else:
            previous = self._members[editing.index]
            if previous.document_url != saved.document_url:
                self._previews.revoke(previous.document_url)
            self._members[editing.index] = saved
            self._notifier.notify(
                Severity.SUCCESS, "Member Updated", "The member has been updated successfully."
            )

        self._form = Member()
        self._mode = Browsing()
        return True

    def cancel_member_edit(self) -> None:
        self._require_editing()
        self._release_form_preview()
        self._form = Member()
        self._mode = Browsing()

    def delete_member(self, index: int) -> Member:
        self._require_browsing("delete a member")
        self._check_index(index)
        removed = self._members.pop(index)
        self._previews.revoke(removed.document_url)
        self._notifier.notify(
            Severity.SUCCESS, "Member Removed", "The member has been removed successfully."
        )
        return removed

    # ── Document slot ────────────────────────────────────────────────

    def handle_member_document_upload(self, file: PendingFile) -> Member:
        """Attach a file to the form slot; the real upload happens at save time."""
        self._require_editing()
        self._release_form_preview()
        self._form = replace(
            self._form,
            pending_file=file,
            document_name=file.filename,
            document_url=self._previews.create(file),
        )
        return self._form

    def clear_member_document(self) -> Member:
        self._require_editing()
        self._release_form_preview()
        self._form = replace(self._form, pending_file=None, document_name="", document_url="")
        return self._form

    def resolve_uploaded_document(self, member_id: str, url: str, name: str) -> None:
        """Swap a member's preview for the persisted document after upload."""
        for i, member in enumerate(self._members):
            if member.id == member_id:
                self._previews.revoke(member.document_url)
                self._members[i] = replace(
                    member, document_url=url, document_name=name, pending_file=None
                )
                return
        raise EntityNotFoundError("Member", member_id)

    def reset(self, members: list[Member]) -> None:
        for member in self._members:
            self._previews.revoke(member.document_url)
        self._release_form_preview()
        self._members = [replace(m) for m in members]
        self._form = Member()
        self._mode = Browsing()

    # ── Helpers ──────────────────────────────────────────────────────

    def _release_form_preview(self) -> None:
        url = self._form.document_url
        if self._previews.owns(url) and all(m.document_url != url for m in self._members):
            self._previews.revoke(url)

    def _require_browsing(self, action: str) -> None:
        if isinstance(self._mode, Editing):
            raise EditorStateError(
                f"Cannot {action} while another member is being edited; save or cancel it first"
            )
        if isinstance(self._mode, Viewing):
            self._mode = Browsing()

    def _require_editing(self) -> Editing:
        if not isinstance(self._mode, Editing):
            raise EditorStateError("No member is being added or edited")
        return self._mode

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._members):
            raise EntityNotFoundError("Member", index)

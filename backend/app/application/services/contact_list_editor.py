"""In-memory editor for an organization's contact list."""

from dataclasses import fields, replace
from typing import Any

from app.domain.entities import Contact
from app.domain.exceptions import EntityNotFoundError

_EDITABLE = frozenset(f.name for f in fields(Contact)) - {"id"}


class ContactListEditor:
    """Ordered draft list of contacts; nothing here touches the store.

    Invariant: at most one contact has ``is_primary`` set.
    """

    def __init__(self, contacts: list[Contact] | None = None):
        self._contacts: list[Contact] = []
        self.reset(contacts or [])

    @property
    def contacts(self) -> list[Contact]:
        return list(self._contacts)

    @property
    def primary(self) -> Contact | None:
        return next((c for c in self._contacts if c.is_primary), None)

    def add(self) -> Contact:
        """Append a blank contact; the first contact of a list starts as primary."""
        contact = Contact(is_primary=not self._contacts)
        self._contacts.append(contact)
        return contact

    def update(self, index: int, **changes: Any) -> Contact:
        """Shallow-merge ``changes`` into the contact at ``index``."""
        self._check_index(index)
        unknown = set(changes) - _EDITABLE
        if unknown:
            raise ValueError(f"Unknown contact field(s): {', '.join(sorted(unknown))}")

        if changes.get("is_primary"):
            self._clear_primary()
        self._contacts[index] = replace(self._contacts[index], **changes)
        return self._contacts[index]

    def set_primary(self, index: int) -> Contact:
        return self.update(index, is_primary=True)

    def remove(self, index: int) -> Contact:
        self._check_index(index)
        return self._contacts.pop(index)

    def reset(self, contacts: list[Contact]) -> None:
        self._contacts = [replace(c) for c in contacts]
        # Stored data may predate the single-primary rule; keep the first one.
        seen_primary = False
        for i, contact in enumerate(self._contacts):
            if contact.is_primary and seen_primary:
                self._contacts[i] = replace(contact, is_primary=False)
            seen_primary = seen_primary or contact.is_primary

    def _clear_primary(self) -> None:
        self._contacts = [
            replace(c, is_primary=False) if c.is_primary else c for c in self._contacts
        ]

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._contacts):
            raise EntityNotFoundError("Contact", index)

"""Form state for the base client record: live values plus per-field errors."""

from typing import Any

from app.application.schemas.client import (
    IndividualClientValues,
    OrganizationClientValues,
    parse_client_values,
)
from app.domain.entities import Client
from app.domain.exceptions import ValidationFailedError

CLIENT_FIELDS = (
    "name",
    "type",
    "description",
    "website",
    "address",
    "contact",
    "email",
    "phone",
)


def default_values() -> dict[str, Any]:
    values: dict[str, Any] = {name: "" for name in CLIENT_FIELDS}
    values["type"] = "organization"
    return values


def values_from_client(client: Client) -> dict[str, Any]:
    values = default_values()
    for name in CLIENT_FIELDS:
        value = getattr(client, name)
        if name == "type":
            value = client.type.value
        values[name] = value or ""
    return values


class ClientFormState:
    """Binds the client schema to the values being edited."""

    def __init__(self, values: dict[str, Any] | None = None):
        self._values = default_values()
        self._errors: dict[str, str] = {}
        self.reset(values)

    @property
    def values(self) -> dict[str, Any]:
        return dict(self._values)

    @property
    def errors(self) -> dict[str, str]:
        return dict(self._errors)

    @property
    def is_valid(self) -> bool:
        return not self._errors

    def watch(self, field: str) -> Any:
        if field not in self._values:
            raise KeyError(field)
        return self._values[field]

    def set_value(self, field: str, value: Any) -> None:
        if field not in CLIENT_FIELDS:
            raise KeyError(field)
        self._values[field] = "" if value is None else value
        # A touched field is re-checked on the next validate().
        self._errors.pop(field, None)

    def set_values(self, **values: Any) -> None:
        for field, value in values.items():
            self.set_value(field, value)

    def reset(self, values: dict[str, Any] | None = None) -> None:
        """Load another record's values, or the blank defaults for a new one."""
        self._values = default_values()
        for field, value in (values or {}).items():
            if field in CLIENT_FIELDS:
                self._values[field] = "" if value is None else value
        self._errors = {}

    def validate(self) -> OrganizationClientValues | IndividualClientValues | None:
        """Parse the current values; on failure record the field errors and return None."""
        try:
            parsed = parse_client_values(self._values)
        except ValidationFailedError as exc:
            self._errors = dict(exc.errors)
            return None
        self._errors = {}
        return parsed

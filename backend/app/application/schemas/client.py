"""Validation schemas and response DTOs for clients, contacts and members.

Client values are a discriminated union on ``type`` so that organization-only
behaviour (contacts, members) is decided once, by the parsed variant.
"""

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    EmailStr,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from app.domain.entities import ClientDetail, ClientSummary, ClientType, Member
from app.domain.exceptions import ValidationFailedError

_EMAIL = TypeAdapter(EmailStr)

_NAME_MESSAGES = {
    "client": "Name must be at least 2 characters",
    "contact": "Name must be at least 2 characters",
    "member": "Member name must be at least 2 characters long",
}


def _email_or_empty(value: str | None) -> str:
    if value is None or not value.strip():
        return ""
    try:
        _EMAIL.validate_python(value.strip())
    except ValidationError as exc:
        raise ValueError("Invalid email address") from exc
    return value.strip()


EmailOrEmpty = Annotated[str | None, AfterValidator(_email_or_empty)]


# ── Input values ─────────────────────────────────────────────────────

class ContactValues(BaseModel):
    """A contact row as submitted from the contacts tab."""

    model_config = {"str_strip_whitespace": True}

    id: str | None = None
    name: str = Field(..., min_length=2)
    position: str = ""
    email: EmailOrEmpty = ""
    phone: str = ""
    is_primary: bool = False


class MemberValues(BaseModel):
    """The member form slot. Email only needs to look like an address."""

    model_config = {"str_strip_whitespace": True}

    id: str | None = None
    name: str = Field(..., min_length=2)
    role: str = ""
    email: str = ""
    phone: str = ""
    notes: str = ""
    document_url: str = ""
    document_name: str = ""

    @field_validator("email")
    @classmethod
    def _email_has_at_sign(cls, value: str) -> str:
        if value and "@" not in value:
            raise ValueError("Please enter a valid email address")
        return value


class _ClientValuesBase(BaseModel):
    model_config = {"str_strip_whitespace": True}

    name: str = Field(..., min_length=2)
    description: str = ""
    website: str = ""
    address: str = ""
    contact: str = ""
    email: EmailOrEmpty = ""
    phone: str = ""


class OrganizationClientValues(_ClientValuesBase):
    type: Literal["organization"] = "organization"


class IndividualClientValues(_ClientValuesBase):
    type: Literal["individual"] = "individual"


ClientValues = Annotated[
    Union[OrganizationClientValues, IndividualClientValues],
    Field(discriminator="type"),
]

client_values_adapter: TypeAdapter[ClientValues] = TypeAdapter(ClientValues)

_CLIENT_TYPES = ("organization", "individual")


def _error_field(loc: tuple[Any, ...]) -> str:
    parts = [str(p) for p in loc]
    # Discriminated-union errors are prefixed with the tag of the variant.
    if parts and parts[0] in _CLIENT_TYPES:
        parts = parts[1:]
    return ".".join(parts) or "type"


def _error_message(error: dict[str, Any], field: str, entity: str) -> str:
    kind = error["type"]
    if kind == "string_too_short" and field.split(".")[-1] == "name":
        return _NAME_MESSAGES[entity]
    if kind in ("union_tag_invalid", "union_tag_not_found"):
        return "Type must be either 'organization' or 'individual'"
    if kind == "value_error":
        return str(error["ctx"]["error"])
    if kind == "missing":
        return "This field is required"
    return error["msg"]


def to_field_errors(exc: ValidationError, entity: str = "client", prefix: str = "") -> dict[str, str]:
    """Flatten a pydantic ValidationError into ``{field_path: message}``."""
    errors: dict[str, str] = {}
    for error in exc.errors():
        field = _error_field(tuple(error["loc"]))
        key = f"{prefix}{field}"
        errors.setdefault(key, _error_message(error, field, entity))
    return errors


def parse_client_values(raw: dict[str, Any]) -> OrganizationClientValues | IndividualClientValues:
    """Validate raw client fields; raises ValidationFailedError with a field map."""
    try:
        return client_values_adapter.validate_python(raw)
    except ValidationError as exc:
        raise ValidationFailedError(to_field_errors(exc, "client")) from exc


def parse_contact_values(raw: dict[str, Any], index: int | None = None) -> ContactValues:
    prefix = f"contacts.{index}." if index is not None else ""
    try:
        return ContactValues.model_validate(raw)
    except ValidationError as exc:
        raise ValidationFailedError(to_field_errors(exc, "contact", prefix)) from exc


def parse_member_values(raw: dict[str, Any]) -> MemberValues:
    try:
        return MemberValues.model_validate(raw)
    except ValidationError as exc:
        raise ValidationFailedError(to_field_errors(exc, "member")) from exc


# ── Responses ────────────────────────────────────────────────────────

class ClientDocumentResponse(BaseModel):
    id: str
    name: str
    url: str
    uploaded_at: str

    model_config = {"from_attributes": True}


class ContactResponse(BaseModel):
    id: str | None
    name: str
    position: str
    email: str
    phone: str
    is_primary: bool

    model_config = {"from_attributes": True}


class MemberResponse(BaseModel):
    id: str
    name: str
    role: str
    email: str
    phone: str
    notes: str
    document_url: str
    document_name: str
    has_pending_document: bool = False

    @classmethod
    def from_member(cls, member: Member) -> "MemberResponse":
        return cls(
            id=member.id,
            name=member.name,
            role=member.role,
            email=member.email,
            phone=member.phone,
            notes=member.notes,
            document_url=member.document_url,
            document_name=member.document_name,
            has_pending_document=member.pending_file is not None,
        )


class ClientResponse(BaseModel):
    """Schema returned for a single client record."""

    id: str
    name: str
    type: ClientType
    description: str | None
    website: str | None
    address: str | None
    contact: str | None
    email: str | None
    phone: str | None
    profile_image_url: str | None
    is_archived: bool
    documents: list[ClientDocumentResponse]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ClientSummaryResponse(ClientResponse):
    """List-view row with the counters the client list renders."""

    has_active_contract: bool
    contact_count: int
    member_count: int

    @classmethod
    def from_summary(cls, summary: ClientSummary) -> "ClientSummaryResponse":
        base = ClientResponse.model_validate(summary.client)
        return cls(
            **base.model_dump(),
            has_active_contract=summary.has_active_contract,
            contact_count=summary.contact_count,
            member_count=summary.member_count,
        )


class ClientDetailResponse(ClientResponse):
    contacts: list[ContactResponse]
    members: list[MemberResponse]

    @classmethod
    def from_detail(cls, detail: ClientDetail) -> "ClientDetailResponse":
        base = ClientResponse.model_validate(detail.client)
        return cls(
            **base.model_dump(),
            contacts=[ContactResponse.model_validate(c) for c in detail.contacts],
            members=[MemberResponse.from_member(m) for m in detail.members],
        )

from .client import (
    ClientDetailResponse,
    ClientDocumentResponse,
    ClientResponse,
    ClientSummaryResponse,
    ContactResponse,
    ContactValues,
    IndividualClientValues,
    MemberResponse,
    MemberValues,
    OrganizationClientValues,
    parse_client_values,
    parse_contact_values,
    parse_member_values,
)
from .client_editor import (
    ActiveTabRequest,
    ContactChangesRequest,
    EditorStateResponse,
    FormValuesRequest,
    MemberFormChangesRequest,
    OpenEditorRequest,
)

__all__ = [
    "ClientDetailResponse",
    "ClientDocumentResponse",
    "ClientResponse",
    "ClientSummaryResponse",
    "ContactResponse",
    "ContactValues",
    "IndividualClientValues",
    "MemberResponse",
    "MemberValues",
    "OrganizationClientValues",
    "parse_client_values",
    "parse_contact_values",
    "parse_member_values",
    "ActiveTabRequest",
    "ContactChangesRequest",
    "EditorStateResponse",
    "FormValuesRequest",
    "MemberFormChangesRequest",
    "OpenEditorRequest",
]

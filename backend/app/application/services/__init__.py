from .client_dialog import ClientDialog, DialogAction, DialogMode, DialogTab
from .client_form_state import ClientFormState
from .client_lifecycle_service import ClientLifecycleService
from .client_save_coordinator import ClientSaveCoordinator, SaveResult, SaveState
from .client_service import ClientService, ClientStatusFilter
from .client_upload_service import ClientUploadService
from .contact_list_editor import ContactListEditor
from .document_collection import DocumentCollection
from .editor_sessions import EditorSession, EditorSessionRegistry
from .member_editor import MemberEditor
from .preview_registry import PreviewRegistry
from .profile_image_editor import ProfileImageEditor
from .sse_manager import SSEManager

__all__ = [
    "ClientDialog",
    "DialogAction",
    "DialogMode",
    "DialogTab",
    "ClientFormState",
    "ClientLifecycleService",
    "ClientSaveCoordinator",
    "SaveResult",
    "SaveState",
    "ClientService",
    "ClientStatusFilter",
    "ClientUploadService",
    "ContactListEditor",
    "DocumentCollection",
    "EditorSession",
    "EditorSessionRegistry",
    "MemberEditor",
    "PreviewRegistry",
    "ProfileImageEditor",
    "SSEManager",
]

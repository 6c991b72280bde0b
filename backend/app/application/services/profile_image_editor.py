"""Profile image slot: one selected file and the preview shown for it."""

from app.application.services.client_upload_service import ClientUploadService
from app.application.services.preview_registry import PreviewRegistry
from app.domain.entities import PendingFile


class ProfileImageEditor:
    """Tracks a newly selected profile image until the client is saved.

    ``preview_url`` is either a session preview of the selected file or the
    URL already persisted on the client.
    """

    def __init__(
        self,
        uploads: ClientUploadService,
        previews: PreviewRegistry,
        initial_url: str | None = None,
    ):
        self._uploads = uploads
        self._previews = previews
        self._initial_url = initial_url
        self._file: PendingFile | None = None
        self._preview_url = initial_url

    @property
    def file(self) -> PendingFile | None:
        return self._file

    @property
    def preview_url(self) -> str | None:
        return self._preview_url

    @property
    def initial_url(self) -> str | None:
        return self._initial_url

    def change(self, file: PendingFile) -> str:
        self._previews.revoke(self._preview_url)
        self._file = file
        self._preview_url = self._previews.create(file)
        return self._preview_url

    def reset(self, url: str | None = None) -> None:
        self._previews.revoke(self._preview_url)
        self._file = None
        self._initial_url = url
        self._preview_url = url

    async def upload(self, client_id: str) -> str | None:
        """Upload the selected file; without one, the persisted URL is kept."""
        if self._file is None:
            return self._initial_url
        return await self._uploads.upload_profile_image(self._file, client_id)

    def mark_uploaded(self, url: str | None) -> None:
        """Adopt the persisted URL after a successful save."""
        self.reset(url)

"""Session-local preview URLs for files that have not been uploaded yet."""

import logging
from uuid import uuid4

from app.domain.entities import PendingFile

logger = logging.getLogger(__name__)


class PreviewRegistry:
    """Hands out temporary preview URLs and keeps their files until revoked.

    A preview URL is purely cosmetic: it lets the editor show a selected image
    or document before the real upload happens at save time. Every URL handed
    out must eventually be revoked; ``revoke_all`` runs when the owning editor
    session closes.
    """

    def __init__(self, base_url: str = "blob:preview"):
        self._base_url = base_url.rstrip("/")
        self._files: dict[str, PendingFile] = {}

    def create(self, file: PendingFile) -> str:
        token = uuid4().hex
        self._files[token] = file
        return f"{self._base_url}/{token}"

    def get(self, token: str) -> PendingFile | None:
        return self._files.get(token)

    def owns(self, url: str | None) -> bool:
        return bool(url) and url.startswith(f"{self._base_url}/")

    def revoke(self, url: str | None) -> bool:
        """Release a preview URL. URLs this registry did not issue are ignored."""
        if not self.owns(url):
            return False
        token = url.rsplit("/", 1)[-1]
        return self._files.pop(token, None) is not None

    def revoke_all(self) -> int:
        count = len(self._files)
        self._files.clear()
        if count:
            logger.debug("Revoked %d preview URL(s)", count)
        return count

    @property
    def live_count(self) -> int:
        return len(self._files)

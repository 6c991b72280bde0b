"""Abstract blob store interface (port) for uploaded files."""

from abc import ABC, abstractmethod


class BlobStorage(ABC):
    """Port for bucketed file storage with public URLs."""

    @abstractmethod
    async def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        *,
        content_type: str = "application/octet-stream",
        overwrite: bool = False,
    ) -> None:
        """Store ``content`` at ``bucket/path``.

        Raises StorageError when the object exists and ``overwrite`` is False.
        """
        ...

    @abstractmethod
    async def remove(self, bucket: str, paths: list[str]) -> int:
        """Remove objects; missing paths are skipped. Returns the number removed."""
        ...

    @abstractmethod
    def get_public_url(self, bucket: str, path: str) -> str:
        """Return the stable public URL of ``bucket/path``."""
        ...

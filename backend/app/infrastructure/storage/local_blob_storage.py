"""Local filesystem blob storage: bucketed files served under a public URL.

Storage layout:
    <root_dir>/<bucket>/<path>        — e.g. client-documents/<client_id>/<uuid>.pdf

Files are exposed by the web app at ``<public_base_url>/<bucket>/<path>``.
"""

import logging
import re
from pathlib import Path

from app.application.interfaces import BlobStorage
from app.domain.exceptions import StorageError

logger = logging.getLogger(__name__)

_SAFE_SEGMENT = re.compile(r"^[\w\-.]+$")


def _sanitise(name: str, max_len: int = 80) -> str:
    """Replace non-word characters with underscores and truncate."""
    return re.sub(r"[^\w\-]", "_", name)[:max_len].strip("_") or "unnamed"


class LocalBlobStorage(BlobStorage):
    """Infrastructure adapter for bucketed local file storage."""

    def __init__(self, root_dir: str | Path, public_base_url: str):
        self._root = Path(root_dir)
        self._root.mkdir(parents=True, exist_ok=True)
        self._public_base_url = public_base_url.rstrip("/")

    def _resolve(self, bucket: str, path: str) -> Path:
        """Map ``bucket/path`` onto disk, refusing anything outside the bucket."""
        segments = [s for s in path.split("/") if s]
        if not segments or any(s in (".", "..") or not _SAFE_SEGMENT.match(s) for s in segments):
            raise StorageError(bucket, path, "Invalid object path")
        return self._root.joinpath(_sanitise(bucket), *segments)

    # ── BlobStorage ─────────────────────────────────────────────────

    async def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        *,
        content_type: str = "application/octet-stream",
        overwrite: bool = False,
    ) -> None:
        dest_path = self._resolve(bucket, path)
        if dest_path.exists() and not overwrite:
            raise StorageError(bucket, path, "The resource already exists")

        try:
            dest_path.parent.mkdir(parents=True, exist_ok=True)
            dest_path.write_bytes(content)
        except OSError as exc:
            raise StorageError(bucket, path, str(exc)) from exc

        logger.info("Stored %s/%s (%d bytes, %s)", bucket, path, len(content), content_type)

    async def remove(self, bucket: str, paths: list[str]) -> int:
        removed = 0
        for path in paths:
            file_path = self._resolve(bucket, path)
            if not file_path.exists():
                continue
            try:
                file_path.unlink()
            except OSError as exc:
                raise StorageError(bucket, path, str(exc)) from exc
            removed += 1
            logger.info("Deleted %s/%s", bucket, path)
        return removed

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self._public_base_url}/{bucket}/{path.lstrip('/')}"

    # ── Utilities ───────────────────────────────────────────────────

    def exists(self, bucket: str, path: str) -> bool:
        return self._resolve(bucket, path).exists()

    @property
    def root_dir(self) -> Path:
        return self._root

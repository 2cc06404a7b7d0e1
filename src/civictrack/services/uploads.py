"""Photo upload acceptance and storage."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Sequence
from pathlib import Path, PurePath

from fastapi import UploadFile

from civictrack.core.errors import ValidationError
from civictrack.core.settings import settings

logger = logging.getLogger(__name__)

URL_PREFIX = "uploads"


class UploadStore:
    """Validates and persists the photos attached to a new issue.

    All files are checked before any is written, so a rejected request leaves
    nothing behind.
    """

    def __init__(
        self,
        upload_dir: str | Path | None = None,
        *,
        max_files: int | None = None,
        max_bytes: int | None = None,
    ) -> None:
        self.upload_dir = Path(upload_dir or settings.upload_dir)
        self.max_files = settings.upload_max_files if max_files is None else max_files
        self.max_bytes = settings.upload_max_bytes if max_bytes is None else max_bytes

    async def accept(self, files: Sequence[UploadFile]) -> list[str]:
        """Store ``files`` and return their public paths.

        Raises:
            ValidationError: Too many files, a file over the size limit, or a
                file that is not an image.
        """
        files = [upload for upload in files if upload.filename]
        if len(files) > self.max_files:
            raise ValidationError(f"At most {self.max_files} photos may be attached")

        payloads: list[tuple[str, bytes]] = []
        for upload in files:
            content_type = upload.content_type or ""
            if not content_type.startswith("image/"):
                raise ValidationError("Only image files are allowed")
            data = await upload.read(self.max_bytes + 1)
            if len(data) > self.max_bytes:
                raise ValidationError(
                    f"Photo {upload.filename} exceeds the {self.max_bytes} byte limit"
                )
            payloads.append((self._stored_name(upload.filename or ""), data))

        if not payloads:
            return []

        self.upload_dir.mkdir(parents=True, exist_ok=True)
        stored: list[str] = []
        for name, data in payloads:
            (self.upload_dir / name).write_bytes(data)
            stored.append(f"{URL_PREFIX}/{name}")
        logger.info("Stored %d photo(s)", len(stored))
        return stored

    def discard(self, paths: Sequence[str]) -> None:
        """Delete photos previously returned by :meth:`accept`."""
        for path in paths:
            (self.upload_dir / PurePath(path).name).unlink(missing_ok=True)
        if paths:
            logger.info("Discarded %d photo(s)", len(paths))

    @staticmethod
    def _stored_name(filename: str) -> str:
        suffix = PurePath(filename).suffix.lower()
        if not suffix[1:].isalnum():
            suffix = ""
        return f"{secrets.token_hex(16)}{suffix}"


def get_upload_store() -> UploadStore:
    """Return an upload store configured from settings."""
    return UploadStore()

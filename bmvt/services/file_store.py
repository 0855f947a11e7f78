"""
Local file store for uploaded photos and chat attachments.

Files live under ``<upload_directory>/<resource>/`` and are published by the
static mount at ``/uploads/<resource>/<name>``. Removal is idempotent and
never fails the caller: cleanup errors are logged for manual reconciliation.
"""

import logging
import re
import time
from pathlib import Path

from starlette.datastructures import UploadFile

from bmvt.core.config import settings
from bmvt.core.errors import ValidationError

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads/"


def upload_root() -> Path:
    return Path(settings.upload_directory).resolve()


class FileStore:
    """
    Store and remove files for one resource (``pelerins``, ``vols``, ``chat`` ...).
    """

    def __init__(self, resource: str):
        self.resource = resource

    @property
    def directory(self) -> Path:
        path = upload_root() / self.resource
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _sanitize_filename(self, filename: str) -> tuple[str, str]:
        """
        Split a client filename into a safe basename and extension.

        Keeps letters, digits, dots, dashes and underscores; everything
        else collapses to ``_``.
        """
        name = Path(filename or "").name
        path = Path(name)
        ext = re.sub(r"[^A-Za-z0-9.]", "", path.suffix.lower())
        base = re.sub(r"[^\w.-]+", "_", path.stem, flags=re.ASCII)
        base = re.sub(r"_+", "_", base).strip("_.")
        return (base or "file"), ext

    def store(self, field_name: str, original_filename: str, data: bytes) -> str:
        """
        Persist ``data`` and return its public path.

        Raises:
            ValidationError: when the file exceeds ``MAX_FILE_SIZE_MB``
        """
        if len(data) > settings.max_file_size_bytes:
            raise ValidationError(
                f"Fichier trop volumineux (max {settings.max_file_size_mb} Mo)."
            )

        base, ext = self._sanitize_filename(original_filename)
        directory = self.directory
        stamp = int(time.time() * 1000)
        target = directory / f"{stamp}_{base}{ext}"
        while target.exists():
            stamp += 1
            target = directory / f"{stamp}_{base}{ext}"

        target.write_bytes(data)
        public_path = f"{PUBLIC_PREFIX}{self.resource}/{target.name}"
        logger.info(f"Stored {field_name} upload as {public_path} ({len(data)} bytes)")
        return public_path

    async def save_upload(self, field_name: str, upload: UploadFile) -> str:
        """Read an uploaded part and store it."""
        data = await upload.read()
        return self.store(field_name, upload.filename or "", data)

    def resolve(self, public_path: str | None) -> Path | None:
        """
        Map a public path of this store to a file on disk.

        Returns None for other resources' paths, external URLs and
        traversal attempts.
        """
        prefix = f"{PUBLIC_PREFIX}{self.resource}/"
        if not public_path or not public_path.startswith(prefix):
            return None
        root = upload_root() / self.resource
        candidate = (root / public_path[len(prefix):]).resolve()
        if root not in candidate.parents:
            return None
        return candidate

    def remove(self, public_path: str | None) -> None:
        """Delete the file behind ``public_path`` if it exists."""
        path = self.resolve(public_path)
        if path is None:
            return
        try:
            path.unlink(missing_ok=True)
            logger.info(f"Removed file {public_path}")
        except OSError as e:
            logger.warning(f"Could not remove {public_path}: {e}")

    def remove_many(self, public_paths) -> None:
        for public_path in public_paths:
            self.remove(public_path)

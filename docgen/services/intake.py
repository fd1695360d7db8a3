"""Temporary storage for uploaded bulk data files."""

import logging
import uuid
from pathlib import Path

from docgen.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = frozenset({"csv", "xlsx", "xls"})


def file_format(filename: str | None) -> str:
    """Lowercase extension of an upload without the dot ("" when absent)."""
    return Path(filename or "").suffix.lower().lstrip(".")


class FileIntake:
    """Stores uploads under `upload_dir/bulk` until a batch has consumed them."""

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self._bulk_dir = Path(settings.upload_dir) / "bulk"

    def store_upload(self, filename: str, content: bytes) -> Path:
        """Write uploaded bytes to a uniquely named temporary file.

        Args:
            filename: Original client file name; only its extension is kept.
            content: Raw uploaded bytes.

        Returns:
            Path of the stored file.
        """
        self._bulk_dir.mkdir(parents=True, exist_ok=True)
        suffix = Path(filename or "").suffix.lower()
        path = self._bulk_dir / f"bulk_{uuid.uuid4().hex}{suffix}"
        path.write_bytes(content)
        logger.info(f"Stored upload {filename} at {path} ({len(content)} bytes)")
        return path

    def cleanup(self, path: Path | str | None) -> None:
        """Remove a stored upload. Never raises."""
        if path is None:
            return
        try:
            Path(path).unlink(missing_ok=True)
            logger.debug(f"Removed upload {path}")
        except OSError as e:
            logger.warning(f"Could not remove upload {path}: {e}")

"""Document generation: render one document and write it to the output directory."""

import asyncio
import itertools
import logging
import re
import threading
import time
import uuid
from collections.abc import Mapping
from pathlib import Path

from docgen.core.config import Settings, get_settings
from docgen.core.factory import ComponentFactory, get_factory
from docgen.interfaces.renderer import GeneratedDocument, RenderError
from docgen.template_engine.models import OutputKind, Template

logger = logging.getLogger(__name__)

_NAME_PATTERN = re.compile(r"[^A-Za-z0-9]")

_timestamp_lock = threading.Lock()
_last_timestamp = 0


def sanitize_name(value: str) -> str:
    """Strip every character outside [A-Za-z0-9]. Empty results become "document"."""
    cleaned = _NAME_PATTERN.sub("", value or "")
    return cleaned or "document"


def _monotonic_timestamp() -> int:
    """Microsecond wall-clock timestamp, strictly increasing within the process."""
    global _last_timestamp
    with _timestamp_lock:
        now = time.time_ns() // 1_000
        _last_timestamp = max(now, _last_timestamp + 1)
        return _last_timestamp


def build_file_name(recipient_name: str, output_kind: OutputKind) -> str:
    """Display name for a generated document: "{name}_{timestamp}.{ext}"."""
    return f"{sanitize_name(recipient_name)}_{_monotonic_timestamp()}.{output_kind.value}"


class DocumentGenerator:
    """Renders templates to files under the configured output directory.

    Files are addressed by artifact key, never by display name, so two
    recipients with the same name cannot overwrite each other.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        factory: ComponentFactory | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._factory = factory or get_factory()
        self._output_dir = Path(self._settings.output_dir)

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def path_for(self, artifact_key: str, output_kind: OutputKind) -> Path:
        return self._output_dir / f"{artifact_key}{output_kind.extension}"

    async def generate(
        self,
        template: Template,
        values: Mapping[str, str],
        recipient_name: str,
        output_kind: OutputKind | str,
        artifact_key: str | None = None,
    ) -> GeneratedDocument:
        """Render a template with values and store the result.

        Args:
            template: The template to render.
            values: Placeholder values for this document.
            recipient_name: Used for the display file name.
            output_kind: PDF or DOCX.
            artifact_key: Storage key. A random one is used when omitted.

        Returns:
            The GeneratedDocument descriptor.

        Raises:
            RenderError: If rendering or writing the file fails.
            ValueError: If the output kind is unknown.
        """
        renderer = self._factory.get_renderer(output_kind)
        kind = renderer.output_kind
        artifact_key = artifact_key or uuid.uuid4().hex
        file_path = self.path_for(artifact_key, kind)

        try:
            content = await asyncio.to_thread(
                renderer.render,
                template.source,
                category=template.category,
                title=template.name,
                values=dict(values),
            )
            self._output_dir.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(file_path.write_bytes, content)

        except RenderError:
            raise
        except OSError as e:
            logger.error(f"Failed to write {file_path}: {e}", exc_info=True)
            raise RenderError(f"Could not write generated document: {e}") from e
        except Exception as e:
            logger.error(f"Unexpected rendering failure for {template.name}: {e}", exc_info=True)
            raise RenderError(f"Document generation failed: {e}") from e

        document = GeneratedDocument(
            file_name=build_file_name(recipient_name, kind),
            file_path=file_path,
            output_kind=kind,
            artifact_key=artifact_key,
            size_bytes=len(content),
        )
        logger.debug(f"Generated {document.file_name} at {file_path} ({len(content)} bytes)")
        return document

    def cleanup_old_files(self, days_old: int = 7) -> int:
        """Delete generated files older than the given age.

        Args:
            days_old: Minimum age in days of files to delete.

        Returns:
            Number of files deleted.
        """
        cutoff = time.time() - days_old * 86_400
        deleted = 0

        if not self._output_dir.exists():
            return deleted

        for path in itertools.chain(self._output_dir.glob("*.pdf"), self._output_dir.glob("*.docx")):
            try:
                if path.stat().st_mtime < cutoff:
                    path.unlink()
                    deleted += 1
            except OSError as e:
                logger.warning(f"Could not remove old file {path}: {e}")

        logger.info(f"Cleaned up {deleted} generated files older than {days_old} days")
        return deleted

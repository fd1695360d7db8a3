"""Abstract base class for styled document renderers.

Renderers turn a template source plus row values into the bytes of a
PDF or Word document, styled by the template category's theme.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from docgen.template_engine.models import (
    MergeDocumentSource,
    OutputKind,
    PlainTextSource,
    TemplateCategory,
    TemplateSource,
)
from docgen.template_engine.substitution import substitute


class RenderError(Exception):
    """Raised when a document cannot be rendered or written."""


@dataclass(frozen=True)
class GeneratedDocument:
    """Descriptor of one rendered document on disk.

    Attributes:
        file_name: Display name, e.g. "JaneDoe_1718000000000001.pdf".
        file_path: Where the bytes were stored.
        output_kind: PDF or DOCX.
        artifact_key: Unique storage key the file is addressed by.
        size_bytes: Size of the written file.
    """

    file_name: str
    file_path: Path
    output_kind: OutputKind
    artifact_key: str
    size_bytes: int = 0

    @property
    def mime_type(self) -> str:
        return self.output_kind.mime_type


class BaseRenderer(ABC):
    """Abstract base class for rendering strategies.

    `render` dispatches on the source type: plain text sources are run
    through placeholder substitution and styled by `render_text`, merge
    documents go to `render_merge`. Backends that cannot merge keep the
    default, which styles the source's fallback body instead.
    """

    @property
    @abstractmethod
    def output_kind(self) -> OutputKind:
        """Return the output format produced by this renderer."""
        ...

    def render(
        self,
        source: TemplateSource,
        *,
        category: TemplateCategory,
        title: str,
        values: Mapping[str, str],
    ) -> bytes:
        """Render a template source with the given values.

        Args:
            source: Plain text or merge document source.
            category: Selects the visual theme.
            title: Heading text of the document.
            values: Placeholder values for this document.

        Returns:
            The rendered document bytes.

        Raises:
            RenderError: If rendering fails.
        """
        match source:
            case MergeDocumentSource():
                return self.render_merge(source, category=category, title=title, values=values)
            case PlainTextSource(body=body):
                return self.render_text(substitute(body, values), category=category, title=title)
            case _:
                raise RenderError(f"Unsupported template source: {type(source).__name__}")

    @abstractmethod
    def render_text(self, content: str, *, category: TemplateCategory, title: str) -> bytes:
        """Render already-substituted content with the category theme.

        Args:
            content: Body text with placeholders resolved.
            category: Selects the visual theme.
            title: Heading text of the document.

        Returns:
            The rendered document bytes.

        Raises:
            RenderError: If rendering fails.
        """
        ...

    def render_merge(
        self,
        source: MergeDocumentSource,
        *,
        category: TemplateCategory,
        title: str,
        values: Mapping[str, str],
    ) -> bytes:
        return self.render_text(
            substitute(source.fallback_body, values), category=category, title=title
        )

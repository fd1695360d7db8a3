"""Persistence collaborator interfaces.

The generation pipeline reads templates and records generated documents
through these interfaces only. It never writes templates.
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from docgen.interfaces.renderer import GeneratedDocument
from docgen.template_engine.models import DocumentStatus, StoredDocument, Template


class TemplateNotFoundError(Exception):
    """Raised when a template does not exist or is inactive."""

    def __init__(self, template_id: uuid.UUID | str) -> None:
        self.template_id = template_id
        super().__init__(f"Template not found: {template_id}")


class DocumentNotFoundError(Exception):
    """Raised when a generated document record or its file does not exist."""

    def __init__(self, record_id: uuid.UUID | str) -> None:
        self.record_id = record_id
        super().__init__(f"Document not found: {record_id}")


@dataclass(frozen=True)
class DocumentMetadata:
    """Context recorded alongside a generated document.

    Attributes:
        template_id: Template the document was generated from.
        recipient_name: Who the document is for.
        recipient_email: Optional delivery address.
        values: Placeholder values used for rendering.
        generated_by: Optional id of the requesting user.
        batch_id: Set for documents generated in bulk.
        row_index: 1-based source row for bulk documents.
    """

    template_id: uuid.UUID
    recipient_name: str
    recipient_email: str | None = None
    values: dict[str, Any] = field(default_factory=dict)
    generated_by: str | None = None
    batch_id: str | None = None
    row_index: int | None = None


@dataclass(frozen=True)
class DocumentQuery:
    """Filters and paging for listing generated documents.

    Filters left as None are not applied. Results are newest first.
    """

    template_id: uuid.UUID | None = None
    batch_id: str | None = None
    recipient_email: str | None = None
    generated_by: str | None = None
    status: DocumentStatus | None = None
    page: int = 1
    page_size: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class BaseTemplateStore(ABC):
    """Read access to templates."""

    @abstractmethod
    async def get_template(self, template_id: uuid.UUID) -> Template:
        """Fetch an active template.

        Raises:
            TemplateNotFoundError: If no active template has this id.
        """
        ...


class BaseDocumentStore(ABC):
    """Records of generated documents."""

    @abstractmethod
    async def save_document(self, document: GeneratedDocument, metadata: DocumentMetadata) -> str:
        """Persist a generated document descriptor.

        Returns:
            The id of the stored record.
        """
        ...

    @abstractmethod
    async def mark_sent(self, record_id: str, recipient_email: str | None = None) -> None:
        """Flag a stored document as delivered by email.

        A given recipient_email replaces the recorded address.
        """
        ...

    @abstractmethod
    async def mark_failed(self, record_id: str, error: str) -> None:
        """Flag a stored document whose delivery failed."""
        ...

    @abstractmethod
    async def get_document(self, record_id: str) -> GeneratedDocument | None:
        """Look up a stored document descriptor, or None if unknown."""
        ...

    @abstractmethod
    async def find_document(self, record_id: str) -> StoredDocument | None:
        """Look up a stored record with its delivery status, or None if unknown."""
        ...

    @abstractmethod
    async def list_documents(self, query: DocumentQuery) -> tuple[list[StoredDocument], int]:
        """List stored records matching a query.

        Returns:
            The requested page of records and the total number of matches.
        """
        ...
